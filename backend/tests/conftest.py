"""
CampFinder Backend — Test Configuration (conftest.py)
=======================================================

Shared fixtures. No database or network is needed: the AsyncSession is a mock,
the geocoder is patched per test, and uploads go to a temporary directory.

Fixtures:
    mock_db_session:    AsyncMock standing in for AsyncSession
    upload_config:      UploadConfig pointing at a fresh tmp directory
    sample_image_bytes: a tiny JPEG
    make_bootcamp:      factory for fully populated Bootcamp instances
    auth_header:        factory for "Authorization: Bearer ..." headers
    test_client:        httpx AsyncClient on the app, DB session overridden
"""

import os
import tempfile

# Must be set before app.config is imported anywhere
os.environ["JWT_SECRET"] = "test-secret"
os.environ["GEOCODER_API_KEY"] = "test-key-not-real"
os.environ["FILE_UPLOAD_PATH"] = tempfile.mkdtemp(prefix="campfinder_test_")
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.config import UploadConfig
from app.database import get_db_session
from app.dependencies import create_access_token
from app.models.bootcamp import Bootcamp


@pytest.fixture
def mock_db_session():
    """
    Usage:
        mock_db_session.execute.return_value = result_with(bootcamp)
        await bootcamp_service.get_bootcamp(mock_db_session, str(bootcamp.id))
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def upload_config(tmp_path):
    return UploadConfig(upload_path=tmp_path / "uploads", max_file_size=1_000)


@pytest.fixture
def sample_image_bytes():
    # SOI + JFIF header + EOI
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def make_bootcamp():
    def _make(**overrides) -> Bootcamp:
        fields = {
            "id": uuid4(),
            "name": "Devworks Bootcamp",
            "slug": "devworks-bootcamp",
            "description": "Full stack web development in 12 weeks",
            "website": "https://devworks.com",
            "phone": "(111) 111-1111",
            "email": "enroll@devworks.com",
            "address": "233 Bay State Rd Boston MA 02215",
            "longitude": -71.104028,
            "latitude": 42.350846,
            "formatted_address": "233 Bay State Rd, Boston, MA 02215, US",
            "street": "233 Bay State Rd",
            "city": "Boston",
            "state": "MA",
            "zipcode": "02215",
            "country": "US",
            "careers": ["Web Development", "UI/UX", "Business"],
            "average_rating": 8.0,
            "average_cost": 10000.0,
            "photo": "no-photo.jpg",
            "housing": True,
            "job_assistance": True,
            "job_guarantee": False,
            "accept_gi": True,
            "user_id": "user-1",
            "created_at": datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc),
        }
        fields.update(overrides)
        return Bootcamp(**fields)

    return _make


@pytest.fixture
def auth_header():
    def _header(role: str = "publisher", user_id: str = "user-1"):
        return {"Authorization": f"Bearer {create_access_token(user_id, role)}"}

    return _header


@pytest_asyncio.fixture
async def test_client(mock_db_session):
    """
    AsyncClient on the real app with get_db_session overridden.

    The lifespan is not run; routes and handlers don't depend on it.
    """
    from app.main import app

    async def _session_override():
        yield mock_db_session

    app.dependency_overrides[get_db_session] = _session_override
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.pop(get_db_session, None)
