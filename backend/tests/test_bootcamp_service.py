"""
CampFinder Backend — Bootcamp Service Unit Tests
==================================================

BootcampService against a mocked AsyncSession, with the geocoder and file
service patched at their import site in app.services.bootcamp_service.

What we test:
    ✅ Listing: count + page queries, pagination links, projection, filters
    ✅ Get/update/delete, including malformed and unknown ids
    ✅ Create: geocoding, slug, owner, duplicate names vs other integrity errors
    ✅ Radius search: distance parsing, unknown zipcodes, SQL predicate
    ✅ Photo upload: bootcamp checked first, filename recorded, stale files removed
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import IntegrityError, OperationalError

from app.dependencies import CurrentUser
from app.exceptions import DatabaseError, NotFoundError, ValidationError
from app.schemas.bootcamp import BootcampCreate, BootcampUpdate
from app.services.bootcamp_service import BootcampService, slugify
from app.services.geocoder_base import GeocodeResult

BOSTON = GeocodeResult(
    latitude=42.350846,
    longitude=-71.104028,
    formatted_address="233 Bay State Rd, Boston, MA 02215, US",
    street="233 Bay State Rd",
    city="Boston",
    state="MA",
    zipcode="02215",
    country="US",
)


def scalar_result(value):
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


def count_result(total):
    result = MagicMock()
    result.scalar_one.return_value = total
    return result


def rows_result(rows):
    result = MagicMock()
    result.mappings.return_value.all.return_value = rows
    return result


def statement_sql(call) -> str:
    statement = call.args[0]
    return str(statement.compile(dialect=postgresql.dialect()))


class DriverError(Exception):
    def __init__(self, message, sqlstate):
        super().__init__(message)
        self.sqlstate = sqlstate


def integrity_error(message, sqlstate):
    return IntegrityError("INSERT", {}, DriverError(message, sqlstate))


class TestSlugify:

    def test_basic(self):
        assert slugify("Devworks Bootcamp") == "devworks-bootcamp"

    def test_punctuation_and_accents(self):
        assert slugify("  Café & Code!! ") == "cafe-code"

    def test_nothing_left(self):
        assert slugify("!!!") == "bootcamp"


class TestListBootcamps:

    def setup_method(self):
        self.service = BootcampService()

    @pytest.mark.asyncio
    async def test_page_with_links(self, mock_db_session):
        rows = [{"id": uuid4(), "name": f"Camp {i}"} for i in range(10)]
        mock_db_session.execute.side_effect = [count_result(25), rows_result(rows)]

        result = await self.service.list_bootcamps(
            mock_db_session, {"page": "2", "limit": "10", "select": "name"}
        )

        assert result.success is True
        assert result.count == 10
        assert result.pagination["next"].page == 3
        assert result.pagination["prev"].page == 1
        assert result.data[0]["name"] == "Camp 0"

        page_sql = statement_sql(mock_db_session.execute.await_args_list[1])
        assert "ORDER BY bootcamps.created_at DESC" in page_sql
        assert "LIMIT" in page_sql and "OFFSET" in page_sql
        assert "bootcamps.description" not in page_sql

    @pytest.mark.asyncio
    async def test_filters_apply_to_count_and_page(self, mock_db_session):
        mock_db_session.execute.side_effect = [count_result(0), rows_result([])]

        result = await self.service.list_bootcamps(
            mock_db_session, {"average_cost[lte]": "10000", "housing": "true"}
        )

        assert result.count == 0
        assert result.pagination == {}
        count_sql = statement_sql(mock_db_session.execute.await_args_list[0])
        page_sql = statement_sql(mock_db_session.execute.await_args_list[1])
        for sql in (count_sql, page_sql):
            assert "bootcamps.average_cost <=" in sql
            assert "bootcamps.housing" in sql

    @pytest.mark.asyncio
    async def test_unknown_sort_field_uses_default_order(self, mock_db_session):
        mock_db_session.execute.side_effect = [count_result(0), rows_result([])]

        await self.service.list_bootcamps(mock_db_session, {"sort": "bogus"})

        page_sql = statement_sql(mock_db_session.execute.await_args_list[1])
        assert "ORDER BY bootcamps.created_at DESC" in page_sql

    @pytest.mark.asyncio
    async def test_unknown_filter_field(self, mock_db_session):
        with pytest.raises(ValidationError, match="Unknown filter field 'colour'"):
            await self.service.list_bootcamps(mock_db_session, {"colour": "red"})
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_database_failure(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))
        with pytest.raises(DatabaseError):
            await self.service.list_bootcamps(mock_db_session, {})


class TestGetUpdateDelete:

    def setup_method(self):
        self.service = BootcampService()

    @pytest.mark.asyncio
    async def test_get_found(self, mock_db_session, make_bootcamp):
        bootcamp = make_bootcamp()
        mock_db_session.execute.return_value = scalar_result(bootcamp)

        result = await self.service.get_bootcamp(mock_db_session, str(bootcamp.id))

        assert result.success is True
        assert result.data.id == bootcamp.id
        assert result.data.careers == ["Web Development", "UI/UX", "Business"]

    @pytest.mark.asyncio
    async def test_get_unknown_id(self, mock_db_session):
        missing = str(uuid4())
        mock_db_session.execute.return_value = scalar_result(None)

        with pytest.raises(NotFoundError) as exc_info:
            await self.service.get_bootcamp(mock_db_session, missing)
        assert exc_info.value.message == f"Bootcamp id {missing} not found"

    @pytest.mark.asyncio
    async def test_get_malformed_id_is_not_found(self, mock_db_session):
        with pytest.raises(NotFoundError, match="Bootcamp id 5d713995b721c3bb38c1f5d0 not found"):
            await self.service.get_bootcamp(mock_db_session, "5d713995b721c3bb38c1f5d0")
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_rename_regenerates_slug(self, mock_db_session, make_bootcamp):
        bootcamp = make_bootcamp()
        mock_db_session.execute.return_value = scalar_result(bootcamp)

        with patch("app.services.bootcamp_service.geocoder") as mock_geocoder:
            mock_geocoder.geocode = AsyncMock()
            result = await self.service.update_bootcamp(
                mock_db_session,
                str(bootcamp.id),
                BootcampUpdate(name="ModernTech Bootcamp", housing=False),
            )

        assert result.data.name == "ModernTech Bootcamp"
        assert result.data.slug == "moderntech-bootcamp"
        assert result.data.housing is False
        assert result.data.city == "Boston"
        mock_geocoder.geocode.assert_not_awaited()
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_null_never_clears_required_fields(self, mock_db_session, make_bootcamp):
        bootcamp = make_bootcamp()
        mock_db_session.execute.return_value = scalar_result(bootcamp)

        payload = BootcampUpdate(
            housing=None,
            job_assistance=None,
            job_guarantee=None,
            accept_gi=None,
            name=None,
            website=None,
        )
        result = await self.service.update_bootcamp(mock_db_session, str(bootcamp.id), payload)

        assert bootcamp.housing is True
        assert bootcamp.job_assistance is True
        assert bootcamp.job_guarantee is False
        assert bootcamp.accept_gi is True
        assert bootcamp.name == "Devworks Bootcamp"
        assert bootcamp.slug == "devworks-bootcamp"
        assert bootcamp.website is None
        assert result.data.housing is True

    @pytest.mark.asyncio
    async def test_update_address_is_geocoded(self, mock_db_session, make_bootcamp):
        bootcamp = make_bootcamp(city=None, latitude=None, longitude=None)
        mock_db_session.execute.return_value = scalar_result(bootcamp)

        with patch("app.services.bootcamp_service.geocoder") as mock_geocoder:
            mock_geocoder.geocode = AsyncMock(return_value=[BOSTON])
            result = await self.service.update_bootcamp(
                mock_db_session,
                str(bootcamp.id),
                BootcampUpdate(address="233 Bay State Rd Boston MA"),
            )

        mock_geocoder.geocode.assert_awaited_once_with("233 Bay State Rd Boston MA")
        assert result.data.city == "Boston"
        assert result.data.latitude == BOSTON.latitude

    @pytest.mark.asyncio
    async def test_delete(self, mock_db_session, make_bootcamp):
        bootcamp = make_bootcamp()
        mock_db_session.execute.return_value = scalar_result(bootcamp)

        result = await self.service.delete_bootcamp(mock_db_session, str(bootcamp.id))

        assert result.success is True
        assert result.data == {}
        mock_db_session.delete.assert_awaited_once_with(bootcamp)

    @pytest.mark.asyncio
    async def test_delete_unknown(self, mock_db_session):
        mock_db_session.execute.return_value = scalar_result(None)
        with pytest.raises(NotFoundError):
            await self.service.delete_bootcamp(mock_db_session, str(uuid4()))
        mock_db_session.delete.assert_not_awaited()


class TestCreateBootcamp:

    def setup_method(self):
        self.service = BootcampService()
        self.payload = BootcampCreate(
            name="Devworks Bootcamp",
            description="Full stack web development",
            address="233 Bay State Rd Boston MA 02215",
            careers=["Web Development", "UI/UX"],
            average_cost=10000,
            housing=True,
        )

    def _assign_server_defaults(self, session):
        def _flush():
            added = session.add.call_args.args[0]
            added.id = uuid4()
            added.photo = "no-photo.jpg"
            added.created_at = datetime.now(timezone.utc)
        return _flush

    @pytest.mark.asyncio
    async def test_create_success(self, mock_db_session):
        mock_db_session.flush = AsyncMock(side_effect=self._assign_server_defaults(mock_db_session))

        with patch("app.services.bootcamp_service.geocoder") as mock_geocoder:
            mock_geocoder.geocode = AsyncMock(return_value=[BOSTON])
            result = await self.service.create_bootcamp(
                mock_db_session, self.payload, user=CurrentUser(id="user-9", role="publisher")
            )

        assert result.success is True
        assert result.data.slug == "devworks-bootcamp"
        assert result.data.zipcode == "02215"
        assert result.data.longitude == BOSTON.longitude
        assert result.data.user_id == "user-9"
        assert result.data.housing is True
        assert result.data.job_guarantee is False
        mock_db_session.add.assert_called_once()

    @pytest.mark.asyncio
    async def test_unlocatable_address(self, mock_db_session):
        with patch("app.services.bootcamp_service.geocoder") as mock_geocoder:
            mock_geocoder.geocode = AsyncMock(return_value=[])
            with pytest.raises(ValidationError) as exc_info:
                await self.service.create_bootcamp(mock_db_session, self.payload)

        assert exc_info.value.field == "address"
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_duplicate_name(self, mock_db_session):
        mock_db_session.flush = AsyncMock(
            side_effect=integrity_error("duplicate key value", "23505")
        )

        with patch("app.services.bootcamp_service.geocoder") as mock_geocoder:
            mock_geocoder.geocode = AsyncMock(return_value=[BOSTON])
            with pytest.raises(ValidationError, match="Duplicate field value entered"):
                await self.service.create_bootcamp(mock_db_session, self.payload)

    @pytest.mark.asyncio
    async def test_other_integrity_error_is_not_reported_as_duplicate(self, mock_db_session):
        mock_db_session.flush = AsyncMock(
            side_effect=integrity_error("null value in column", "23502")
        )

        with patch("app.services.bootcamp_service.geocoder") as mock_geocoder:
            mock_geocoder.geocode = AsyncMock(return_value=[BOSTON])
            with pytest.raises(ValidationError) as exc_info:
                await self.service.create_bootcamp(mock_db_session, self.payload)

        assert exc_info.value.message == "Invalid field value entered"
        assert exc_info.value.field is None


class TestBootcampsInRadius:

    def setup_method(self):
        self.service = BootcampService()

    @pytest.mark.asyncio
    async def test_radius_search(self, mock_db_session, make_bootcamp):
        bootcamp = make_bootcamp()
        result_proxy = MagicMock()
        result_proxy.scalars.return_value.all.return_value = [bootcamp]
        mock_db_session.execute.return_value = result_proxy

        with patch("app.services.bootcamp_service.geocoder") as mock_geocoder:
            mock_geocoder.geocode = AsyncMock(return_value=[BOSTON])
            result = await self.service.bootcamps_in_radius(mock_db_session, "02118", "10")

        mock_geocoder.geocode.assert_awaited_once_with("02118")
        assert result.count == 1
        assert result.data[0].id == bootcamp.id
        assert "acos" in statement_sql(mock_db_session.execute.await_args)

    @pytest.mark.asyncio
    async def test_distance_must_be_numeric(self, mock_db_session):
        with patch("app.services.bootcamp_service.geocoder") as mock_geocoder:
            mock_geocoder.geocode = AsyncMock(return_value=[BOSTON])
            with pytest.raises(ValidationError) as exc_info:
                await self.service.bootcamps_in_radius(mock_db_session, "02118", "far")

        assert exc_info.value.field == "distance"
        mock_geocoder.geocode.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("distance", ["-5", "nan", "inf"])
    async def test_distance_must_be_finite_and_non_negative(self, mock_db_session, distance):
        with pytest.raises(ValidationError):
            await self.service.bootcamps_in_radius(mock_db_session, "02118", distance)

    @pytest.mark.asyncio
    async def test_unknown_zipcode(self, mock_db_session):
        with patch("app.services.bootcamp_service.geocoder") as mock_geocoder:
            mock_geocoder.geocode = AsyncMock(return_value=[])
            with pytest.raises(NotFoundError, match="No location found for zipcode 99999"):
                await self.service.bootcamps_in_radius(mock_db_session, "99999", "10")
        mock_db_session.execute.assert_not_awaited()


class TestUploadPhoto:

    def setup_method(self):
        self.service = BootcampService()

    @pytest.mark.asyncio
    async def test_photo_recorded(self, mock_db_session, make_bootcamp, upload_config):
        bootcamp = make_bootcamp()
        mock_db_session.execute.return_value = scalar_result(bootcamp)

        with patch("app.services.bootcamp_service.file_service") as mock_files:
            mock_files.save_photo = AsyncMock(return_value=f"photo_{bootcamp.id}.jpg")
            result = await self.service.upload_photo(
                mock_db_session,
                str(bootcamp.id),
                filename="campus.jpg",
                content_type="image/jpeg",
                content=b"img",
                config=upload_config,
            )

        assert result.data == f"photo_{bootcamp.id}.jpg"
        assert bootcamp.photo == f"photo_{bootcamp.id}.jpg"
        assert mock_files.save_photo.await_args.kwargs["config"] is upload_config

    @pytest.mark.asyncio
    async def test_unknown_bootcamp_checked_before_file(self, mock_db_session, upload_config):
        mock_db_session.execute.return_value = scalar_result(None)

        with patch("app.services.bootcamp_service.file_service") as mock_files:
            mock_files.save_photo = AsyncMock()
            with pytest.raises(NotFoundError):
                await self.service.upload_photo(
                    mock_db_session, str(uuid4()), None, None, None, upload_config
                )
        mock_files.save_photo.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_update_removes_new_file(self, mock_db_session, make_bootcamp, upload_config):
        bootcamp = make_bootcamp()
        mock_db_session.execute.return_value = scalar_result(bootcamp)
        mock_db_session.flush = AsyncMock(side_effect=OperationalError("UPDATE", {}, Exception("down")))

        with pytest.raises(DatabaseError):
            await self.service.upload_photo(
                mock_db_session, str(bootcamp.id), "campus.png", "image/png", b"img", upload_config
            )

        assert not (upload_config.upload_path / f"photo_{bootcamp.id}.png").exists()

    @pytest.mark.asyncio
    async def test_new_extension_removes_previous_photo(
        self, mock_db_session, make_bootcamp, upload_config
    ):
        bootcamp = make_bootcamp()
        old_name = f"photo_{bootcamp.id}.jpg"
        upload_config.upload_path.mkdir(parents=True)
        (upload_config.upload_path / old_name).write_bytes(b"old")
        bootcamp.photo = old_name
        mock_db_session.execute.return_value = scalar_result(bootcamp)

        result = await self.service.upload_photo(
            mock_db_session, str(bootcamp.id), "campus.png", "image/png", b"new", upload_config
        )

        assert result.data == f"photo_{bootcamp.id}.png"
        assert (upload_config.upload_path / result.data).read_bytes() == b"new"
        assert not (upload_config.upload_path / old_name).exists()
