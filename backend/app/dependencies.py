"""
CampFinder Backend — Request Dependencies
===========================================

What:  FastAPI dependencies shared by the routers:
       - protect:            bearer JWT → CurrentUser (401 otherwise)
       - authorise(*roles):  CurrentUser with one of `roles` (403 otherwise)
       - get_upload_config:  UploadConfig for the photo upload handler
How:   Tokens are HS256 JWTs verified with python-jose using settings.jwt_secret.
       The `sub` claim is the user id and the `role` claim the user's role.
       Issuing tokens belongs to the auth service, not this API.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from app.config import UploadConfig, settings
from app.exceptions import AuthenticationError, AuthorizationError

logger = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    id: str
    role: str


def create_access_token(user_id: str, role: str, expires_delta: timedelta = timedelta(days=30)) -> str:
    """Sign a token the way the auth service does. Used by tooling and tests."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_delta).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> CurrentUser:
    if not settings.jwt_secret:
        logger.error("JWT_SECRET is not configured; rejecting bearer token")
        raise AuthenticationError()
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.info("Rejected bearer token: %s", str(e))
        raise AuthenticationError()

    user_id = claims.get("sub")
    role = claims.get("role")
    if not user_id or not role:
        raise AuthenticationError()
    return CurrentUser(id=str(user_id), role=str(role))


async def protect(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> CurrentUser:
    if creds is None or not creds.credentials:
        raise AuthenticationError()
    return decode_access_token(creds.credentials)


def authorise(*roles: str) -> Callable:
    """
    Dependency factory restricting a route to the given roles.

    Example:
        @router.post("", dependencies=[Depends(authorise("publisher", "admin"))])
    """

    async def _check_role(user: CurrentUser = Depends(protect)) -> CurrentUser:
        if user.role not in roles:
            raise AuthorizationError(role=user.role)
        return user

    return _check_role


def get_upload_config() -> UploadConfig:
    return settings.upload_config
