"""
RoadRater Backend — Request Dependencies and Auth Guard
=========================================================

What:  FastAPI dependencies that hand routes their collaborators.
How:   The gateway and settings live on `app.state` (set by create_app);
       services are built per request around them. Tests replace any of
       these through `app.dependency_overrides`.

Auth guard modes:
    require_identity   Missing/malformed header or bad token → 401.
    optional_identity  Any failure → continue anonymously (None).

    Both attach the resolved Identity to `request.state.identity`.
"""

import logging
from typing import Optional

from fastapi import Depends, Request

from roadrater.config import Settings
from roadrater.database import Database
from roadrater.exceptions import UnauthorizedError
from roadrater.security import Identity, TokenError, decode_access_token
from roadrater.services.auth_service import AuthService
from roadrater.services.rating_service import RatingService
from roadrater.services.road_service import RoadService

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_rating_service(db: Database = Depends(get_database)) -> RatingService:
    return RatingService(db)


def get_road_service(db: Database = Depends(get_database)) -> RoadService:
    return RoadService(db)


def get_auth_service(
    db: Database = Depends(get_database),
    settings: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(db, settings.jwt_secret)


def extract_bearer_token(header: Optional[str]) -> Optional[str]:
    """Token from an `Authorization: Bearer <token>` header, else None."""
    if not header or not header.startswith(BEARER_PREFIX):
        return None
    token = header[len(BEARER_PREFIX):].strip()
    return token or None


async def require_identity(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> Identity:
    """
    Required mode of the auth guard.

    Raises:
        UnauthorizedError: "Authentication required" when no bearer token is
            present, "Invalid or expired token" for every verification failure.
    """
    token = extract_bearer_token(request.headers.get("Authorization"))
    if token is None:
        raise UnauthorizedError("Authentication required")

    try:
        identity = decode_access_token(token, settings.jwt_secret)
    except TokenError:
        raise UnauthorizedError("Invalid or expired token")

    request.state.identity = identity
    return identity


async def optional_identity(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> Optional[Identity]:
    """Optional mode of the auth guard: never fails, may return None."""
    token = extract_bearer_token(request.headers.get("Authorization"))
    if token is None:
        return None

    try:
        identity = decode_access_token(token, settings.jwt_secret)
    except TokenError as exc:
        logger.debug("Ignoring optional bearer token: %s", exc)
        return None

    request.state.identity = identity
    return identity
