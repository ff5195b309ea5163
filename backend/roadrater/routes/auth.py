"""
RoadRater Backend — Auth Route Handlers
=========================================

What:  Account registration, login and the current-user profile.
"""

from fastapi import APIRouter, Depends, status

from roadrater.dependencies import get_auth_service, require_identity
from roadrater.responses import ok
from roadrater.schemas.common import ErrorEnvelope, SuccessEnvelope
from roadrater.schemas.user import (
    CredentialsRequest,
    CurrentUserResponse,
    TokenResponse,
    UserCreated,
)
from roadrater.security import Identity
from roadrater.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessEnvelope[UserCreated],
    responses={
        400: {"description": "Missing or invalid credentials", "model": ErrorEnvelope},
        409: {"description": "Username already exists", "model": ErrorEnvelope},
    },
    summary="Register a new account",
)
async def register(
    payload: CredentialsRequest,
    service: AuthService = Depends(get_auth_service),
) -> SuccessEnvelope:
    return ok(await service.register(payload.username, payload.password))


@router.post(
    "/login",
    response_model=SuccessEnvelope[TokenResponse],
    responses={
        400: {"description": "Missing credentials", "model": ErrorEnvelope},
        401: {"description": "Invalid credentials", "model": ErrorEnvelope},
    },
    summary="Exchange credentials for a one-hour bearer token",
)
async def login(
    payload: CredentialsRequest,
    service: AuthService = Depends(get_auth_service),
) -> SuccessEnvelope:
    return ok(await service.login(payload.username, payload.password))


@router.get(
    "/me",
    response_model=SuccessEnvelope[CurrentUserResponse],
    responses={
        401: {"description": "Missing, invalid or expired token", "model": ErrorEnvelope},
        404: {"description": "Account no longer exists", "model": ErrorEnvelope},
    },
    summary="Profile of the authenticated user",
)
async def me(
    identity: Identity = Depends(require_identity),
    service: AuthService = Depends(get_auth_service),
) -> SuccessEnvelope:
    user = await service.get_user(identity.user_id)
    return ok(CurrentUserResponse(user=user))
