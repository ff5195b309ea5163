"""
RoadRater Backend — Auth Schemas
==================================

Request bodies are deliberately loose (`Any`): credential rules are enforced
by validators.py so clients get the same messages whatever they send,
instead of FastAPI's generic type errors.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class CredentialsRequest(BaseModel):
    """Body of POST /auth/register and POST /auth/login."""
    username: Any = Field(default=None)
    password: Any = Field(default=None)


class UserCreated(BaseModel):
    """Returned by POST /auth/register. Never includes the password or hash."""
    id: int
    username: str


class TokenResponse(BaseModel):
    token: str = Field(description="HS256 bearer token, valid for one hour")


class UserProfile(BaseModel):
    id: int
    username: str
    created_at: datetime

    model_config = {"from_attributes": True}


class CurrentUserResponse(BaseModel):
    """Returned by GET /auth/me."""
    user: UserProfile
