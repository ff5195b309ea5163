"""
RoadRater Backend — Auth Service
==================================

What:  Registration, login and profile lookup.
How:   Credential rules from validators.py, hashing and token signing from
       security.py, persistence through the injected gateway. Hashing and
       verification are CPU-bound and run in a worker thread so they never
       stall the event loop.

Login never reveals whether a username exists: an unknown user and a wrong
password produce the same UnauthorizedError text.
"""

import logging
from typing import Any

from sqlalchemy import insert, select
from starlette.concurrency import run_in_threadpool

from roadrater.database import Database
from roadrater.exceptions import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from roadrater.models import User
from roadrater.schemas.user import TokenResponse, UserCreated, UserProfile
from roadrater.security import create_access_token, hash_password, verify_password
from roadrater.validators import validate_password, validate_username

logger = logging.getLogger(__name__)

MISSING_CREDENTIALS = "Username and password are required"
INVALID_CREDENTIALS = "Invalid credentials"


class AuthService:
    """Business logic for accounts and tokens."""

    def __init__(self, db: Database, jwt_secret: str):
        self.db = db
        self._jwt_secret = jwt_secret

    async def register(self, username: Any, password: Any) -> UserCreated:
        """
        Create an account.

        Raises:
            ValidationError: missing fields or a failed credential rule
                             (details = {"field": "username" | "password"})
            ConflictError:   the username is taken
        """
        if not username or not password:
            raise ValidationError(message=MISSING_CREDENTIALS)

        username_error = validate_username(username)
        if username_error:
            raise ValidationError(message=username_error, field="username")
        password_error = validate_password(password)
        if password_error:
            raise ValidationError(message=password_error, field="password")

        username = username.strip()
        hashed = await run_in_threadpool(hash_password, password)

        try:
            row = await self.db.fetch_one(
                insert(User)
                .values(username=username, password=hashed)
                .returning(User.id, User.username)
            )
        except ConflictError:
            logger.info("Registration rejected: username '%s' already exists", username)
            raise ConflictError(message="Username already exists")

        logger.info("Registered user %s (%s)", row["id"], row["username"])
        return UserCreated(id=row["id"], username=row["username"])

    async def login(self, username: Any, password: Any) -> TokenResponse:
        """
        Exchange credentials for a bearer token.

        Raises:
            ValidationError:   missing fields
            UnauthorizedError: unknown username or wrong password (same text)
        """
        if not username or not password or not isinstance(username, str) or not isinstance(password, str):
            raise ValidationError(message=MISSING_CREDENTIALS)

        user = await self.db.fetch_one(
            select(User.id, User.password).where(User.username == username.strip())
        )
        if user is None:
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if not await run_in_threadpool(verify_password, password, user["password"]):
            raise UnauthorizedError(INVALID_CREDENTIALS)

        return TokenResponse(token=create_access_token(user["id"], self._jwt_secret))

    async def get_user(self, user_id: int) -> UserProfile:
        """Profile for GET /auth/me. Raises NotFoundError if the account is gone."""
        row = await self.db.fetch_one(
            select(User.id, User.username, User.created_at).where(User.id == user_id)
        )
        if row is None:
            raise NotFoundError("User not found", resource="user", resource_id=user_id)
        return UserProfile.model_validate(row)
