"""
RoadRater Backend — Password Hashing and Bearer Tokens
========================================================

What:  Salted adaptive password hashing (passlib, PBKDF2-SHA256) and signed
       HS256 bearer tokens (PyJWT).
Who:   AuthService hashes/verifies and issues tokens; the auth guard in
       dependencies.py verifies them.

Token payload:
    {"userId": 42, "sub": "42", "iat": <issued>, "exp": <issued + 1h>}
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt
from passlib.context import CryptContext

from roadrater.validators import MAX_ID

TOKEN_ALGORITHM = "HS256"
TOKEN_TTL = timedelta(hours=1)

_pwd = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class TokenError(Exception):
    """The bearer token is malformed, badly signed, expired or incomplete."""


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, attached to the request by the auth guard."""

    user_id: int


def hash_password(password: str) -> str:
    return _pwd.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return _pwd.verify(password, hashed)


def create_access_token(user_id: int, secret: str, now: datetime | None = None) -> str:
    """Sign a token for `user_id` that expires TOKEN_TTL after issuance."""
    issued = now or datetime.now(timezone.utc)
    claims: Dict[str, Any] = {
        "userId": user_id,
        "sub": str(user_id),
        "iat": int(issued.timestamp()),
        "exp": int((issued + TOKEN_TTL).timestamp()),
    }
    return jwt.encode(claims, secret, algorithm=TOKEN_ALGORITHM)


def decode_access_token(token: str, secret: str) -> Identity:
    """
    Verify signature and expiry and extract the identity.

    Raises:
        TokenError: for every failure, without saying which check failed.
    """
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[TOKEN_ALGORITHM],
            options={"require": ["exp"]},
        )
    except jwt.PyJWTError as exc:
        raise TokenError("Invalid or expired token") from exc

    user_id = payload.get("userId")
    if not isinstance(user_id, int) or isinstance(user_id, bool) or not 0 < user_id <= MAX_ID:
        raise TokenError("Invalid or expired token")
    return Identity(user_id=user_id)
