"""
RoadRater Backend — Input Validation
======================================

What:  Pure functions that check request payloads before any I/O happens.
How:   No side effects, no database access. Services call these first and
       raise ValidationError when anything is reported.

Two policies live here on purpose:
    - validate_rating() accumulates EVERY violation so the client can fix
      the whole form in one round trip.
    - validate_username() / validate_password() stop at the FIRST failing
      rule and return a single message (or None).
"""

import re
from typing import Any, Dict, List, Optional

MAX_COMMENT_LENGTH = 500
MIN_RATING = 1
MAX_RATING = 5
MIN_USERNAME_LENGTH = 8
MAX_USERNAME_LENGTH = 50  # users.username is String(50)
MIN_PASSWORD_LENGTH = 8
# Ids are stored in 32-bit INTEGER columns.
MAX_ID = 2_147_483_647

_USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9]+$")
_DIGIT_PATTERN = re.compile(r"[0-9]")
_INTEGER_PATTERN = re.compile(r"^-?[0-9]+$")


def _is_int(value: Any) -> bool:
    # bool is a subclass of int but never a valid id or score
    return isinstance(value, int) and not isinstance(value, bool)


def _is_id(value: Any) -> bool:
    return _is_int(value) and 0 < value <= MAX_ID


def coerce_number(value: Any) -> Any:
    """
    Convert integer-looking input to int.

    "8" → 8, " 3 " → 3, 4.0 → 4. Strings are only parsed as plain decimal
    integers, so "4.5", "8.0" and "1e3" stay strings. Anything else (None,
    bools, fractional floats, lists) is returned unchanged for the validator
    to report.
    """
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else value
    if isinstance(value, str):
        stripped = value.strip()
        if _INTEGER_PATTERN.match(stripped):
            return int(stripped)
    return value


def normalize_rating_payload(
    segment_id: Any,
    user_id: Any,
    rating: Any,
    comment: Any,
) -> Dict[str, Any]:
    """
    Coerce ids and score to numbers and trim the comment.

    A comment that is empty after trimming becomes None. Non-string comments
    are passed through untouched so validation can reject them.
    """
    if isinstance(comment, str):
        comment = comment.strip() or None
    return {
        "segmentId": coerce_number(segment_id),
        "userId": coerce_number(user_id),
        "rating": coerce_number(rating),
        "comment": comment,
    }


def validate_rating(data: Dict[str, Any]) -> List[str]:
    """
    Validate a normalized rating payload.

    Args:
        data: dict with segmentId, rating, comment, userId keys

    Returns:
        Every violation found, in field order. Empty list means valid.
    """
    errors: List[str] = []

    segment_id = data.get("segmentId")
    if segment_id is None:
        errors.append("segmentId is required")
    elif not _is_id(segment_id):
        errors.append("segmentId must be a positive integer")

    rating = data.get("rating")
    if rating is None:
        errors.append("rating is required")
    elif not _is_int(rating):
        errors.append("rating must be an integer")
    elif rating < MIN_RATING or rating > MAX_RATING:
        errors.append(f"rating must be between {MIN_RATING} and {MAX_RATING}")

    comment = data.get("comment")
    if comment is not None:
        if not isinstance(comment, str):
            errors.append("comment must be a string")
        elif len(comment) > MAX_COMMENT_LENGTH:
            errors.append(f"comment must be {MAX_COMMENT_LENGTH} characters or fewer")

    user_id = data.get("userId")
    if user_id is None:
        errors.append("userId is required")
    elif not _is_id(user_id):
        errors.append("userId must be a positive integer")

    return errors


def validate_username(username: Any) -> Optional[str]:
    """First failing username rule, or None when valid."""
    if not isinstance(username, str):
        return "Username is required"
    trimmed = username.strip()
    if len(trimmed) < MIN_USERNAME_LENGTH:
        return f"Username must be at least {MIN_USERNAME_LENGTH} characters long"
    if len(trimmed) > MAX_USERNAME_LENGTH:
        return f"Username must be at most {MAX_USERNAME_LENGTH} characters long"
    if not _USERNAME_PATTERN.match(trimmed):
        return "Username may only contain letters and numbers"
    return None


def validate_password(password: Any) -> Optional[str]:
    """First failing password rule, or None when valid."""
    if not isinstance(password, str):
        return "Password is required"
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
    if not _DIGIT_PATTERN.search(password):
        return "Password must contain at least one number"
    return None


def parse_positive_int(value: Any) -> Optional[int]:
    """Parse a path/query id; None unless it is a positive integer that fits an id column."""
    number = coerce_number(value)
    if _is_id(number):
        return number
    return None
