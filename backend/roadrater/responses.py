"""
RoadRater Backend — Response Normalization
============================================

What:  Builds the success/error envelopes and maps the error taxonomy to
       HTTP status codes at the boundary.
Who:   Routes wrap their payloads with `ok()`; the exception handlers in
       main.py call `error_response()` / `error_from_exception()`.
"""

import logging
from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from roadrater.exceptions import (
    GENERIC_INTERNAL_MESSAGE,
    STATUS_BY_KIND,
    ErrorKind,
    RoadRaterError,
)
from roadrater.middleware.request_id import request_id_var
from roadrater.schemas.common import ErrorEnvelope, SuccessEnvelope

logger = logging.getLogger(__name__)


def ok(data: Any) -> SuccessEnvelope:
    """Wrap a payload in the success envelope."""
    return SuccessEnvelope(data=data)


def error_response(message: str, status_code: int, details: Optional[Any] = None) -> JSONResponse:
    body = ErrorEnvelope(error=message, details=details)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def error_from_exception(exc: RoadRaterError) -> JSONResponse:
    """
    Map an application error onto its status code and envelope.

    INTERNAL errors are logged with their full context and answered with a
    generic message; all other kinds are client-facing as raised.
    """
    status_code = STATUS_BY_KIND[exc.kind]
    rid = request_id_var.get("")

    if exc.kind is ErrorKind.INTERNAL:
        logger.error("[%s] Internal error: %s | Context: %s", rid, exc.message, exc.context)
        return error_response(GENERIC_INTERNAL_MESSAGE, status_code)

    if exc.kind is ErrorKind.VALIDATION:
        logger.warning("[%s] Validation error: %s", rid, exc.message)
    return error_response(exc.message, status_code, exc.details)
