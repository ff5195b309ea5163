"""
RoadRater Backend — Request ID Middleware
===========================================

What:  Gives every request a short correlation id, echoes it in the
       X-Request-ID response header, and stamps it onto every log record
       emitted while the request is being handled.
How:   The id lives in a ContextVar, so concurrent requests on the same
       event loop each see their own value. RequestIDLogFilter copies it
       onto LogRecord.request_id for the formatter configured in main.py.
"""

import logging
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDLogFilter(logging.Filter):
    """Adds `request_id` to each record ("-" outside of a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get("") or "-"
        return True


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Assigns a correlation id to each request.

    A client-supplied X-Request-ID is reused so frontend error reports can
    be matched to server logs; otherwise an 8-character id is generated.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
