"""
RoadRater Backend — Envelope and Health Schemas
=================================================

What:  The uniform response envelopes every API route returns.

    success: {"success": true,  "data": {...}}
    failure: {"success": false, "error": "<message>", "details": <optional>}

/health is the one route that answers outside the envelope.
"""

from datetime import datetime
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

DataT = TypeVar("DataT")


class SuccessEnvelope(BaseModel, Generic[DataT]):
    success: bool = Field(default=True)
    data: DataT


class ErrorEnvelope(BaseModel):
    """
    Standardized error body.

    Fields:
        error:   Human-readable message (generic for internal errors)
        details: Violation list, offending field, or extra context
    """
    success: bool = Field(default=False)
    error: str = Field(description="Human-readable error description")
    details: Optional[Any] = Field(default=None, description="Additional error context")


class HealthResponse(BaseModel):
    ok: bool = Field(description="Always true while the process is serving")
    service: str = Field(description="Service identifier")
    timestamp: datetime = Field(description="Server time (UTC ISO 8601)")
    version: str = Field(description="Application version")
