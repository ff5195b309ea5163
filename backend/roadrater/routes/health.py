"""
RoadRater Backend — Health Check Route
========================================

What:  Liveness probe for Docker health checks and load balancers.
How:   Answers from the process alone; it does not touch the database, so
       a slow pool never makes the probe flap. Not wrapped in the envelope.
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from roadrater import SERVICE_NAME, __version__
from roadrater.schemas.common import HealthResponse

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse, summary="Service heartbeat")
async def health_check() -> HealthResponse:
    return HealthResponse(
        ok=True,
        service=SERVICE_NAME,
        timestamp=datetime.now(timezone.utc),
        version=__version__,
    )
