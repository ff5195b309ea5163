"""
RoadRater Backend — Road Route Handlers
=========================================

What:  Segment browsing: paginated list, single segment, top-5 leaderboard.

Query parameters are taken as raw strings and clamped by RoadService, so
`?page=abc` falls back to the default instead of failing the request.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from roadrater.dependencies import get_road_service
from roadrater.responses import ok
from roadrater.schemas.common import ErrorEnvelope, SuccessEnvelope
from roadrater.schemas.road import RoadDetailResponse, RoadPage, TopRoads
from roadrater.services.road_service import RoadService

router = APIRouter(tags=["Roads"])


@router.get(
    "/roads",
    response_model=SuccessEnvelope[RoadPage],
    summary="List road segments with rating aggregates",
)
async def list_roads(
    page: Optional[str] = Query(default=None, description="1-based page number (default 1)"),
    limit: Optional[str] = Query(default=None, description="Page size, 1-100 (default 25)"),
    service: RoadService = Depends(get_road_service),
) -> SuccessEnvelope:
    return ok(await service.list_roads_page(page=page, limit=limit))


@router.get(
    "/roads/{road_id}",
    response_model=SuccessEnvelope[RoadDetailResponse],
    responses={
        400: {"description": "Road id is not a positive integer", "model": ErrorEnvelope},
        404: {"description": "Road segment not found", "model": ErrorEnvelope},
    },
    summary="One road segment merged with its rating statistics",
)
async def get_road(
    road_id: str,
    service: RoadService = Depends(get_road_service),
) -> SuccessEnvelope:
    road = await service.get_road(road_id)
    return ok(RoadDetailResponse(road=road))


@router.get(
    "/top5",
    response_model=SuccessEnvelope[TopRoads],
    summary="Five highest-rated road segments",
)
async def top5(service: RoadService = Depends(get_road_service)) -> SuccessEnvelope:
    return ok(await service.top_roads())
