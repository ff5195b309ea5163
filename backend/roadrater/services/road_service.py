"""
RoadRater Backend — Road Service
==================================

What:  Read-only queries over road segments joined with their rating
       aggregates: paginated listing, single-segment detail, top 5.
How:   Each operation issues independent statements through the gateway.
       No transaction; concurrent writes may be partially visible.

Aggregate join (shared by every query here):
    SELECT s.*, count(r.id), round(avg(r.rating), 2)
    FROM road_segments s LEFT JOIN ratings r ON r.segment_id = s.id
    GROUP BY s.id
"""

import logging
from typing import Any

from sqlalchemy import asc, desc, func, nulls_last, select

from roadrater.database import Database
from roadrater.exceptions import NotFoundError, ValidationError
from roadrater.models import Rating, RoadSegment
from roadrater.schemas.road import RoadDetail, RoadListItem, RoadPage, TopRoads
from roadrater.services.rating_service import to_average
from roadrater.validators import MAX_ID, coerce_number, parse_positive_int

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 25
MAX_LIMIT = 100
TOP_ROADS_LIMIT = 5
# Keeps OFFSET within the id column range.
MAX_PAGE = MAX_ID // MAX_LIMIT


def clamp_page(value: Any) -> int:
    """Default 1, clamped to [1, MAX_PAGE]."""
    number = coerce_number(value)
    if not isinstance(number, int) or isinstance(number, bool):
        return DEFAULT_PAGE
    return min(max(number, 1), MAX_PAGE)


def clamp_limit(value: Any) -> int:
    """Default 25, clamped to [1, 100]."""
    number = coerce_number(value)
    if not isinstance(number, int) or isinstance(number, bool):
        return DEFAULT_LIMIT
    return min(max(number, 1), MAX_LIMIT)


def _with_rating_stats(*extra_columns):
    rating_count = func.count(Rating.id)
    return (
        select(
            RoadSegment.id,
            RoadSegment.name,
            RoadSegment.latitude,
            RoadSegment.longitude,
            RoadSegment.created_at,
            rating_count.label("rating_count"),
            func.round(func.avg(Rating.rating), 2).label("average_rating"),
            *extra_columns,
        )
        .select_from(RoadSegment)
        .outerjoin(Rating, Rating.segment_id == RoadSegment.id)
        .group_by(RoadSegment.id)
    )


def _road_item(row: dict) -> dict:
    row = dict(row)
    row["rating_count"] = row.get("rating_count") or 0
    row["average_rating"] = to_average(row.get("average_rating"))
    return row


class RoadService:
    """Business logic for browsing road segments."""

    def __init__(self, db: Database):
        self.db = db

    async def list_roads_page(self, page: Any = None, limit: Any = None) -> RoadPage:
        """
        One page of segments ordered by id ascending.

        Args:
            page:  1-based page number; missing/unparsable → 1, below 1 → 1
            limit: page size; missing/unparsable → 25, clamped to [1, 100]
        """
        page = clamp_page(page)
        limit = clamp_limit(limit)

        rows = await self.db.fetch_all(
            _with_rating_stats()
            .order_by(asc(RoadSegment.id))
            .limit(limit)
            .offset((page - 1) * limit)
        )
        total = await self.db.fetch_value(select(func.count(RoadSegment.id))) or 0

        roads = [RoadListItem.model_validate(_road_item(row)) for row in rows]
        return RoadPage(roads=roads, count=len(roads), total=total, page=page, limit=limit)

    async def get_road(self, road_id: Any) -> RoadDetail:
        """
        A single segment merged with count, average, min and max.

        Raises:
            ValidationError: road_id is not a positive integer
            NotFoundError:   no such segment
        """
        parsed_id = parse_positive_int(road_id)
        if parsed_id is None:
            raise ValidationError(message="Road id must be a positive integer")

        row = await self.db.fetch_one(
            _with_rating_stats(
                func.min(Rating.rating).label("min_rating"),
                func.max(Rating.rating).label("max_rating"),
            ).where(RoadSegment.id == parsed_id)
        )
        if row is None:
            raise NotFoundError("Road segment not found", resource="road_segment", resource_id=parsed_id)

        return RoadDetail.model_validate(_road_item(row))

    async def top_roads(self) -> TopRoads:
        """
        The five best-rated segments.

        Ordered by average DESC with NULLS LAST, then rating count DESC, then
        id. A segment without ratings has a NULL average and therefore always
        sorts below any segment with at least one rating.
        """
        rows = await self.db.fetch_all(
            _with_rating_stats()
            .order_by(
                nulls_last(desc(func.avg(Rating.rating))),
                desc(func.count(Rating.id)),
                asc(RoadSegment.id),
            )
            .limit(TOP_ROADS_LIMIT)
        )
        roads = [RoadListItem.model_validate(_road_item(row)) for row in rows]
        logger.debug("Top roads: %s", [road.id for road in roads])
        return TopRoads(count=len(roads), roads=roads)
