"""
RoadRater Backend — Rating Service
====================================

What:  Submits ratings and reads a segment's rating feed with statistics.
How:   Composes the validators with the persistence gateway. The only
       multi-statement consistency contract in the system lives here.
Who:   Called by routes/ratings.py; constructed per request with the
       injected Database.

Submission flow (POST /ratings):
    normalize → validate ──(violations)──▶ ValidationError, no I/O
                  │
                  ▼
    ┌──────────────── one transaction ────────────────┐
    │ SELECT segment ──(missing)──▶ NotFoundError      │
    │ INSERT rating RETURNING ...                      │
    │ SELECT round(avg(rating), 2) for the segment     │
    └──────────────────────────────────────────────────┘
                  │ commit
                  ▼
    {rating, segment, newAverage}

    Any failure inside the block rolls back all three statements.
"""

import logging
from decimal import Decimal
from typing import Any, Optional, Union

from sqlalchemy import desc, func, insert, select

from roadrater.database import Database
from roadrater.exceptions import NotFoundError, ValidationError
from roadrater.models import Rating, RoadSegment
from roadrater.schemas.rating import (
    RatingOut,
    RatingStatistics,
    RatingSubmission,
    SegmentRatings,
)
from roadrater.schemas.road import RoadSegmentSummary
from roadrater.validators import normalize_rating_payload, parse_positive_int, validate_rating

logger = logging.getLogger(__name__)

SEGMENT_NOT_FOUND = "Road segment not found"


def to_average(value: Optional[Union[Decimal, float, int]]) -> float:
    """Database average → float with two decimals; no ratings → 0."""
    if value is None:
        return 0.0
    return round(float(value), 2)


class RatingService:
    """
    Business logic for ratings.

    Responsibilities:
        - submit_rating(): validated, atomic insert + average recompute
        - list_ratings(): newest-first feed plus count/average/min/max
    """

    def __init__(self, db: Database):
        self.db = db

    async def submit_rating(
        self,
        segment_id: Any,
        user_id: Any,
        rating: Any,
        comment: Any = None,
    ) -> RatingSubmission:
        """
        Record a rating and return the segment's recomputed average.

        Args:
            segment_id: Target segment (coerced to int)
            user_id:    Identity resolved by the auth guard
            rating:     Score, integer in [1, 5]
            comment:    Optional text, at most 500 characters after trimming

        Raises:
            ValidationError: any rule failed; details lists every violation
            NotFoundError:   the segment does not exist (nothing is written)
            ConflictError / DatabaseError: translated by the gateway
        """
        payload = normalize_rating_payload(segment_id, user_id, rating, comment)
        errors = validate_rating(payload)
        if errors:
            logger.info("Rejected rating payload: %s", "; ".join(errors))
            raise ValidationError(message="Validation failed", details=errors)

        segment_id = payload["segmentId"]

        async with self.db.transaction() as tx:
            segment = await tx.fetch_one(
                select(RoadSegment.id, RoadSegment.name).where(RoadSegment.id == segment_id)
            )
            if segment is None:
                raise NotFoundError(SEGMENT_NOT_FOUND, resource="road_segment", resource_id=segment_id)

            row = await tx.fetch_one(
                insert(Rating)
                .values(
                    segment_id=segment_id,
                    user_id=payload["userId"],
                    rating=payload["rating"],
                    comment=payload["comment"],
                )
                .returning(
                    Rating.id,
                    Rating.segment_id,
                    Rating.user_id,
                    Rating.rating,
                    Rating.comment,
                    Rating.created_at,
                )
            )

            average = await tx.fetch_value(
                select(func.round(func.avg(Rating.rating), 2)).where(Rating.segment_id == segment_id)
            )

        logger.info(
            "Rating %s recorded for segment %s by user %s (new average %s)",
            row["id"],
            segment_id,
            payload["userId"],
            average,
        )

        return RatingSubmission(
            rating=RatingOut.model_validate(row),
            segment=RoadSegmentSummary.model_validate(segment),
            new_average=to_average(average),
        )

    async def list_ratings(
        self,
        segment_id: Any,
        requested_by: Optional[int] = None,
    ) -> SegmentRatings:
        """
        Ratings for one segment, newest first, with aggregate statistics.

        Read-only and non-transactional: the feed and the statistics are
        separate statements and may observe different concurrent writes.

        Raises:
            ValidationError: segment_id is not a positive integer
            NotFoundError:   the segment does not exist
        """
        parsed_id = parse_positive_int(segment_id)
        if parsed_id is None:
            raise ValidationError(message="segmentId must be a positive integer")

        segment = await self.db.fetch_one(
            select(RoadSegment.id, RoadSegment.name).where(RoadSegment.id == parsed_id)
        )
        if segment is None:
            raise NotFoundError(SEGMENT_NOT_FOUND, resource="road_segment", resource_id=parsed_id)

        rows = await self.db.fetch_all(
            select(
                Rating.id,
                Rating.segment_id,
                Rating.user_id,
                Rating.rating,
                Rating.comment,
                Rating.created_at,
            )
            .where(Rating.segment_id == parsed_id)
            .order_by(desc(Rating.created_at), desc(Rating.id))
        )

        stats = await self.db.fetch_one(
            select(
                func.count(Rating.id).label("count"),
                func.round(func.avg(Rating.rating), 2).label("average"),
                func.min(Rating.rating).label("min"),
                func.max(Rating.rating).label("max"),
            ).where(Rating.segment_id == parsed_id)
        ) or {}

        return SegmentRatings(
            segment=RoadSegmentSummary.model_validate(segment),
            statistics=RatingStatistics(
                count=stats.get("count") or 0,
                average=to_average(stats.get("average")),
                min=stats.get("min"),
                max=stats.get("max"),
            ),
            ratings=[RatingOut.model_validate(row) for row in rows],
            requested_by=requested_by,
        )
