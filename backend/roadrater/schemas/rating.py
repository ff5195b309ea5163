"""
RoadRater Backend — Rating Schemas
====================================

What:  Request and response shapes for POST /ratings and GET /ratings/{id}.
How:   Client-facing keys are camelCase (segmentId, newAverage, requestedBy)
       via aliases; rating rows keep their column names (segment_id, ...).
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from roadrater.schemas.road import RoadSegmentSummary


class RatingCreate(BaseModel):
    """
    Body of POST /ratings.

    Fields are untyped so RatingService can normalize and report every
    violation at once. The submitting user always comes from the bearer
    token; a userId in the body is ignored.
    """
    model_config = ConfigDict(populate_by_name=True)

    segment_id: Any = Field(default=None, alias="segmentId")
    rating: Any = Field(default=None)
    comment: Any = Field(default=None)


class RatingOut(BaseModel):
    id: int
    segment_id: int
    user_id: int
    rating: int
    comment: Optional[str] = None
    created_at: datetime


class RatingSubmission(BaseModel):
    """Returned by POST /ratings with HTTP 201."""
    model_config = ConfigDict(populate_by_name=True)

    rating: RatingOut
    segment: RoadSegmentSummary
    new_average: float = Field(alias="newAverage", description="Segment mean including this rating")


class RatingStatistics(BaseModel):
    count: int
    average: float = Field(description="Mean score, 2 decimals; 0 when there are no ratings")
    min: Optional[int] = None
    max: Optional[int] = None


class SegmentRatings(BaseModel):
    """Returned by GET /ratings/{segmentId}; ratings are newest first."""
    model_config = ConfigDict(populate_by_name=True)

    segment: RoadSegmentSummary
    statistics: RatingStatistics
    ratings: List[RatingOut]
    requested_by: Optional[int] = Field(default=None, alias="requestedBy")
