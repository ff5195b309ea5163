"""
RoadRater Backend — Road Segment Schemas
==========================================

What:  Response shapes for GET /roads, GET /roads/{id} and GET /top5.
       Aggregates are merged into the segment object; a segment with no
       ratings reports rating_count 0 and average_rating 0.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class RoadSegmentSummary(BaseModel):
    id: int
    name: str


class RoadListItem(BaseModel):
    """A segment plus its rating count and average."""
    id: int
    name: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    created_at: Optional[datetime] = None
    rating_count: int = Field(default=0)
    average_rating: float = Field(default=0.0, description="Mean score, 2 decimals")


class RoadDetail(RoadListItem):
    min_rating: Optional[int] = None
    max_rating: Optional[int] = None


class RoadPage(BaseModel):
    """
    One page of segments ordered by id.

    count is the number of rows on this page; total is the number of
    segments overall, for pagination controls.
    """
    roads: List[RoadListItem]
    count: int
    total: int
    page: int
    limit: int


class RoadDetailResponse(BaseModel):
    road: RoadDetail


class TopRoads(BaseModel):
    count: int
    roads: List[RoadListItem]
