"""
RoadRater Backend — Table Definitions
=======================================

Importing this package registers every table on `Base.metadata`.

    users ──< ratings >── road_segments
"""

from roadrater.models.rating import Rating
from roadrater.models.road_segment import RoadSegment
from roadrater.models.user import User

__all__ = ["Rating", "RoadSegment", "User"]
