"""
RoadRater Backend — Road Segment Model
========================================

What:  ORM mapping of the `road_segments` table.
Who:   Read by RoadService and RatingService; rows are seeded externally,
       this service never creates or edits them.

Coordinates:
    latitude/longitude are nullable. A segment without coordinates is still
    rateable but cannot be placed on the map.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Float, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from roadrater.database import Base


class RoadSegment(Base):
    """A rateable stretch of road."""

    __tablename__ = "road_segments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<RoadSegment(id={self.id}, name='{self.name}')>"
