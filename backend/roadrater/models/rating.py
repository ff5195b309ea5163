"""
RoadRater Backend — Rating Model
==================================

What:  ORM mapping of the `ratings` table.
How:   Inserted only by RatingService.submit_rating, inside the same
       transaction that checks the segment exists. Never updated or deleted.

Query Patterns:
    - Feed for one segment: WHERE segment_id = :id ORDER BY created_at DESC
      → served by idx_ratings_segment_created
    - Aggregates per segment: GROUP BY segment_id
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from roadrater.database import Base


class Rating(Base):
    """One user's 1–5 score, with optional comment, for one segment."""

    __tablename__ = "ratings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    segment_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("road_segments.id", ondelete="CASCADE"),
        nullable=False,
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
    )

    rating: Mapped[int] = mapped_column(Integer, nullable=False)

    comment: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_ratings_rating_range"),
        Index("idx_ratings_segment_created", "segment_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Rating(id={self.id}, segment_id={self.segment_id}, "
            f"rating={self.rating})>"
        )
