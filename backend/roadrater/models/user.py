"""
RoadRater Backend — User Model
================================

What:  ORM mapping of the `users` table.
Lifecycle:
    Created on registration; never updated or deleted by this service.
    The password column only ever holds a salted hash.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from roadrater.database import Base


class User(Base):
    """A registered account allowed to submit ratings."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    username: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        comment="Alphanumeric, at least 8 characters",
    )

    password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Salted password hash (never plaintext)",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
