"""
taskquest.database.models — SQLAlchemy 2.0 Data Models
=======================================================

Tables:
- profiles      — One row per user: completion counter, streak, last date
- badge_unlocks — Earned badges; row existence *is* the unlock flag
"""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Date, DateTime, Integer, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all TaskQuest ORM models."""


# ---------------------------------------------------------------------------
# Profiles — one row per user, owned by that user's event stream
# ---------------------------------------------------------------------------
class ProfileRow(Base):
    __tablename__ = "profiles"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    completed_task_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    streak: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_task_date: Mapped[date | None] = mapped_column(Date, default=None)
    # Set by the DB on insert and never updated afterwards.
    created_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def __repr__(self) -> str:
        return (
            f"<ProfileRow user={self.user_id!r} done={self.completed_task_count} "
            f"streak={self.streak}>"
        )


# ---------------------------------------------------------------------------
# BadgeUnlocks — created at most once per (user, badge), never deleted
# ---------------------------------------------------------------------------
class BadgeUnlockRow(Base):
    __tablename__ = "badge_unlocks"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    badge_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    # Display snapshot taken at unlock time
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    icon: Mapped[str] = mapped_column(String(16), nullable=False, default="")
    unlocked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<BadgeUnlockRow user={self.user_id!r} badge={self.badge_id!r}>"
