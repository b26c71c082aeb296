"""
taskquest.engine.streak — Daily Streak State Machine
=====================================================

Pure transition ``(profile, event timestamp) → profile'``.  No database
I/O; the service reads the profile, calls :func:`advance` and writes the
two changed fields back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, tzinfo

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Profile — the per-user running state
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class Profile:
    """Snapshot of one user's gamification profile.

    The default instance doubles as the "empty profile" returned to
    callers when nothing is stored yet.
    """

    completed_task_count: int = 0
    streak: int = 0
    last_task_date: date | None = None
    created_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "completed_task_count": self.completed_task_count,
            "streak": self.streak,
            "last_task_date": (
                self.last_task_date.isoformat() if self.last_task_date else None
            ),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def local_datetime(ts: datetime, tz: tzinfo | None = None) -> datetime:
    """Express *ts* in the local timezone *tz*.

    Naive timestamps are assumed to already be local and pass through.
    """
    if tz is None or ts.tzinfo is None:
        return ts
    return ts.astimezone(tz)


def local_date(ts: datetime, tz: tzinfo | None = None) -> date:
    """Calendar date of *ts* in *tz* (midnight-normalized)."""
    return local_datetime(ts, tz).date()


# ---------------------------------------------------------------------------
# Transition
# ---------------------------------------------------------------------------
def next_streak(streak: int, last: date | None, today: date) -> int:
    """Compute the new streak value.  First match wins:

    * never completed before → 1
    * same day → unchanged
    * next day → +1
    * gap of more than one day → 1
    * *today* earlier than *last* (late, out-of-order event) → unchanged
    """
    if last is None:
        return 1
    diff = (today - last).days
    if diff == 1:
        return streak + 1
    if diff > 1:
        return 1
    return streak


def advance(
    profile: Profile,
    event_timestamp: datetime,
    tz: tzinfo | None = None,
) -> Profile:
    """Return *profile* advanced by one completion at *event_timestamp*.

    ``last_task_date`` is always overwritten with the event's local date.
    All other fields are carried over untouched.
    """
    today = local_date(event_timestamp, tz)
    streak = next_streak(profile.streak, profile.last_task_date, today)

    if profile.last_task_date is not None and today < profile.last_task_date:
        logger.debug(
            "Out-of-order completion (%s before last %s); streak kept at %d",
            today, profile.last_task_date, streak,
        )

    return replace(profile, streak=streak, last_task_date=today)
