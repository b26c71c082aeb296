"""
taskquest.engine.badges — Badge Catalog & Rule Evaluation
==========================================================

Every badge is a :class:`BadgeDefinition` whose predicate receives the same
:class:`BadgeContext` and returns a bool.  The catalog is static and
evaluated in declaration order so results are reproducible.

This module is pure calculation — no database I/O.  Unlock persistence
lives in :mod:`taskquest.services.gamification_service`.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, tzinfo

from taskquest.engine.streak import Profile, local_datetime
from taskquest.exceptions import PredicateEvaluationFailure

# TODO: derive this from a per-day task/completion history once the profile
# records one.  Until then consistent_mind only depends on the streak.
STREAK_COMPLETION_RATE_PLACEHOLDER = 100

MORNING_START_HOUR = 6
MORNING_END_HOUR = 12


# ---------------------------------------------------------------------------
# Badge Context — passed to every predicate
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class BadgeContext:
    """Everything a badge predicate may look at.

    Parameters
    ----------
    completed_task_count : Total completions, including this event.
    is_first_time_user : Profile has a creation time and this is the
        very first completion.
    streak : Consecutive-day streak after this event.
    streak_completion_rate : Percentage of tasks completed over the last
        three streak days.
    total_tasks_today : Tasks created on the event's calendar day.
    is_morning : Event happened between the morning window hours.
    """

    completed_task_count: int = 0
    is_first_time_user: bool = False
    streak: int = 0
    streak_completion_rate: int = STREAK_COMPLETION_RATE_PLACEHOLDER
    total_tasks_today: int = 0
    is_morning: bool = False


@dataclass(frozen=True, slots=True)
class BadgeDefinition:
    """A one-time achievement and its unlock rule."""

    id: str
    name: str
    description: str
    icon: str
    predicate: Callable[[BadgeContext], bool]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
        }


@dataclass(frozen=True, slots=True)
class BadgeStatus:
    """A catalog badge decorated with one user's unlock state."""

    badge: BadgeDefinition
    unlocked: bool = False
    unlocked_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            **self.badge.to_dict(),
            "unlocked": self.unlocked,
            "unlocked_at": self.unlocked_at.isoformat() if self.unlocked_at else None,
        }


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------
BADGE_CATALOG: tuple[BadgeDefinition, ...] = (
    BadgeDefinition(
        id="first_step",
        name="Headstart",
        description="You completed your first task!",
        icon="\U0001f3c1",  # 🏁
        predicate=lambda ctx: ctx.completed_task_count == 1 and ctx.is_first_time_user,
    ),
    BadgeDefinition(
        id="consistent_mind",
        name="Mushroom Madness",
        description="Completed all tasks for 3 days in a row",
        icon="\U0001f344",  # 🍄
        predicate=lambda ctx: ctx.streak == 3 and ctx.streak_completion_rate == 100,
    ),
    BadgeDefinition(
        id="focused_day",
        name="Third Time's the Charm",
        description="Completed all 3 tasks today",
        icon="\U0001f5d3\ufe0f",  # 🗓️
        predicate=lambda ctx: ctx.total_tasks_today == 3,
    ),
    BadgeDefinition(
        id="morning_start",
        name="Early Bird",
        description="Completed a task between 06:00–12:00",
        icon="\U0001f305",  # 🌅
        predicate=lambda ctx: ctx.is_morning,
    ),
    BadgeDefinition(
        id="productive_streak",
        name="Tenacious Ten",
        description="Completed 10 tasks in Total",
        icon="\U0001f396\ufe0f",  # 🎖️
        predicate=lambda ctx: ctx.completed_task_count >= 10,
    ),
)


# ---------------------------------------------------------------------------
# Context assembly
# ---------------------------------------------------------------------------
def is_morning(
    ts: datetime,
    tz: tzinfo | None = None,
    start_hour: int = MORNING_START_HOUR,
    end_hour: int = MORNING_END_HOUR,
) -> bool:
    """True if *ts* falls in ``[start_hour, end_hour)`` local time."""
    return start_hour <= local_datetime(ts, tz).hour < end_hour


def build_context(
    profile: Profile,
    completed_at: datetime,
    total_tasks_today: int,
    *,
    tz: tzinfo | None = None,
    morning_start_hour: int = MORNING_START_HOUR,
    morning_end_hour: int = MORNING_END_HOUR,
) -> BadgeContext:
    """Assemble a :class:`BadgeContext` from the updated *profile* and the
    event that produced it."""
    count = profile.completed_task_count
    return BadgeContext(
        completed_task_count=count,
        is_first_time_user=profile.created_at is not None and count == 1,
        streak=profile.streak,
        streak_completion_rate=STREAK_COMPLETION_RATE_PLACEHOLDER,
        total_tasks_today=total_tasks_today,
        is_morning=is_morning(completed_at, tz, morning_start_hour, morning_end_hour),
    )


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------
def evaluate_badge(badge: BadgeDefinition, ctx: BadgeContext) -> bool:
    """Run *badge*'s predicate.

    Raises
    ------
    PredicateEvaluationFailure
        If the predicate itself raises.
    """
    try:
        return bool(badge.predicate(ctx))
    except Exception as exc:
        raise PredicateEvaluationFailure(badge.id, exc) from exc


def decorate_badges(
    unlocks: dict[str, datetime | None],
    catalog: Iterable[BadgeDefinition] = BADGE_CATALOG,
) -> list[BadgeStatus]:
    """Pair every catalog badge with its unlock state.

    *unlocks* maps badge id → unlock time for the badges a user holds.
    Ids not in the catalog are ignored; order follows *catalog*.
    """
    return [
        BadgeStatus(
            badge=badge,
            unlocked=badge.id in unlocks,
            unlocked_at=unlocks.get(badge.id),
        )
        for badge in catalog
    ]
