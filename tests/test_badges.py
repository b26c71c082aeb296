"""
tests/test_badges.py — Badge Catalog & Context Assembly
========================================================

Pure tests: no database.  Store-backed unlocking is covered in
test_gamification_service.py.
"""

from __future__ import annotations

from datetime import UTC, datetime
from zoneinfo import ZoneInfo

import pytest

from taskquest.engine.badges import (
    BADGE_CATALOG,
    BadgeContext,
    BadgeDefinition,
    build_context,
    decorate_badges,
    evaluate_badge,
    is_morning,
)
from taskquest.engine.streak import Profile
from taskquest.exceptions import PredicateEvaluationFailure

CATALOG = {b.id: b for b in BADGE_CATALOG}


def _satisfied(ctx: BadgeContext) -> set[str]:
    return {b.id for b in BADGE_CATALOG if evaluate_badge(b, ctx)}


class TestCatalog:
    def test_order_is_fixed(self):
        assert [b.id for b in BADGE_CATALOG] == [
            "first_step",
            "consistent_mind",
            "focused_day",
            "morning_start",
            "productive_streak",
        ]

    def test_ids_unique(self):
        assert len(CATALOG) == len(BADGE_CATALOG)

    def test_display_metadata_present(self):
        for badge in BADGE_CATALOG:
            assert badge.name and badge.description and badge.icon


class TestPredicates:
    def test_first_step(self):
        ctx = BadgeContext(completed_task_count=1, is_first_time_user=True, streak=1)
        earned = _satisfied(ctx)
        assert "first_step" in earned
        assert "consistent_mind" not in earned
        assert "productive_streak" not in earned

    def test_first_step_needs_first_time_user(self):
        ctx = BadgeContext(completed_task_count=1, is_first_time_user=False)
        assert "first_step" not in _satisfied(ctx)

    def test_consistent_mind_at_three(self):
        assert "consistent_mind" in _satisfied(BadgeContext(streak=3))

    @pytest.mark.parametrize("streak", [2, 4])
    def test_consistent_mind_only_exactly_three(self, streak):
        assert "consistent_mind" not in _satisfied(BadgeContext(streak=streak))

    def test_consistent_mind_needs_full_completion(self):
        ctx = BadgeContext(streak=3, streak_completion_rate=80)
        assert "consistent_mind" not in _satisfied(ctx)

    def test_focused_day_regardless_of_streak_and_count(self):
        ctx = BadgeContext(total_tasks_today=3, streak=0, completed_task_count=57)
        assert "focused_day" in _satisfied(ctx)

    @pytest.mark.parametrize("today", [2, 4])
    def test_focused_day_only_exactly_three(self, today):
        assert "focused_day" not in _satisfied(BadgeContext(total_tasks_today=today))

    def test_morning_start(self):
        assert "morning_start" in _satisfied(BadgeContext(is_morning=True))
        assert "morning_start" not in _satisfied(BadgeContext(is_morning=False))

    @pytest.mark.parametrize("count, expected", [(9, False), (10, True), (11, True)])
    def test_productive_streak_threshold(self, count, expected):
        ctx = BadgeContext(completed_task_count=count)
        assert ("productive_streak" in _satisfied(ctx)) is expected


class TestEvaluateBadge:
    def test_failing_predicate_wrapped(self):
        def boom(ctx):
            raise KeyError("missing")

        badge = BadgeDefinition("broken", "Broken", "", "", boom)
        with pytest.raises(PredicateEvaluationFailure) as info:
            evaluate_badge(badge, BadgeContext())
        assert info.value.badge_id == "broken"
        assert isinstance(info.value.cause, KeyError)

    def test_truthy_result_coerced(self):
        badge = BadgeDefinition("count", "Count", "", "", lambda ctx: ctx.streak)
        assert evaluate_badge(badge, BadgeContext(streak=2)) is True


class TestBuildContext:
    def test_fields_from_profile_and_event(self):
        profile = Profile(
            completed_task_count=1,
            streak=1,
            created_at=datetime(2026, 3, 1, tzinfo=UTC),
        )
        ctx = build_context(profile, datetime(2026, 3, 1, 7, 30), 2)
        assert ctx.completed_task_count == 1
        assert ctx.is_first_time_user is True
        assert ctx.streak == 1
        assert ctx.streak_completion_rate == 100
        assert ctx.total_tasks_today == 2
        assert ctx.is_morning is True

    def test_not_first_time_without_created_at(self):
        ctx = build_context(Profile(completed_task_count=1), datetime(2026, 3, 1, 9), 0)
        assert ctx.is_first_time_user is False

    def test_not_first_time_after_first_completion(self):
        profile = Profile(completed_task_count=2, created_at=datetime(2026, 3, 1))
        ctx = build_context(profile, datetime(2026, 3, 1, 9), 0)
        assert ctx.is_first_time_user is False

    def test_morning_window_configurable(self):
        ctx = build_context(
            Profile(), datetime(2026, 3, 1, 5), 0,
            morning_start_hour=5, morning_end_hour=9,
        )
        assert ctx.is_morning is True


class TestIsMorning:
    @pytest.mark.parametrize("hour, expected", [
        (5, False), (6, True), (7, True), (11, True), (12, False), (14, False),
    ])
    def test_window_bounds(self, hour, expected):
        assert is_morning(datetime(2026, 3, 1, hour, 0)) is expected

    def test_uses_local_hour(self):
        # 23:00 UTC is 08:00 in Tokyo
        ts = datetime(2026, 3, 1, 23, 0, tzinfo=UTC)
        assert is_morning(ts) is False
        assert is_morning(ts, ZoneInfo("Asia/Tokyo")) is True


class TestDecorateBadges:
    def test_all_locked_when_nothing_unlocked(self):
        statuses = decorate_badges({})
        assert [s.badge.id for s in statuses] == [b.id for b in BADGE_CATALOG]
        assert not any(s.unlocked for s in statuses)
        assert all(s.unlocked_at is None for s in statuses)

    def test_unlocked_entries_carry_timestamp(self):
        when = datetime(2026, 3, 1, 8, 0)
        statuses = {s.badge.id: s for s in decorate_badges({"morning_start": when})}
        assert statuses["morning_start"].unlocked is True
        assert statuses["morning_start"].unlocked_at == when
        assert statuses["first_step"].unlocked is False

    def test_unknown_ids_ignored(self):
        statuses = decorate_badges({"retired_badge": None})
        assert len(statuses) == len(BADGE_CATALOG)
        assert not any(s.unlocked for s in statuses)

    def test_to_dict_shape(self):
        entry = decorate_badges({"focused_day": datetime(2026, 3, 1, 9)})[2].to_dict()
        assert entry == {
            "id": "focused_day",
            "name": "Third Time's the Charm",
            "description": "Completed all 3 tasks today",
            "icon": CATALOG["focused_day"].icon,
            "unlocked": True,
            "unlocked_at": "2026-03-01T09:00:00",
        }
