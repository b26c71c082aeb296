"""
tests/test_streak.py — Daily Streak Transition
===============================================
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

import pytest

from taskquest.engine.streak import Profile, advance, local_date, next_streak


def _at(day: int, hour: int = 12, month: int = 3) -> datetime:
    return datetime(2026, month, day, hour, 0, 0)


class TestNextStreak:
    def test_first_completion_starts_streak(self):
        assert next_streak(0, None, date(2026, 3, 1)) == 1

    def test_first_completion_ignores_stale_value(self):
        assert next_streak(7, None, date(2026, 3, 1)) == 1

    def test_same_day_unchanged(self):
        assert next_streak(4, date(2026, 3, 1), date(2026, 3, 1)) == 4

    def test_next_day_increments(self):
        assert next_streak(4, date(2026, 3, 1), date(2026, 3, 2)) == 5

    @pytest.mark.parametrize("gap", [2, 3, 30])
    def test_gap_resets(self, gap):
        last = date(2026, 3, 1)
        today = date.fromordinal(last.toordinal() + gap)
        assert next_streak(9, last, today) == 1

    def test_out_of_order_event_unchanged(self):
        assert next_streak(3, date(2026, 3, 5), date(2026, 3, 4)) == 3


class TestAdvance:
    def test_no_prior_date_sets_one(self):
        after = advance(Profile(), _at(1))
        assert after.streak == 1
        assert after.last_task_date == date(2026, 3, 1)

    def test_always_overwrites_last_date(self):
        before = Profile(streak=2, last_task_date=date(2026, 3, 1))
        after = advance(before, _at(1, hour=23))
        assert after.streak == 2
        assert after.last_task_date == date(2026, 3, 1)

    def test_other_fields_untouched(self):
        created = datetime(2026, 1, 1, tzinfo=UTC)
        before = Profile(completed_task_count=5, streak=1,
                         last_task_date=date(2026, 3, 1), created_at=created)
        after = advance(before, _at(2))
        assert after.completed_task_count == 5
        assert after.created_at == created

    def test_consecutive_days_then_gap(self):
        profile = Profile()
        seen = []
        for ts in (_at(1), _at(2), _at(3), _at(6)):
            profile = advance(profile, ts)
            seen.append(profile.streak)
        assert seen == [1, 2, 3, 1]

    def test_month_boundary_is_consecutive(self):
        before = Profile(streak=3, last_task_date=date(2026, 2, 28))
        assert advance(before, _at(1, month=3)).streak == 4

    def test_late_night_and_early_morning_are_different_days(self):
        profile = advance(Profile(), datetime(2026, 3, 1, 23, 59))
        profile = advance(profile, datetime(2026, 3, 2, 0, 1))
        assert profile.streak == 2


class TestLocalDate:
    def test_naive_passes_through(self):
        assert local_date(datetime(2026, 3, 1, 23, 30), ZoneInfo("Asia/Tokyo")) == date(2026, 3, 1)

    def test_aware_converted_to_zone(self):
        ts = datetime(2026, 3, 1, 20, 0, tzinfo=UTC)
        assert local_date(ts, ZoneInfo("Asia/Tokyo")) == date(2026, 3, 2)

    def test_zone_decides_streak_day(self):
        tokyo = ZoneInfo("Asia/Tokyo")
        profile = Profile(streak=1, last_task_date=date(2026, 3, 1))
        # 16:00 UTC on Mar 1 is already Mar 2 in Tokyo
        after = advance(profile, datetime(2026, 3, 1, 16, 0, tzinfo=UTC), tokyo)
        assert after.streak == 2
        assert after.last_task_date == date(2026, 3, 2)
