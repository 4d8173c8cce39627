"""Unit tests for the streak and daily-goal transitions."""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from learnpulse.engines.gamification.streaks import (
    DailyGoal,
    StreakKind,
    StreakState,
    calendar_day,
)

DAY_1 = date(2026, 3, 2)
DAY_2 = date(2026, 3, 3)
DAY_4 = date(2026, 3, 5)


class TestStreakState:
    """Consecutive-day transitions."""

    def test_first_event_starts_streak(self):
        state, changed = StreakState().advance(DAY_1)
        assert changed is True
        assert state.count == 1
        assert state.longest == 1
        assert state.last_date == DAY_1

    def test_next_day_continues(self):
        state = StreakState(count=1, longest=1, last_date=DAY_1)
        state, changed = state.advance(DAY_2)
        assert changed is True
        assert state.count == 2
        assert state.longest == 2

    def test_gap_resets_to_one_and_keeps_longest(self):
        state = StreakState(count=3, longest=3, last_date=DAY_1)
        state, _ = state.advance(DAY_4)
        assert state.count == 1
        assert state.longest == 3
        assert state.last_date == DAY_4

    def test_same_day_is_idempotent(self):
        state = StreakState(count=2, longest=5, last_date=DAY_2)
        again, changed = state.advance(DAY_2)
        assert changed is False
        assert again == state

    def test_to_columns_uses_kind_prefix(self):
        columns = StreakState(count=2, longest=4, last_date=DAY_2).to_columns(StreakKind.LESSON)
        assert columns == {
            "lesson_streak_count": 2,
            "lesson_streak_longest": 4,
            "lesson_streak_last_date": DAY_2,
        }


class TestCalendarDay:
    """Day boundary in the configured timezone."""

    def test_utc_day(self):
        now = datetime(2026, 3, 2, 23, 30, tzinfo=timezone.utc)
        assert calendar_day(now, ZoneInfo("UTC")) == DAY_1

    def test_timezone_shifts_day(self):
        now = datetime(2026, 3, 2, 23, 30, tzinfo=timezone.utc)
        assert calendar_day(now, ZoneInfo("Asia/Tokyo")) == DAY_2

    def test_naive_datetime_treated_as_utc(self):
        assert calendar_day(datetime(2026, 3, 2, 12, 0), ZoneInfo("UTC")) == DAY_1


class TestDailyGoal:
    """Lazy reset and increments."""

    def test_new_day_resets_progress(self):
        goal = DailyGoal(lessons_completed=3, logins_completed=1, reset_date=DAY_1)
        normalized = goal.normalized(DAY_2)
        assert normalized.lessons_completed == 0
        assert normalized.logins_completed == 0
        assert normalized.reset_date == DAY_2

    def test_reset_then_increment(self):
        goal = DailyGoal(lessons_completed=3, reset_date=DAY_1)
        goal = goal.normalized(DAY_2).with_lesson()
        assert goal.lessons_completed == 1

    def test_same_day_keeps_progress(self):
        goal = DailyGoal(lessons_completed=2, logins_completed=1, reset_date=DAY_1)
        assert goal.normalized(DAY_1).lessons_completed == 2

    def test_login_counts_once_per_day(self):
        goal = DailyGoal(reset_date=DAY_1).normalized(DAY_1)
        goal = goal.with_login().with_login().with_login()
        assert goal.logins_completed == 1

    def test_targets_floored_at_one(self):
        goal = DailyGoal(lessons_target=0, logins_target=-2, reset_date=DAY_1).normalized(DAY_1)
        assert goal.lessons_target == 1
        assert goal.logins_target == 1

    def test_snapshot_reports_remaining_and_met(self):
        snapshot = DailyGoal(lessons_target=3, lessons_completed=1, logins_completed=1, reset_date=DAY_1).snapshot()
        assert snapshot.lessons_remaining == 2
        assert snapshot.lesson_goal_met is False
        assert snapshot.logins_remaining == 0
        assert snapshot.login_goal_met is True
        assert snapshot.last_reset_at == DAY_1
