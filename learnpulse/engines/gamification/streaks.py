"""
Streak & Daily-Goal Engine.

Pure transitions keyed by calendar day (not elapsed hours). Persistence and
concurrency control live in GamificationService; everything here is
deterministic given `today`.

Streak transition, evaluated once per triggering event:
- last_date == today        -> no change (already counted)
- last_date == today - 1    -> continue: count += 1
- otherwise / never         -> reset: count = 1
then longest = max(longest, count), last_date = today.
"""

from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple
from zoneinfo import ZoneInfo

from pydantic import BaseModel

from learnpulse.kernel.models.learner import (
    DEFAULT_LESSONS_TARGET,
    DEFAULT_LOGINS_TARGET,
    Learner,
)


class StreakKind(str, Enum):
    """Streaks tracked per learner; value is the column prefix on Learner."""
    LOGIN = "login_streak"
    LESSON = "lesson_streak"


def calendar_day(now: datetime, tz: ZoneInfo) -> date:
    """The calendar date of `now` in the configured timezone."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(tz).date()


def is_same_day(value: Optional[date], today: date) -> bool:
    return value is not None and value == today


def is_previous_day(value: Optional[date], today: date) -> bool:
    return value is not None and value == today - timedelta(days=1)


class StreakState(BaseModel):
    """Consecutive-day counter for one qualifying action."""

    count: int = 0
    longest: int = 0
    last_date: Optional[date] = None

    def advance(self, today: date) -> Tuple["StreakState", bool]:
        """Apply one triggering event on `today`. Returns (new_state, changed)."""
        if is_same_day(self.last_date, today):
            return self, False
        if is_previous_day(self.last_date, today):
            count = self.count + 1
        else:
            count = 1
        return (
            StreakState(count=count, longest=max(self.longest, count), last_date=today),
            True,
        )

    @classmethod
    def from_learner(cls, learner: Learner, kind: StreakKind) -> "StreakState":
        prefix = kind.value
        return cls(
            count=getattr(learner, f"{prefix}_count") or 0,
            longest=getattr(learner, f"{prefix}_longest") or 0,
            last_date=getattr(learner, f"{prefix}_last_date"),
        )

    def to_columns(self, kind: StreakKind) -> Dict[str, Any]:
        prefix = kind.value
        return {
            f"{prefix}_count": self.count,
            f"{prefix}_longest": self.longest,
            f"{prefix}_last_date": self.last_date,
        }


class DailyGoalSnapshot(BaseModel):
    """Daily goal as returned to callers."""

    lessons_target: int
    lessons_completed_today: int
    logins_target: int
    logins_completed_today: int
    last_reset_at: Optional[date] = None
    lessons_remaining: int
    logins_remaining: int
    lesson_goal_met: bool
    login_goal_met: bool


class DailyGoal(BaseModel):
    """Per-day targets and progress, reset lazily on the first touch of a new day."""

    lessons_target: int = DEFAULT_LESSONS_TARGET
    lessons_completed: int = 0
    logins_target: int = DEFAULT_LOGINS_TARGET
    logins_completed: int = 0
    reset_date: Optional[date] = None

    def normalized(self, today: date) -> "DailyGoal":
        """Repair corrupted targets and zero the progress if the day rolled over."""
        lessons_target = self.lessons_target if self.lessons_target and self.lessons_target >= 1 else DEFAULT_LESSONS_TARGET
        logins_target = self.logins_target if self.logins_target and self.logins_target >= 1 else DEFAULT_LOGINS_TARGET
        if is_same_day(self.reset_date, today):
            return self.model_copy(update={
                "lessons_target": lessons_target,
                "logins_target": logins_target,
                "lessons_completed": self.lessons_completed or 0,
                "logins_completed": self.logins_completed or 0,
            })
        return DailyGoal(
            lessons_target=lessons_target,
            lessons_completed=0,
            logins_target=logins_target,
            logins_completed=0,
            reset_date=today,
        )

    def with_login(self) -> "DailyGoal":
        """One login credit per day, however many login events arrive."""
        return self.model_copy(update={"logins_completed": max(self.logins_completed, 1)})

    def with_lesson(self) -> "DailyGoal":
        return self.model_copy(update={"lessons_completed": self.lessons_completed + 1})

    def snapshot(self) -> DailyGoalSnapshot:
        return DailyGoalSnapshot(
            lessons_target=self.lessons_target,
            lessons_completed_today=self.lessons_completed,
            logins_target=self.logins_target,
            logins_completed_today=self.logins_completed,
            last_reset_at=self.reset_date,
            lessons_remaining=max(self.lessons_target - self.lessons_completed, 0),
            logins_remaining=max(self.logins_target - self.logins_completed, 0),
            lesson_goal_met=self.lessons_completed >= self.lessons_target,
            login_goal_met=self.logins_completed >= self.logins_target,
        )

    @classmethod
    def from_learner(cls, learner: Learner) -> "DailyGoal":
        return cls(
            lessons_target=learner.daily_lessons_target,
            lessons_completed=learner.daily_lessons_completed or 0,
            logins_target=learner.daily_logins_target,
            logins_completed=learner.daily_logins_completed or 0,
            reset_date=learner.daily_goal_reset_date,
        )

    def to_columns(self) -> Dict[str, Any]:
        return {
            "daily_lessons_target": self.lessons_target,
            "daily_lessons_completed": self.lessons_completed,
            "daily_logins_target": self.logins_target,
            "daily_logins_completed": self.logins_completed,
            "daily_goal_reset_date": self.reset_date,
        }


class StreakSnapshot(BaseModel):
    """Both streaks of a learner."""

    login: StreakState
    lesson: StreakState

    @classmethod
    def from_learner(cls, learner: Learner) -> "StreakSnapshot":
        return cls(
            login=StreakState.from_learner(learner, StreakKind.LOGIN),
            lesson=StreakState.from_learner(learner, StreakKind.LESSON),
        )
