"""
Learner model - denormalized gamification and engagement counters.

One row per student, keyed by the identity subject. Rows are created lazily on
first touch and are never deleted by this subsystem.
"""

import uuid
from datetime import date, datetime
from typing import Optional

from sqlalchemy import BigInteger, Date, DateTime, Integer, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from learnpulse.kernel.models.base import Base, TimestampMixin

DEFAULT_LESSONS_TARGET = 1
DEFAULT_LOGINS_TARGET = 1


class Learner(Base, TimestampMixin):
    """Per-learner XP, streaks, daily goal and rolling engagement stats."""

    __tablename__ = "learners"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
    )

    xp: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_login_xp_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Login streak
    login_streak_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    login_streak_longest: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    login_streak_last_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Lesson streak
    lesson_streak_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    lesson_streak_longest: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    lesson_streak_last_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Daily goal
    daily_lessons_target: Mapped[int] = mapped_column(Integer, nullable=False, default=DEFAULT_LESSONS_TARGET)
    daily_lessons_completed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    daily_logins_target: Mapped[int] = mapped_column(Integer, nullable=False, default=DEFAULT_LOGINS_TARGET)
    daily_logins_completed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    daily_goal_reset_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Rolling engagement stats (atomic increments only)
    engagement_total_seconds: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    engagement_sessions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    engagement_visual_seconds: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    engagement_verbal_seconds: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    engagement_audio_seconds: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    last_active_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Optimistic concurrency token for streak / daily-goal writes
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<Learner {self.id} xp={self.xp}>"
