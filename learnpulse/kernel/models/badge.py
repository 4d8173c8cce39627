"""
Badge models - definitions (configuration) and awards (facts).
"""

import uuid
from datetime import datetime
from typing import Any, Dict

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from learnpulse.kernel.models.base import Base, TimestampMixin, generate_uuid


class BadgeDefinition(Base, TimestampMixin):
    """
    A named achievement and its unlock criteria.

    criteria is a tagged JSON object, validated by
    learnpulse.engines.gamification.badges.BadgeCriteria:
        {"type": "xp", "threshold": 100}
        {"type": "course_completion", "count": 1}
        {"type": "quiz_completed", "count": 5}
    """

    __tablename__ = "badge_definitions"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    badge_id: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    icon: Mapped[str] = mapped_column(String(100), nullable=False, default="fas fa-medal")
    criteria: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<BadgeDefinition {self.badge_id}>"


class AwardedBadge(Base):
    """
    A badge awarded to a learner.

    At most one row per (learner_id, badge_id); the unique constraint is what
    makes concurrent awards safe, not application checks.
    """

    __tablename__ = "awarded_badges"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    learner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("learners.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    badge_id: Mapped[str] = mapped_column(String(100), nullable=False)
    awarded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    meta: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    __table_args__ = (
        UniqueConstraint("learner_id", "badge_id", name="uq_awarded_badges_learner_badge"),
    )
