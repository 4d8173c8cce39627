"""
Material interaction - one row per (learner, material).

Creation of the row is the "first view" event; the completed flag only ever
moves from False to True.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from learnpulse.kernel.models.base import Base, generate_uuid

QUIZ_CATEGORY = "quiz"


class MaterialInteraction(Base):
    """A learner's cumulative interaction with one material."""

    __tablename__ = "material_interactions"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    learner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("learners.id", ondelete="CASCADE"),
        nullable=False,
    )
    material_id: Mapped[str] = mapped_column(String(255), nullable=False)
    course_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Snapshot of content-directory metadata at first view
    category: Mapped[str] = mapped_column(String(50), nullable=False, default="Video")
    format: Mapped[str] = mapped_column(String(50), nullable=False, default="Visual")

    time_spent_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    first_viewed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    last_viewed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("learner_id", "material_id", name="uq_material_interactions_learner_material"),
        Index("ix_material_interactions_learner_completed", "learner_id", "completed"),
    )
