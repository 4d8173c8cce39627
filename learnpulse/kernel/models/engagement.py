"""
Append-only engagement log.

One row per reported time sample. Rows are facts: never updated or deleted.
Rolling totals live on Learner; this table is kept for audit and replay.
"""

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from learnpulse.kernel.models.base import Base, generate_uuid


class ResourceFormat(str, Enum):
    """Known content formats with a dedicated engagement bucket."""
    VISUAL = "Visual"
    VERBAL = "Verbal"
    AUDIO = "Audio"


class DeliveryChannel(str, Enum):
    """How the sample reached the server."""
    SYNC = "sync"
    BEACON = "beacon"


class EngagementLog(Base):
    """A single client-reported engagement sample."""

    __tablename__ = "engagement_logs"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    learner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("learners.id", ondelete="CASCADE"),
        nullable=False,
    )
    resource_id: Mapped[str] = mapped_column(String(255), nullable=False)
    resource_type: Mapped[str] = mapped_column(String(50), nullable=False, default=ResourceFormat.VISUAL.value)
    seconds: Mapped[int] = mapped_column(Integer, nullable=False)
    channel: Mapped[str] = mapped_column(String(20), nullable=False, default=DeliveryChannel.SYNC.value)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_engagement_logs_learner_timestamp", "learner_id", "timestamp"),
        Index("ix_engagement_logs_resource", "resource_id"),
    )
