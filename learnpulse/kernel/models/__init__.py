"""
Kernel Data Models

SQLAlchemy models for learner counters, engagement facts, badges and
material interactions.
"""

from learnpulse.kernel.models.base import Base, TimestampMixin, generate_uuid, utcnow
from learnpulse.kernel.models.learner import Learner, DEFAULT_LESSONS_TARGET, DEFAULT_LOGINS_TARGET
from learnpulse.kernel.models.engagement import EngagementLog, ResourceFormat, DeliveryChannel
from learnpulse.kernel.models.badge import BadgeDefinition, AwardedBadge
from learnpulse.kernel.models.interaction import MaterialInteraction, QUIZ_CATEGORY

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "generate_uuid",
    "utcnow",
    # Learner
    "Learner",
    "DEFAULT_LESSONS_TARGET",
    "DEFAULT_LOGINS_TARGET",
    # Engagement
    "EngagementLog",
    "ResourceFormat",
    "DeliveryChannel",
    # Badges
    "BadgeDefinition",
    "AwardedBadge",
    # Interactions
    "MaterialInteraction",
    "QUIZ_CATEGORY",
]
