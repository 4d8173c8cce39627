"""
Pydantic schemas for API request/response validation.
"""

from learnpulse.schemas.common import CamelModel, HealthResponse, MessageResponse
from learnpulse.schemas.analytics import EngagementSyncRequest
from learnpulse.schemas.gamification import (
    AwardedBadgeResponse,
    BadgeDefinitionResponse,
    BadgeListResponse,
    CourseBadgesResponse,
    CourseProgressRequest,
    CourseProgressResponse,
    DailyGoalResponse,
    GamificationResultResponse,
    GamificationSummaryResponse,
    MaterialInteractionRequest,
    StreakResponse,
    StreaksResponse,
)

__all__ = [
    # Common
    "CamelModel",
    "HealthResponse",
    "MessageResponse",
    # Analytics
    "EngagementSyncRequest",
    # Gamification
    "AwardedBadgeResponse",
    "BadgeDefinitionResponse",
    "BadgeListResponse",
    "CourseBadgesResponse",
    "CourseProgressRequest",
    "CourseProgressResponse",
    "DailyGoalResponse",
    "GamificationResultResponse",
    "GamificationSummaryResponse",
    "MaterialInteractionRequest",
    "StreakResponse",
    "StreaksResponse",
]
