"""
Pydantic schemas for the gamification API.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from learnpulse.schemas.common import CamelModel


class MaterialInteractionRequest(CamelModel):
    """A view of a material, optionally reporting it as completed."""

    completed: bool = True
    time_spent_seconds: int = Field(default=0, ge=0, le=86400)
    course_id: Optional[str] = None


class CourseProgressRequest(CamelModel):
    progress_percent: float = Field(ge=0)
    course_title: Optional[str] = None


class StreakResponse(CamelModel):
    count: int
    longest: int
    last_date: Optional[date] = None


class StreaksResponse(CamelModel):
    login: StreakResponse
    lesson: StreakResponse


class DailyGoalResponse(CamelModel):
    lessons_target: int
    lessons_completed_today: int
    logins_target: int
    logins_completed_today: int
    last_reset_at: Optional[date] = None
    lessons_remaining: int
    logins_remaining: int
    lesson_goal_met: bool
    login_goal_met: bool


class AwardedBadgeResponse(CamelModel):
    badge_id: str
    title: str
    description: str = ""
    icon: str
    awarded_at: datetime
    meta: Dict[str, Any] = Field(default_factory=dict)


class BadgeDefinitionResponse(CamelModel):
    badge_id: str
    title: str
    description: str
    icon: str
    criteria: Dict[str, Any]


class CourseProgressResponse(CamelModel):
    course_id: str
    percent: int
    total_materials: int
    completed_materials: int


class GamificationResultResponse(CamelModel):
    """Outcome of a login or material interaction, used for toasts."""

    xp_awarded: int
    total_xp: int
    badges_awarded: List[AwardedBadgeResponse]
    streaks: StreaksResponse
    daily_goal: DailyGoalResponse
    progress: Optional[CourseProgressResponse] = None


class CourseBadgesResponse(CamelModel):
    badges_awarded: List[AwardedBadgeResponse]


class BadgeListResponse(CamelModel):
    badges: List[AwardedBadgeResponse]
    definitions: List[BadgeDefinitionResponse]


class GamificationSummaryResponse(CamelModel):
    xp: int
    badges: List[AwardedBadgeResponse]
    definitions: List[BadgeDefinitionResponse]
    streaks: StreaksResponse
    daily_goal: DailyGoalResponse
