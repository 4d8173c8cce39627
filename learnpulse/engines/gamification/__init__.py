"""
Gamification Engine - XP, streaks, daily goals and badges.

Rewards:
- Login: 10 XP, once per calendar day
- First view of a material: 5 XP
- Completion of a material: 15 XP (+25 for quizzes)

Streaks:
- Login streak: consecutive calendar days with a login
- Lesson streak: consecutive calendar days with a first view or completion

Badges:
- xp: total XP reaches a threshold
- course_completion: a course reaches 100% completion
- quiz_completed: completed quizzes reach a count
"""

from learnpulse.engines.gamification.streaks import (
    StreakKind,
    StreakState,
    StreakSnapshot,
    DailyGoal,
    DailyGoalSnapshot,
    calendar_day,
)
from learnpulse.engines.gamification.xp_ledger import XPLedger, XPRewards
from learnpulse.engines.gamification.badges import (
    BadgeEngine,
    BadgeSpec,
    AwardedBadgeView,
    BadgeDefinitionView,
    EvaluationContext,
    DEFAULT_BADGES,
    seed_badges,
)
from learnpulse.engines.gamification.service import (
    GamificationService,
    GamificationResult,
    GamificationSummary,
    CourseProgress,
)

__all__ = [
    "StreakKind",
    "StreakState",
    "StreakSnapshot",
    "DailyGoal",
    "DailyGoalSnapshot",
    "calendar_day",
    "XPLedger",
    "XPRewards",
    "BadgeEngine",
    "BadgeSpec",
    "AwardedBadgeView",
    "BadgeDefinitionView",
    "EvaluationContext",
    "DEFAULT_BADGES",
    "seed_badges",
    "GamificationService",
    "GamificationResult",
    "GamificationSummary",
    "CourseProgress",
]
