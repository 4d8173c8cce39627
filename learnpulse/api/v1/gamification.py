"""
Gamification endpoints - login rewards, material interactions, course
progress, and learner summaries.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from learnpulse.api.deps import CurrentLearner, DbSession, Directory
from learnpulse.engines.gamification import GamificationService
from learnpulse.kernel.errors import NotFoundError, PersistenceError
from learnpulse.logging_config import get_logger
from learnpulse.schemas.gamification import (
    BadgeListResponse,
    CourseBadgesResponse,
    CourseProgressRequest,
    GamificationResultResponse,
    GamificationSummaryResponse,
    MaterialInteractionRequest,
)

router = APIRouter()
logger = get_logger(__name__)


def _persistence_failure(action: str) -> HTTPException:
    logger.exception("Gamification write failed", extra={"action": action})
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}",
    )


@router.post("/login", response_model=GamificationResultResponse)
async def record_login(learner: CurrentLearner, db: DbSession, directory: Directory):
    """Credit today's login: streak, daily goal and once-per-day XP."""
    service = GamificationService(db, directory)
    try:
        result = await service.record_login(learner)
        await db.commit()
    except (SQLAlchemyError, PersistenceError):
        await db.rollback()
        raise _persistence_failure("record login")
    return GamificationResultResponse.model_validate(result.model_dump())


@router.post("/materials/{material_id}/interaction", response_model=GamificationResultResponse)
async def record_material_interaction(
    material_id: str,
    learner: CurrentLearner,
    db: DbSession,
    directory: Directory,
    body: Optional[MaterialInteractionRequest] = None,
):
    """Record a view (and by default the completion) of a material."""
    body = body or MaterialInteractionRequest()
    service = GamificationService(db, directory)
    try:
        result = await service.record_material_interaction(
            learner,
            material_id,
            completed=body.completed,
            time_spent_seconds=body.time_spent_seconds,
            course_id=body.course_id,
        )
        await db.commit()
    except NotFoundError as e:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except (SQLAlchemyError, PersistenceError):
        await db.rollback()
        raise _persistence_failure("record interaction")
    return GamificationResultResponse.model_validate(result.model_dump())


@router.post("/courses/{course_id}/progress", response_model=CourseBadgesResponse)
async def record_course_progress(
    course_id: str,
    body: CourseProgressRequest,
    learner: CurrentLearner,
    db: DbSession,
    directory: Directory,
):
    """Evaluate course-completion badges for externally computed progress."""
    service = GamificationService(db, directory)
    try:
        badges = await service.record_course_progress(
            learner,
            course_id,
            body.course_title,
            body.progress_percent,
        )
        await db.commit()
    except (SQLAlchemyError, PersistenceError):
        await db.rollback()
        raise _persistence_failure("record course progress")
    return CourseBadgesResponse.model_validate(
        {"badges_awarded": [badge.model_dump() for badge in badges]}
    )


@router.get("/summary", response_model=GamificationSummaryResponse)
async def get_summary(learner: CurrentLearner, db: DbSession, directory: Directory):
    """XP, badges, streaks and today's goal."""
    service = GamificationService(db, directory)
    summary = await service.get_summary(learner)
    await db.commit()
    return GamificationSummaryResponse.model_validate(summary.model_dump())


@router.get("/badges", response_model=BadgeListResponse)
async def list_badges(learner: CurrentLearner, db: DbSession, directory: Directory):
    """Earned badges (newest first) and the active catalog."""
    service = GamificationService(db, directory)
    summary = await service.get_summary(learner)
    await db.commit()
    return BadgeListResponse.model_validate(
        {
            "badges": [badge.model_dump() for badge in summary.badges],
            "definitions": [definition.model_dump() for definition in summary.definitions],
        }
    )
