"""
Badge Evaluation Engine.

Evaluates badge criteria against a learner's current state and awards each
badge at most once. The (learner_id, badge_id) unique constraint is the only
guard against concurrent double awards: a rejected insert simply means the
badge was not newly awarded by this call.
"""

import uuid
from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Sequence, Union

from pydantic import BaseModel, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from learnpulse.kernel.counters import insert_ignore
from learnpulse.kernel.identity import LearnerRef
from learnpulse.kernel.models import AwardedBadge, BadgeDefinition, MaterialInteraction, QUIZ_CATEGORY, utcnow
from learnpulse.logging_config import get_logger

logger = get_logger(__name__)


# --- Criteria (tagged variant) ---

class XPCriteria(BaseModel):
    type: Literal["xp"] = "xp"
    threshold: int


class CourseCompletionCriteria(BaseModel):
    type: Literal["course_completion"] = "course_completion"
    count: int = 1


class QuizCompletedCriteria(BaseModel):
    type: Literal["quiz_completed"] = "quiz_completed"
    count: int = 1


BadgeCriteria = Annotated[
    Union[XPCriteria, CourseCompletionCriteria, QuizCompletedCriteria],
    Field(discriminator="type"),
]

_criteria_adapter: TypeAdapter = TypeAdapter(BadgeCriteria)


def parse_criteria(raw: Dict[str, Any]) -> Optional[BadgeCriteria]:
    """Validate stored criteria JSON; unknown or malformed criteria never match."""
    try:
        return _criteria_adapter.validate_python(raw or {})
    except PydanticValidationError:
        return None


class BadgeSpec(BaseModel):
    """Seed-time badge definition."""

    badge_id: str
    title: str
    description: str = ""
    icon: str = "fas fa-medal"
    criteria: BadgeCriteria


DEFAULT_BADGES: List[BadgeSpec] = [
    BadgeSpec(
        badge_id="xp_100",
        title="Rising Scholar",
        description="Earn 100 XP across the platform.",
        icon="fas fa-medal",
        criteria=XPCriteria(threshold=100),
    ),
    BadgeSpec(
        badge_id="xp_500",
        title="Dedicated Learner",
        description="Accumulate 500 XP by engaging with lessons.",
        icon="fas fa-trophy",
        criteria=XPCriteria(threshold=500),
    ),
    BadgeSpec(
        badge_id="first_course_complete",
        title="Course Conqueror",
        description="Complete your first course.",
        icon="fas fa-flag-checkered",
        criteria=CourseCompletionCriteria(count=1),
    ),
    BadgeSpec(
        badge_id="quiz_master",
        title="Quiz Master",
        description="Finish 5 quizzes.",
        icon="fas fa-award",
        criteria=QuizCompletedCriteria(count=5),
    ),
]


# --- Views returned to callers ---

class BadgeDefinitionView(BaseModel):
    badge_id: str
    title: str
    description: str
    icon: str
    criteria: Dict[str, Any]


class AwardedBadgeView(BaseModel):
    badge_id: str
    title: str
    description: str = ""
    icon: str = "fas fa-medal"
    awarded_at: datetime
    meta: Dict[str, Any] = Field(default_factory=dict)


class EvaluationContext(BaseModel):
    """Optional facts about the triggering event."""

    course_completion_percent: Optional[float] = None
    course_id: Optional[str] = None
    course_title: Optional[str] = None
    quiz_completed: bool = False


async def seed_badges(session: AsyncSession, specs: Sequence[BadgeSpec] = DEFAULT_BADGES) -> int:
    """
    Upsert badge definitions by badge_id. Safe to run on every startup and
    from several workers at once.

    Returns the number of definitions created.
    """
    created = 0
    for spec in specs:
        fields = {
            "title": spec.title,
            "description": spec.description,
            "icon": spec.icon,
            "criteria": spec.criteria.model_dump(),
            "active": True,
        }
        inserted = await insert_ignore(
            session,
            BadgeDefinition,
            {"badge_id": spec.badge_id, **fields},
            ["badge_id"],
        )
        if inserted:
            created += 1
        else:
            await session.execute(
                update(BadgeDefinition)
                .where(BadgeDefinition.badge_id == spec.badge_id)
                .values(**fields)
                .execution_options(synchronize_session=False)
            )
    logger.info("Badge definitions seeded", extra={"total": len(specs), "new_definitions": created})
    return created


class BadgeEngine:
    """
    Evaluates and awards badges for one learner at a time.

    Usage:
        engine = BadgeEngine(session)
        new_badges = await engine.evaluate(learner, current_xp=120)
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_definitions(self) -> List[BadgeDefinitionView]:
        """Active definitions ordered by title."""
        result = await self.session.execute(
            select(BadgeDefinition)
            .where(BadgeDefinition.active.is_(True))
            .order_by(BadgeDefinition.title)
        )
        return [
            BadgeDefinitionView(
                badge_id=d.badge_id,
                title=d.title,
                description=d.description,
                icon=d.icon,
                criteria=d.criteria or {},
            )
            for d in result.scalars().all()
        ]

    async def list_awarded(self, learner_id: uuid.UUID) -> List[AwardedBadgeView]:
        """Badges the learner owns, newest first."""
        result = await self.session.execute(
            select(AwardedBadge, BadgeDefinition)
            .outerjoin(BadgeDefinition, BadgeDefinition.badge_id == AwardedBadge.badge_id)
            .where(AwardedBadge.learner_id == learner_id)
            .order_by(AwardedBadge.awarded_at.desc())
        )
        views = []
        for awarded, definition in result.all():
            views.append(
                AwardedBadgeView(
                    badge_id=awarded.badge_id,
                    title=definition.title if definition else awarded.badge_id,
                    description=definition.description if definition else "",
                    icon=definition.icon if definition else "fas fa-medal",
                    awarded_at=awarded.awarded_at,
                    meta=awarded.meta or {},
                )
            )
        return views

    async def evaluate(
        self,
        learner: LearnerRef,
        current_xp: int,
        context: Optional[EvaluationContext] = None,
    ) -> List[AwardedBadgeView]:
        """
        Award every active badge whose criteria the learner now meets.

        Returns only badges newly awarded by this call.
        """
        context = context or EvaluationContext()

        definitions_result = await self.session.execute(
            select(BadgeDefinition).where(BadgeDefinition.active.is_(True))
        )
        definitions = list(definitions_result.scalars().all())

        earned_result = await self.session.execute(
            select(AwardedBadge.badge_id).where(AwardedBadge.learner_id == learner.id)
        )
        earned = set(earned_result.scalars().all())

        newly_awarded: List[AwardedBadgeView] = []
        completed_quizzes: Optional[int] = None

        for definition in definitions:
            if definition.badge_id in earned:
                continue
            criteria = parse_criteria(definition.criteria)
            if criteria is None:
                logger.warning("Skipping badge with invalid criteria", extra={"badge_id": definition.badge_id})
                continue

            meta: Optional[Dict[str, Any]] = None
            if isinstance(criteria, XPCriteria):
                if current_xp >= criteria.threshold:
                    meta = {}
            elif isinstance(criteria, CourseCompletionCriteria):
                percent = context.course_completion_percent
                if percent is not None and percent >= 100:
                    meta = {"course_id": context.course_id, "course_title": context.course_title}
            elif isinstance(criteria, QuizCompletedCriteria):
                if context.quiz_completed:
                    if completed_quizzes is None:
                        completed_quizzes = await self.count_completed_quizzes(learner.id)
                    if completed_quizzes >= criteria.count:
                        meta = {"completed_quizzes": completed_quizzes}

            if meta is None:
                continue
            awarded = await self._award(learner.id, definition, meta)
            if awarded is not None:
                earned.add(definition.badge_id)
                newly_awarded.append(awarded)

        return newly_awarded

    async def count_completed_quizzes(self, learner_id: uuid.UUID) -> int:
        """Completed quiz interactions, recomputed from the interaction log."""
        result = await self.session.execute(
            select(func.count())
            .select_from(MaterialInteraction)
            .where(
                MaterialInteraction.learner_id == learner_id,
                MaterialInteraction.completed.is_(True),
                func.lower(MaterialInteraction.category) == QUIZ_CATEGORY,
            )
        )
        return result.scalar() or 0

    async def _award(
        self,
        learner_id: uuid.UUID,
        definition: BadgeDefinition,
        meta: Dict[str, Any],
    ) -> Optional[AwardedBadgeView]:
        awarded_at = utcnow()
        inserted = await insert_ignore(
            self.session,
            AwardedBadge,
            {
                "learner_id": learner_id,
                "badge_id": definition.badge_id,
                "awarded_at": awarded_at,
                "meta": meta,
            },
            ["learner_id", "badge_id"],
        )
        if not inserted:
            # Lost the race to a concurrent award: not an error
            logger.debug("Badge already awarded", extra={"badge_id": definition.badge_id})
            return None
        logger.info(
            "Badge awarded",
            extra={"learner_id": str(learner_id), "badge_id": definition.badge_id},
        )
        return AwardedBadgeView(
            badge_id=definition.badge_id,
            title=definition.title,
            description=definition.description,
            icon=definition.icon,
            awarded_at=awarded_at,
            meta=meta,
        )
