"""
Gamification Service - the internal contract used by login handling and
material-interaction recording.

Each operation:
1. applies its XP via atomic increments,
2. applies its streak / daily-goal transition via compare-and-swap on
   Learner.version (re-read and recompute on conflict),
3. runs badge evaluation and returns only newly awarded badges.
"""

import uuid
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo

from pydantic import BaseModel
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from learnpulse.config import get_settings
from learnpulse.engines.gamification.badges import (
    AwardedBadgeView,
    BadgeDefinitionView,
    BadgeEngine,
    EvaluationContext,
)
from learnpulse.engines.gamification.streaks import (
    DailyGoal,
    DailyGoalSnapshot,
    StreakKind,
    StreakSnapshot,
    StreakState,
    calendar_day,
)
from learnpulse.engines.gamification.xp_ledger import (
    XPLedger,
    XPRewards,
    login_reward_due,
    material_reward,
)
from learnpulse.kernel.content import ContentDirectory, InMemoryContentDirectory
from learnpulse.kernel.counters import compare_and_swap, ensure_learner, insert_ignore, load_learner
from learnpulse.kernel.errors import NotFoundError, PersistenceError
from learnpulse.kernel.identity import LearnerRef
from learnpulse.kernel.models import Learner, MaterialInteraction
from learnpulse.logging_config import get_logger

logger = get_logger(__name__)

Clock = Callable[[], datetime]
# (row, today) -> (column assignments, atomic deltas)
TransitionPlan = Callable[[Learner, date], Tuple[Dict[str, Any], Dict[str, int]]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CourseProgress(BaseModel):
    course_id: str
    percent: int
    total_materials: int
    completed_materials: int


class GamificationResult(BaseModel):
    """Structured result forwarded to the UI for toast notifications."""

    xp_awarded: int
    total_xp: int
    badges_awarded: List[AwardedBadgeView]
    streaks: StreakSnapshot
    daily_goal: DailyGoalSnapshot
    progress: Optional[CourseProgress] = None


class GamificationSummary(BaseModel):
    xp: int
    badges: List[AwardedBadgeView]
    definitions: List[BadgeDefinitionView]
    streaks: StreakSnapshot
    daily_goal: DailyGoalSnapshot


class GamificationService:
    """
    Usage:
        service = GamificationService(session, content_directory)
        result = await service.record_login(learner)
    """

    def __init__(
        self,
        session: AsyncSession,
        content_directory: Optional[ContentDirectory] = None,
        clock: Optional[Clock] = None,
        timezone_name: Optional[str] = None,
        max_retries: Optional[int] = None,
    ):
        settings = get_settings()
        self.session = session
        self.content_directory = content_directory or InMemoryContentDirectory()
        self.clock = clock or _utcnow
        self.tz = ZoneInfo(timezone_name or settings.calendar_timezone)
        self.max_retries = max_retries or settings.gamification_max_retries
        self.xp_ledger = XPLedger(session)
        self.badges = BadgeEngine(session)

    def today(self) -> date:
        return calendar_day(self.clock(), self.tz)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def record_login(self, learner: LearnerRef) -> GamificationResult:
        """Login streak, login daily-goal credit, and once-per-day login XP."""
        await ensure_learner(self.session, learner.id)

        def plan(row: Learner, today: date) -> Tuple[Dict[str, Any], Dict[str, int]]:
            assignments = self._daily_goal_changes(row, today, login=True)
            assignments.update(self._streak_changes(row, StreakKind.LOGIN, today))
            deltas: Dict[str, int] = {}
            if login_reward_due(row.last_login_xp_date, today):
                assignments["last_login_xp_date"] = today
                deltas["xp"] = XPRewards.LOGIN
            return assignments, deltas

        row, applied = await self._transition(learner.id, plan)
        xp_awarded = applied.get("xp", 0)
        badges = await self.badges.evaluate(learner, row.xp)

        logger.info(
            "Login recorded",
            extra={"xp_awarded": xp_awarded, "login_streak": row.login_streak_count},
        )
        return self._result(row, xp_awarded, badges)

    async def record_material_interaction(
        self,
        learner: LearnerRef,
        material_id: str,
        completed: bool = True,
        time_spent_seconds: int = 0,
        course_id: Optional[str] = None,
    ) -> GamificationResult:
        """
        Record a view (and optionally the completion) of a material.

        View XP only when the interaction row is created; completion XP only on
        the not-completed -> completed transition. Re-views of a material are
        logged (view count, time spent) but never rewarded again.
        """
        material = await self.content_directory.get_material(material_id)
        if material is None:
            raise NotFoundError(f"Material '{material_id}' not found")
        course_id = course_id or material.course_id
        time_spent_seconds = max(0, int(time_spent_seconds or 0))

        await ensure_learner(self.session, learner.id)
        now = self.clock()

        first_view = await insert_ignore(
            self.session,
            MaterialInteraction,
            {
                "learner_id": learner.id,
                "material_id": material.material_id,
                "course_id": course_id,
                "category": material.category,
                "format": material.format,
                "time_spent_seconds": time_spent_seconds,
                "view_count": 1,
                "completed": False,
                "first_viewed_at": now,
                "last_viewed_at": now,
            },
            ["learner_id", "material_id"],
        )
        if not first_view:
            await self.session.execute(
                update(MaterialInteraction)
                .where(
                    MaterialInteraction.learner_id == learner.id,
                    MaterialInteraction.material_id == material.material_id,
                )
                .values(
                    view_count=MaterialInteraction.view_count + 1,
                    time_spent_seconds=MaterialInteraction.time_spent_seconds + time_spent_seconds,
                    last_viewed_at=now,
                )
                .execution_options(synchronize_session=False)
            )

        newly_completed = False
        if completed:
            result = await self.session.execute(
                update(MaterialInteraction)
                .where(
                    MaterialInteraction.learner_id == learner.id,
                    MaterialInteraction.material_id == material.material_id,
                    MaterialInteraction.completed.is_(False),
                )
                .values(completed=True, completed_at=now)
                .execution_options(synchronize_session=False)
            )
            newly_completed = result.rowcount == 1

        xp_awarded = material_reward(first_view, newly_completed, material.is_quiz)
        await self.xp_ledger.credit(learner.id, xp_awarded)

        lesson_event = first_view or newly_completed

        def plan(row: Learner, today: date) -> Tuple[Dict[str, Any], Dict[str, int]]:
            assignments = self._daily_goal_changes(row, today, lesson=lesson_event)
            if lesson_event:
                assignments.update(self._streak_changes(row, StreakKind.LESSON, today))
            return assignments, {}

        row, _ = await self._transition(learner.id, plan)

        badges = await self.badges.evaluate(
            learner,
            row.xp,
            EvaluationContext(quiz_completed=newly_completed and material.is_quiz),
        )

        progress = None
        if course_id:
            progress = await self.compute_course_progress(learner.id, course_id)
            if progress is not None:
                course = await self.content_directory.get_course(course_id)
                badges += await self.record_course_progress(
                    learner,
                    course_id,
                    course.title if course and course.title else course_id,
                    progress.percent,
                    current_xp=row.xp,
                )

        logger.info(
            "Material interaction recorded",
            extra={
                "material_id": material.material_id,
                "first_view": first_view,
                "newly_completed": newly_completed,
                "xp_awarded": xp_awarded,
            },
        )
        result = self._result(row, xp_awarded, badges)
        result.progress = progress
        return result

    async def record_course_progress(
        self,
        learner: LearnerRef,
        course_id: str,
        course_title: Optional[str],
        progress_percent: float,
        current_xp: Optional[int] = None,
    ) -> List[AwardedBadgeView]:
        """Evaluate course-completion badges; nothing happens below 100 percent."""
        if progress_percent < 100:
            return []
        await ensure_learner(self.session, learner.id)
        if current_xp is None:
            current_xp = await self.xp_ledger.balance(learner.id)
        return await self.badges.evaluate(
            learner,
            current_xp,
            EvaluationContext(
                course_completion_percent=progress_percent,
                course_id=course_id,
                course_title=course_title or course_id,
            ),
        )

    async def compute_course_progress(self, learner_id: uuid.UUID, course_id: str) -> Optional[CourseProgress]:
        """Share of a course's materials the learner has completed, rounded to a whole percent."""
        course = await self.content_directory.get_course(course_id)
        if course is None:
            return None
        total = len(course.material_ids)
        completed = 0
        if total:
            result = await self.session.execute(
                select(func.count(func.distinct(MaterialInteraction.material_id)))
                .where(
                    MaterialInteraction.learner_id == learner_id,
                    MaterialInteraction.completed.is_(True),
                    MaterialInteraction.material_id.in_(course.material_ids),
                )
            )
            completed = result.scalar() or 0
        percent = min(100, int(completed * 100 / total + 0.5)) if total else 0
        return CourseProgress(
            course_id=course_id,
            percent=percent,
            total_materials=total,
            completed_materials=completed,
        )

    async def get_summary(self, learner: LearnerRef) -> GamificationSummary:
        """XP, earned badges, catalog, streaks, and today's goal for a learner."""
        await ensure_learner(self.session, learner.id)
        row = await load_learner(self.session, learner.id)
        today = self.today()
        return GamificationSummary(
            xp=row.xp,
            badges=await self.badges.list_awarded(learner.id),
            definitions=await self.badges.list_definitions(),
            streaks=StreakSnapshot.from_learner(row),
            # Present today's view without writing; the next touch persists the reset
            daily_goal=DailyGoal.from_learner(row).normalized(today).snapshot(),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _transition(
        self,
        learner_id: uuid.UUID,
        plan: TransitionPlan,
    ) -> Tuple[Learner, Dict[str, int]]:
        """
        Run a read-compute-write transition under optimistic concurrency.

        Returns the fresh learner row and the deltas that were applied.
        """
        today = self.today()
        for attempt in range(1, self.max_retries + 1):
            row = await load_learner(self.session, learner_id)
            if row is None:
                raise PersistenceError(f"Learner {learner_id} missing after ensure")
            assignments, deltas = plan(row, today)
            if not assignments and not deltas:
                return row, {}
            if await compare_and_swap(self.session, learner_id, row.version, assignments, deltas):
                return await load_learner(self.session, learner_id), deltas
            logger.info(
                "Learner write conflict, retrying",
                extra={"attempt": attempt, "version": row.version},
            )
        raise PersistenceError(
            f"Could not apply learner update after {self.max_retries} attempts"
        )

    @staticmethod
    def _daily_goal_changes(row: Learner, today: date, login: bool = False, lesson: bool = False) -> Dict[str, Any]:
        before = DailyGoal.from_learner(row)
        after = before.normalized(today)
        if login:
            after = after.with_login()
        if lesson:
            after = after.with_lesson()
        return after.to_columns() if after != before else {}

    @staticmethod
    def _streak_changes(row: Learner, kind: StreakKind, today: date) -> Dict[str, Any]:
        state, changed = StreakState.from_learner(row, kind).advance(today)
        return state.to_columns(kind) if changed else {}

    @staticmethod
    def _result(row: Learner, xp_awarded: int, badges: List[AwardedBadgeView]) -> GamificationResult:
        return GamificationResult(
            xp_awarded=xp_awarded,
            total_xp=row.xp,
            badges_awarded=badges,
            streaks=StreakSnapshot.from_learner(row),
            daily_goal=DailyGoal.from_learner(row).snapshot(),
        )
