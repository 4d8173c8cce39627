"""
Learner store - the only write path for Learner rows.

Three disciplines, one per kind of mutation:
- counters (xp, engagement seconds): single atomic UPDATE ... SET c = c + :n
- date-dependent state (streaks, daily goal, login XP gate): compare-and-swap on
  Learner.version, caller re-reads and recomputes on a lost race
- first-of-a-kind rows (learner, interaction, badge award): insert-if-absent
  against a uniqueness constraint
"""

import uuid
from typing import Any, Dict, Iterable, Optional, Type

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from learnpulse.kernel.models.base import Base
from learnpulse.kernel.models.learner import Learner


async def insert_ignore(
    session: AsyncSession,
    model: Type[Base],
    values: Dict[str, Any],
    conflict_columns: Iterable[str],
) -> bool:
    """
    Insert a row unless a uniqueness constraint rejects it.

    Returns True when this call created the row, False when it already existed.
    """
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        insert = None

    if insert is not None:
        stmt = insert(model).values(**values).on_conflict_do_nothing(
            index_elements=list(conflict_columns)
        )
        result = await session.execute(stmt)
        return result.rowcount == 1

    # Generic fallback: let the constraint fail inside a savepoint
    try:
        async with session.begin_nested():
            session.add(model(**values))
        return True
    except IntegrityError:
        return False


async def ensure_learner(session: AsyncSession, learner_id: uuid.UUID) -> bool:
    """Create the learner row with zero-value defaults if absent. Returns True if created."""
    return await insert_ignore(session, Learner, {"id": learner_id}, ["id"])


async def load_learner(session: AsyncSession, learner_id: uuid.UUID) -> Optional[Learner]:
    """Read the current row from the database, bypassing stale identity-map state."""
    result = await session.execute(
        select(Learner)
        .where(Learner.id == learner_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def increment_counters(
    session: AsyncSession,
    learner_id: uuid.UUID,
    deltas: Dict[str, int],
    assignments: Optional[Dict[str, Any]] = None,
) -> None:
    """Apply `column = column + delta` for every entry in one UPDATE statement."""
    values: Dict[str, Any] = {
        name: getattr(Learner, name) + amount for name, amount in deltas.items()
    }
    if assignments:
        values.update(assignments)
    if not values:
        return
    await session.execute(
        update(Learner)
        .where(Learner.id == learner_id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )


async def compare_and_swap(
    session: AsyncSession,
    learner_id: uuid.UUID,
    expected_version: int,
    assignments: Dict[str, Any],
    deltas: Optional[Dict[str, int]] = None,
) -> bool:
    """
    Write `assignments` (and atomic `deltas`) only if the row is still at
    `expected_version`. Bumps the version on success.

    Returns False when another writer got there first.
    """
    values: Dict[str, Any] = dict(assignments)
    for name, amount in (deltas or {}).items():
        values[name] = getattr(Learner, name) + amount
    values["version"] = Learner.version + 1

    result = await session.execute(
        update(Learner)
        .where(Learner.id == learner_id, Learner.version == expected_version)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def read_xp(session: AsyncSession, learner_id: uuid.UUID) -> int:
    result = await session.execute(select(Learner.xp).where(Learner.id == learner_id))
    return result.scalar_one_or_none() or 0
