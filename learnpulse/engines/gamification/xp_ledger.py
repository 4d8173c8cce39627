"""
XP Ledger - fixed reward table and atomic XP credits.

Rewards are design-time constants, not runtime configuration.
"""

import uuid
from datetime import date
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from learnpulse.engines.gamification.streaks import is_same_day
from learnpulse.kernel.counters import increment_counters, read_xp


class XPRewards:
    """XP granted per qualifying event."""

    LOGIN = 10
    MATERIAL_VIEW = 5
    MATERIAL_COMPLETE = 15
    QUIZ_COMPLETE = 25  # on top of MATERIAL_COMPLETE


def login_reward_due(last_login_xp_date: Optional[date], today: date) -> bool:
    """Login XP is granted at most once per calendar day."""
    return not is_same_day(last_login_xp_date, today)


def material_reward(first_view: bool, newly_completed: bool, is_quiz: bool) -> int:
    """
    XP for a material interaction.

    first_view: the interaction row was created by this event
    newly_completed: this event moved the interaction from not-completed to completed
    """
    amount = 0
    if first_view:
        amount += XPRewards.MATERIAL_VIEW
    if newly_completed:
        amount += XPRewards.MATERIAL_COMPLETE
        if is_quiz:
            amount += XPRewards.QUIZ_COMPLETE
    return amount


class XPLedger:
    """Applies XP deltas to a learner with a single atomic increment."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def credit(self, learner_id: uuid.UUID, amount: int) -> int:
        """Add `amount` XP and return the learner's total afterwards."""
        if amount > 0:
            await increment_counters(self.session, learner_id, {"xp": amount})
        return await read_xp(self.session, learner_id)

    async def balance(self, learner_id: uuid.UUID) -> int:
        return await read_xp(self.session, learner_id)
