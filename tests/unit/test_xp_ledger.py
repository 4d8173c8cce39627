"""Unit tests for the XP reward table."""

from datetime import date

from learnpulse.engines.gamification.xp_ledger import XPRewards, login_reward_due, material_reward


class TestMaterialReward:

    def test_first_view_only(self):
        assert material_reward(first_view=True, newly_completed=False, is_quiz=False) == XPRewards.MATERIAL_VIEW

    def test_view_and_completion_in_one_event(self):
        assert material_reward(first_view=True, newly_completed=True, is_quiz=False) == 20

    def test_quiz_completion_adds_bonus(self):
        assert material_reward(first_view=False, newly_completed=True, is_quiz=True) == 40

    def test_repeat_view_earns_nothing(self):
        assert material_reward(first_view=False, newly_completed=False, is_quiz=True) == 0


class TestLoginReward:

    def test_due_when_never_rewarded(self):
        assert login_reward_due(None, date(2026, 3, 2)) is True

    def test_not_due_twice_same_day(self):
        assert login_reward_due(date(2026, 3, 2), date(2026, 3, 2)) is False

    def test_due_next_day(self):
        assert login_reward_due(date(2026, 3, 2), date(2026, 3, 3)) is True
