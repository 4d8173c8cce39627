"""Integration tests for EngagementIngestionService over a SQLite database."""

import pytest
from sqlalchemy import func, select

from learnpulse.engines.engagement import EngagementIngestionService
from learnpulse.kernel.counters import load_learner
from learnpulse.kernel.models import DeliveryChannel, EngagementLog


class TestRecordEngagement:

    @pytest.mark.asyncio
    async def test_sample_is_logged_and_counted(self, db_session, learner):
        service = EngagementIngestionService(db_session)

        stored = await service.record_engagement(
            learner, "m-video", "Visual", 12, "2026-03-02T09:00:00Z"
        )

        assert stored is True
        row = await load_learner(db_session, learner.id)
        assert row.engagement_total_seconds == 12
        assert row.engagement_sessions == 1
        assert row.engagement_visual_seconds == 12
        assert row.last_active_at is not None

        logs = (await db_session.execute(select(EngagementLog))).scalars().all()
        assert len(logs) == 1
        assert logs[0].resource_id == "m-video"
        assert logs[0].seconds == 12
        assert logs[0].channel == "sync"

    @pytest.mark.asyncio
    async def test_buckets_are_case_insensitive(self, db_session, learner):
        service = EngagementIngestionService(db_session)

        await service.record_engagement(learner, "m-1", "visual", 5)
        await service.record_engagement(learner, "m-2", "VERBAL", 7)
        await service.record_engagement(learner, "m-3", "Audio", 3)
        await service.record_engagement(learner, "m-4", "Kinesthetic", 4)

        row = await load_learner(db_session, learner.id)
        assert row.engagement_visual_seconds == 5
        assert row.engagement_verbal_seconds == 7
        assert row.engagement_audio_seconds == 3
        assert row.engagement_total_seconds == 19
        assert row.engagement_sessions == 4

    @pytest.mark.asyncio
    async def test_missing_type_defaults_to_visual(self, db_session, learner):
        service = EngagementIngestionService(db_session)

        await service.record_engagement(learner, "m-1", None, "9")

        row = await load_learner(db_session, learner.id)
        assert row.engagement_visual_seconds == 9
        log = (await db_session.execute(select(EngagementLog))).scalar_one()
        assert log.resource_type == "Visual"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("seconds", [0, -3, "abc", None, 1e30, "inf"])
    async def test_non_positive_seconds_are_ignored(self, db_session, learner, seconds):
        service = EngagementIngestionService(db_session)

        stored = await service.record_engagement(learner, "m-1", "Visual", seconds)

        assert stored is False
        count = await db_session.execute(select(func.count()).select_from(EngagementLog))
        assert count.scalar() == 0
        assert await load_learner(db_session, learner.id) is None

    @pytest.mark.asyncio
    async def test_missing_resource_is_ignored(self, db_session, learner):
        service = EngagementIngestionService(db_session)
        assert await service.record_engagement(learner, None, "Visual", 10) is False

    @pytest.mark.asyncio
    async def test_beacon_channel_recorded(self, db_session, learner):
        service = EngagementIngestionService(db_session)

        await service.record_engagement(learner, "m-1", "Audio", 4, channel=DeliveryChannel.BEACON)

        log = (await db_session.execute(select(EngagementLog))).scalar_one()
        assert log.channel == "beacon"

    @pytest.mark.asyncio
    async def test_overlong_resource_id_is_ignored(self, db_session, learner):
        service = EngagementIngestionService(db_session)

        assert await service.record_engagement(learner, "m" * 300, "Visual", 10) is False
        count = await db_session.execute(select(func.count()).select_from(EngagementLog))
        assert count.scalar() == 0
