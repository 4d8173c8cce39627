"""
Engagement Ingestion - durable time samples and rolling learner stats.

Each accepted sample produces exactly two writes:
1. one append-only EngagementLog row
2. one atomic UPDATE on the learner's rolling engagement counters
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from learnpulse.kernel.counters import ensure_learner, increment_counters
from learnpulse.kernel.errors import ValidationError
from learnpulse.kernel.identity import LearnerRef
from learnpulse.kernel.models import DeliveryChannel, EngagementLog, ResourceFormat
from learnpulse.logging_config import get_logger

logger = get_logger(__name__)

# resource_type (lower-cased) -> Learner bucket column
_FORMAT_BUCKETS: Dict[str, str] = {
    ResourceFormat.VISUAL.value.lower(): "engagement_visual_seconds",
    ResourceFormat.VERBAL.value.lower(): "engagement_verbal_seconds",
    ResourceFormat.AUDIO.value.lower(): "engagement_audio_seconds",
}

# One sample never covers more than a day of active time
MAX_SAMPLE_SECONDS = 86400
# EngagementLog column widths
MAX_RESOURCE_ID_LENGTH = 255
MAX_RESOURCE_TYPE_LENGTH = 50


class EngagementSample(BaseModel):
    """A validated, normalized time sample."""

    resource_id: str
    resource_type: str
    seconds: int
    timestamp: datetime


def coerce_seconds(value: Any) -> int:
    """Whole seconds from a loosely typed payload value; anything unusable is 0."""
    if isinstance(value, bool):
        return 0
    try:
        seconds = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(0, seconds)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Accept datetimes, ISO-8601 strings and epoch milliseconds."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def build_sample(
    resource_id: Any,
    resource_type: Any,
    seconds: Any,
    timestamp: Any = None,
) -> EngagementSample:
    """
    Normalize raw payload fields into an EngagementSample.

    Raises:
        ValidationError: No resource id, no positive whole seconds, seconds
            beyond MAX_SAMPLE_SECONDS, or fields wider than their columns.
    """
    resource = str(resource_id).strip() if resource_id is not None else ""
    if not resource:
        raise ValidationError("resourceId is required")
    if len(resource) > MAX_RESOURCE_ID_LENGTH:
        raise ValidationError("resourceId is too long")
    whole_seconds = coerce_seconds(seconds)
    if whole_seconds <= 0:
        raise ValidationError("seconds must be a positive number")
    if whole_seconds > MAX_SAMPLE_SECONDS:
        raise ValidationError("seconds exceeds the per-sample limit")
    kind = str(resource_type).strip() if resource_type else ""
    if len(kind) > MAX_RESOURCE_TYPE_LENGTH:
        raise ValidationError("resourceType is too long")
    return EngagementSample(
        resource_id=resource,
        resource_type=kind or ResourceFormat.VISUAL.value,
        seconds=whole_seconds,
        timestamp=parse_timestamp(timestamp) or datetime.now(timezone.utc),
    )


class EngagementIngestionService:
    """
    Persists engagement samples for resolved learners.

    Usage:
        service = EngagementIngestionService(session)
        stored = await service.record_engagement(learner, "m-1", "Visual", 12)
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def record_engagement(
        self,
        learner: LearnerRef,
        resource_id: Any,
        resource_type: Any = None,
        seconds: Any = 0,
        timestamp: Any = None,
        channel: DeliveryChannel = DeliveryChannel.SYNC,
    ) -> bool:
        """
        Store one engagement sample.

        Malformed samples are a silent no-op. Returns True when the sample was
        persisted, False when it was ignored.
        """
        try:
            sample = build_sample(resource_id, resource_type, seconds, timestamp)
        except ValidationError as e:
            logger.debug("Ignoring engagement sample", extra={"reason": e.message, "channel": channel.value})
            return False

        await ensure_learner(self.session, learner.id)

        self.session.add(
            EngagementLog(
                learner_id=learner.id,
                resource_id=sample.resource_id,
                resource_type=sample.resource_type,
                seconds=sample.seconds,
                channel=channel.value,
                timestamp=sample.timestamp,
            )
        )
        await self.session.flush()

        deltas = {"engagement_total_seconds": sample.seconds, "engagement_sessions": 1}
        bucket = _FORMAT_BUCKETS.get(sample.resource_type.lower())
        if bucket:
            deltas[bucket] = sample.seconds
        await increment_counters(
            self.session,
            learner.id,
            deltas,
            assignments={"last_active_at": datetime.now(timezone.utc)},
        )

        logger.info(
            "Engagement captured",
            extra={
                "resource_id": sample.resource_id,
                "resource_type": sample.resource_type,
                "seconds": sample.seconds,
                "channel": channel.value,
            },
        )
        return True
