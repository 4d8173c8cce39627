"""
Engagement analytics endpoints - tracker sync and unload beacon.

Both accept the credential from the Authorization header, a `token` field in
the body, or a `token` query parameter, and parse the body leniently.
"""

from fastapi import APIRouter, HTTPException, Request, status
from sqlalchemy.exc import SQLAlchemyError

from learnpulse.api.deps import DbSession, Resolver, extract_credential, read_json_body
from learnpulse.engines.engagement import EngagementIngestionService
from learnpulse.kernel.errors import AuthError, PersistenceError
from learnpulse.kernel.identity import resolve_learner
from learnpulse.kernel.models import DeliveryChannel
from learnpulse.logging_config import get_logger, learner_id_var
from learnpulse.schemas.analytics import EngagementSyncRequest
from learnpulse.schemas.common import MessageResponse

router = APIRouter()
logger = get_logger(__name__)


async def _ingest(
    request: Request,
    db: DbSession,
    resolver: Resolver,
    channel: DeliveryChannel,
) -> None:
    body = await read_json_body(request)
    credential = extract_credential(request, body)
    try:
        learner = await resolve_learner(resolver, credential)
    except AuthError as e:
        logger.info("Rejected engagement sample", extra={"reason": e.message, "channel": channel.value})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    learner_id_var.set(str(learner.id))

    sample = EngagementSyncRequest.model_validate(body)
    service = EngagementIngestionService(db)
    try:
        await service.record_engagement(
            learner,
            resource_id=sample.resource_id,
            resource_type=sample.resource_type,
            seconds=sample.seconds,
            timestamp=sample.timestamp,
            channel=channel,
        )
        await db.commit()
    except (SQLAlchemyError, PersistenceError):
        await db.rollback()
        logger.exception("Failed to persist engagement sample", extra={"channel": channel.value})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to record engagement",
        )


@router.post("/sync", response_model=MessageResponse)
async def sync_engagement(request: Request, db: DbSession, resolver: Resolver):
    """Periodic time sample from an active tracker."""
    await _ingest(request, db, resolver, DeliveryChannel.SYNC)
    return MessageResponse(message="Engagement captured")


@router.post("/beacon", response_model=MessageResponse)
async def beacon_engagement(request: Request, db: DbSession, resolver: Resolver):
    """Final time sample sent while the page unloads; the sender never reads the reply."""
    await _ingest(request, db, resolver, DeliveryChannel.BEACON)
    return MessageResponse(message="Beacon received")
