"""
Engagement Tracker - client-side active-time accounting for one resource.

Timers (all on the injected scheduler):
- tick: +1 unsaved second every second while tracking
- idle: fires after idle_timeout without report_activity(); stops and flushes
- flush: every batch_seconds while mounted; sends unsaved seconds

Unsaved seconds are reset on every send, successful or not. A failed periodic
sync loses at most one batch.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from learnpulse.client.scheduler import AsyncioScheduler, Scheduler, TimerHandle
from learnpulse.client.transport import EngagementTransport
from learnpulse.config import get_settings
from learnpulse.logging_config import get_logger

logger = get_logger(__name__)

TICK_SECONDS = 1.0


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EngagementTracker:
    """
    Usage:
        tracker = EngagementTracker(transport, resource_id="m-1", resource_type="Visual")
        tracker.mount()
        tracker.report_activity()   # on user input
        ...
        tracker.close()             # on navigation away
    """

    def __init__(
        self,
        transport: EngagementTransport,
        resource_id: Optional[str] = None,
        resource_type: Optional[str] = None,
        scheduler: Optional[Scheduler] = None,
        batch_seconds: Optional[float] = None,
        idle_timeout_seconds: Optional[float] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        settings = get_settings()
        self.transport = transport
        self.resource_id = resource_id
        self.resource_type = resource_type
        self.scheduler = scheduler or AsyncioScheduler()
        self.batch_seconds = batch_seconds or settings.tracker_batch_seconds
        self.idle_timeout_seconds = idle_timeout_seconds or settings.tracker_idle_timeout_seconds
        self.clock = clock or _utcnow

        self._unsaved_seconds = 0
        self._tracking = False
        self._mounted = False
        self._closed = False
        self._tick: Optional[TimerHandle] = None
        self._idle: Optional[TimerHandle] = None
        self._flush: Optional[TimerHandle] = None

    @property
    def unsaved_seconds(self) -> int:
        return self._unsaved_seconds

    @property
    def is_tracking(self) -> bool:
        return self._tracking

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def mount(self) -> None:
        """Start the periodic flush."""
        if self._closed or self._mounted:
            return
        self._mounted = True
        self._arm_flush()

    def close(self) -> None:
        """Cancel every timer and hand the remainder to the beacon channel."""
        if self._closed:
            return
        self._tracking = False
        self._cancel_tick()
        self._cancel_idle()
        if self._flush is not None:
            self._flush.cancel()
            self._flush = None
        self._mounted = False
        self.sync(closing=True)
        self._closed = True

    # ------------------------------------------------------------------
    # Tracking
    # ------------------------------------------------------------------

    def start_tracking(self) -> None:
        if self._closed or not self.resource_id or self._tracking:
            return
        self._tracking = True
        self._arm_tick()

    def stop_tracking(self) -> None:
        self._halt()
        self.sync()

    def report_activity(self) -> None:
        """User input: keep (or start) tracking and push the idle deadline out."""
        if self._closed:
            return
        self.start_tracking()
        self._cancel_idle()
        self._idle = self.scheduler.call_later(self.idle_timeout_seconds, self._on_idle)

    def switch_resource(self, resource_id: Optional[str], resource_type: Optional[str]) -> None:
        """Flush the previous resource's seconds, then start over on the new one."""
        if (resource_id, resource_type) == (self.resource_id, self.resource_type):
            return
        self.sync()
        self._halt()
        self._unsaved_seconds = 0
        self.resource_id = resource_id
        self.resource_type = resource_type

    def on_visibility_change(self, hidden: bool) -> None:
        if hidden:
            self._halt()
            self.sync()

    def sync(self, closing: bool = False) -> Optional[Dict[str, Any]]:
        """
        Send unsaved seconds, if any. Returns the payload that was handed to
        the transport, or None when there was nothing to send.
        """
        if not self.resource_id or not self.resource_type:
            return None
        if self._unsaved_seconds <= 0:
            return None

        payload = {
            "resourceId": self.resource_id,
            "resourceType": self.resource_type,
            "seconds": self._unsaved_seconds,
            "timestamp": self.clock().isoformat(),
        }
        self._unsaved_seconds = 0
        try:
            if closing:
                self.transport.send_beacon(payload)
            else:
                self.transport.send(payload)
        except Exception as e:
            logger.debug(
                "Engagement send failed",
                extra={"resource_id": self.resource_id, "seconds": payload["seconds"], "error": str(e)},
            )
        return payload

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def _halt(self) -> None:
        self._tracking = False
        self._cancel_tick()
        self._cancel_idle()

    def _arm_tick(self) -> None:
        self._tick = self.scheduler.call_later(TICK_SECONDS, self._on_tick)

    def _on_tick(self) -> None:
        self._tick = None
        if not self._tracking:
            return
        self._unsaved_seconds += 1
        self._arm_tick()

    def _cancel_tick(self) -> None:
        if self._tick is not None:
            self._tick.cancel()
            self._tick = None

    def _on_idle(self) -> None:
        self._idle = None
        self._tracking = False
        self._cancel_tick()
        self.sync()

    def _cancel_idle(self) -> None:
        if self._idle is not None:
            self._idle.cancel()
            self._idle = None

    def _arm_flush(self) -> None:
        self._flush = self.scheduler.call_later(self.batch_seconds, self._on_flush)

    def _on_flush(self) -> None:
        self._flush = None
        if not self._mounted:
            return
        self.sync()
        self._arm_flush()
