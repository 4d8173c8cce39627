"""Unit tests for the client-side engagement tracker, driven by a manual clock."""

import heapq
import itertools
from typing import Callable, List, Optional
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from learnpulse.client import EngagementTracker, HttpEngagementTransport
from learnpulse.client import transport as transport_module


class ManualTimer:
    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Fake single-threaded scheduler: timers fire only when advance() is called."""

    def __init__(self):
        self.now = 0.0
        self._queue: list = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self.now + delay, callback)
        heapq.heappush(self._queue, (timer.due, next(self._seq), timer))
        return timer

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target:
            due, _, timer = heapq.heappop(self._queue)
            self.now = due
            if not timer.cancelled:
                timer.callback()
        self.now = target

    @property
    def pending(self) -> int:
        return sum(1 for _, _, timer in self._queue if not timer.cancelled)


class RecordingTransport:
    def __init__(self, fail: bool = False):
        self.sent: List[dict] = []
        self.beacons: List[dict] = []
        self.fail = fail

    def send(self, payload: dict) -> None:
        if self.fail:
            raise ConnectionError("offline")
        self.sent.append(payload)

    def send_beacon(self, payload: dict) -> None:
        self.beacons.append(payload)

    def total_seconds(self) -> int:
        return sum(p["seconds"] for p in self.sent + self.beacons)


def make_tracker(
    transport: Optional[RecordingTransport] = None,
    batch_seconds: float = 10.0,
    idle_timeout_seconds: float = 60.0,
):
    scheduler = ManualScheduler()
    transport = transport or RecordingTransport()
    tracker = EngagementTracker(
        transport,
        resource_id="m-video",
        resource_type="Visual",
        scheduler=scheduler,
        batch_seconds=batch_seconds,
        idle_timeout_seconds=idle_timeout_seconds,
    )
    return tracker, scheduler, transport


class TestTicking:

    def test_counts_active_seconds(self):
        tracker, scheduler, _ = make_tracker()
        tracker.start_tracking()
        scheduler.advance(5)
        assert tracker.unsaved_seconds == 5

    def test_start_twice_does_not_double_count(self):
        tracker, scheduler, _ = make_tracker()
        tracker.start_tracking()
        tracker.start_tracking()
        scheduler.advance(4)
        assert tracker.unsaved_seconds == 4

    def test_no_tracking_without_resource(self):
        tracker, scheduler, _ = make_tracker()
        tracker.resource_id = None
        tracker.start_tracking()
        scheduler.advance(3)
        assert tracker.is_tracking is False
        assert tracker.unsaved_seconds == 0


class TestSync:

    def test_periodic_flush_sends_and_resets(self):
        tracker, scheduler, transport = make_tracker(batch_seconds=10)
        tracker.mount()
        tracker.start_tracking()
        scheduler.advance(25)
        assert sum(p["seconds"] for p in transport.sent) + tracker.unsaved_seconds == 25
        assert len(transport.sent) == 2
        assert transport.sent[0]["resourceId"] == "m-video"
        assert transport.sent[0]["resourceType"] == "Visual"
        assert "timestamp" in transport.sent[0]

    def test_zero_seconds_is_not_sent(self):
        tracker, scheduler, transport = make_tracker()
        tracker.mount()
        scheduler.advance(30)
        assert transport.sent == []
        assert tracker.sync() is None

    def test_failed_sync_does_not_roll_back(self):
        tracker, scheduler, transport = make_tracker(transport=RecordingTransport(fail=True))
        tracker.start_tracking()
        scheduler.advance(5)
        payload = tracker.sync()
        assert payload["seconds"] == 5
        assert tracker.unsaved_seconds == 0

    def test_stop_tracking_flushes(self):
        tracker, scheduler, transport = make_tracker()
        tracker.start_tracking()
        scheduler.advance(7)
        tracker.stop_tracking()
        scheduler.advance(5)
        assert [p["seconds"] for p in transport.sent] == [7]
        assert tracker.unsaved_seconds == 0


class TestIdleCutoff:

    def test_sixty_one_idle_seconds_stop_accumulation(self):
        tracker, scheduler, transport = make_tracker(idle_timeout_seconds=60)
        tracker.mount()
        tracker.report_activity()
        scheduler.advance(61)

        assert tracker.is_tracking is False
        assert tracker.unsaved_seconds == 0
        flushed = transport.total_seconds()
        assert 59 <= flushed <= 60

        scheduler.advance(120)
        assert transport.total_seconds() == flushed

    def test_activity_pushes_idle_deadline(self):
        tracker, scheduler, _ = make_tracker(idle_timeout_seconds=60)
        tracker.report_activity()
        scheduler.advance(50)
        tracker.report_activity()
        scheduler.advance(50)
        assert tracker.is_tracking is True
        assert tracker.unsaved_seconds == 100


class TestLifecycle:

    def test_switch_resource_flushes_without_carry_over(self):
        tracker, scheduler, transport = make_tracker()
        tracker.start_tracking()
        scheduler.advance(8)
        tracker.switch_resource("m-reading", "Verbal")
        assert transport.sent[-1]["resourceId"] == "m-video"
        assert transport.sent[-1]["seconds"] == 8
        assert tracker.unsaved_seconds == 0
        assert tracker.is_tracking is False

        tracker.start_tracking()
        scheduler.advance(3)
        tracker.sync()
        assert transport.sent[-1]["resourceId"] == "m-reading"
        assert transport.sent[-1]["resourceType"] == "Verbal"
        assert transport.sent[-1]["seconds"] == 3

    def test_hidden_page_stops_and_flushes(self):
        tracker, scheduler, transport = make_tracker()
        tracker.report_activity()
        scheduler.advance(6)
        tracker.on_visibility_change(hidden=True)
        scheduler.advance(10)
        assert tracker.is_tracking is False
        assert transport.total_seconds() == 6

    def test_visible_page_changes_nothing(self):
        tracker, scheduler, _ = make_tracker()
        tracker.start_tracking()
        scheduler.advance(2)
        tracker.on_visibility_change(hidden=False)
        assert tracker.is_tracking is True

    def test_close_uses_beacon_and_cancels_timers(self):
        tracker, scheduler, transport = make_tracker()
        tracker.mount()
        tracker.report_activity()
        scheduler.advance(4)
        tracker.close()

        assert transport.sent == []
        assert [p["seconds"] for p in transport.beacons] == [4]
        assert scheduler.pending == 0

        tracker.start_tracking()
        scheduler.advance(30)
        assert tracker.unsaved_seconds == 0

    def test_close_is_idempotent(self):
        tracker, scheduler, transport = make_tracker()
        tracker.start_tracking()
        scheduler.advance(2)
        tracker.close()
        tracker.close()
        assert len(transport.beacons) == 1


class TestHttpTransport:

    @pytest.mark.asyncio
    async def test_sync_sends_bearer_header(self):
        seen: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"message": "Engagement captured"})

        client = httpx.AsyncClient(base_url="http://api.test/api/v1", transport=httpx.MockTransport(handler))
        http = HttpEngagementTransport("http://api.test/api/v1", token=lambda: "tok-123", client=client)
        http.send({"resourceId": "m-1", "resourceType": "Visual", "seconds": 3})
        await http.wait_pending()
        await client.aclose()

        assert len(seen) == 1
        assert seen[0].url.path == "/api/v1/analytics/sync"
        assert seen[0].headers["Authorization"] == "Bearer tok-123"

    @pytest.mark.asyncio
    async def test_sync_server_error_is_swallowed(self):
        client = httpx.AsyncClient(
            base_url="http://api.test/api/v1",
            transport=httpx.MockTransport(lambda request: httpx.Response(500)),
        )
        http = HttpEngagementTransport("http://api.test/api/v1", token="tok-123", client=client)
        http.send({"resourceId": "m-1", "resourceType": "Visual", "seconds": 3})
        await http.wait_pending()
        await client.aclose()

        assert http._pending == set()

    @pytest.mark.asyncio
    async def test_beacon_puts_token_in_body(self, monkeypatch):
        beacon_client = MagicMock()
        beacon_client.post = AsyncMock(return_value=MagicMock(status_code=200))
        beacon_client.__aenter__ = AsyncMock(return_value=beacon_client)
        beacon_client.__aexit__ = AsyncMock(return_value=None)
        monkeypatch.setattr(transport_module.httpx, "AsyncClient", MagicMock(return_value=beacon_client))

        http = HttpEngagementTransport("http://api.test/api/v1/", token="tok-123")
        http.send_beacon({"resourceId": "m-1", "resourceType": "Visual", "seconds": 3})
        await http.wait_pending()

        beacon_client.post.assert_awaited_once()
        args, kwargs = beacon_client.post.call_args
        assert args[0] == "http://api.test/api/v1/analytics/beacon"
        assert kwargs["json"]["token"] == "tok-123"
        assert kwargs["json"]["seconds"] == 3
