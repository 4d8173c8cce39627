"""
Delivery of engagement samples to the ingestion endpoints.

Both channels are non-blocking for the caller:
- send(): regular sync over the tracker's own HTTP client
- send_beacon(): detached, single-attempt delivery on a short-lived client so
  it survives the tracker (and its client) being torn down
"""

import asyncio
from typing import Any, Callable, Dict, Optional, Protocol, Set, Union

import httpx

from learnpulse.logging_config import get_logger

logger = get_logger(__name__)

TokenSource = Union[str, Callable[[], Optional[str]], None]

SYNC_PATH = "/analytics/sync"
BEACON_PATH = "/analytics/beacon"


class EngagementTransport(Protocol):
    def send(self, payload: Dict[str, Any]) -> None:
        ...

    def send_beacon(self, payload: Dict[str, Any]) -> None:
        ...


class HttpEngagementTransport:
    """
    httpx-based transport.

    Usage:
        transport = HttpEngagementTransport("http://localhost:8000/api/v1", token=lambda: store.token)
        tracker = EngagementTracker(transport, resource_id="m-1", resource_type="Visual")
    """

    def __init__(
        self,
        base_url: str,
        token: TokenSource = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 5.0,
    ):
        self.base_url = base_url.rstrip("/")
        self._token = token
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None
        # Strong references so pending sends are not garbage collected
        self._pending: Set[asyncio.Task] = set()

    def _current_token(self) -> Optional[str]:
        if callable(self._token):
            return self._token()
        return self._token

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)
        return self._client

    def send(self, payload: Dict[str, Any]) -> None:
        headers = {}
        token = self._current_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._spawn(self._post_sync(dict(payload), headers))

    def send_beacon(self, payload: Dict[str, Any]) -> None:
        body = {**payload, "token": self._current_token()}
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # No loop left (interpreter shutdown, sync caller): one blocking attempt
            self._post_beacon_blocking(body)
            return
        self._spawn(self._post_beacon(body))

    async def wait_pending(self) -> None:
        """Wait for in-flight sends, e.g. before shutdown or in tests."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def aclose(self) -> None:
        await self.wait_pending()
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    def _spawn(self, coro) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _post_sync(self, payload: Dict[str, Any], headers: Dict[str, str]) -> None:
        try:
            response = await self.client.post(SYNC_PATH, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as e:
            # Periodic sync failures are tolerated; the sample is lost
            logger.debug("Engagement sync failed", extra={"error": str(e)})

    async def _post_beacon(self, body: Dict[str, Any]) -> None:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as beacon_client:
                await beacon_client.post(f"{self.base_url}{BEACON_PATH}", json=body)
        except httpx.HTTPError as e:
            logger.debug("Engagement beacon failed", extra={"error": str(e)})

    def _post_beacon_blocking(self, body: Dict[str, Any]) -> None:
        try:
            httpx.post(f"{self.base_url}{BEACON_PATH}", json=body, timeout=self.timeout)
        except httpx.HTTPError as e:
            logger.debug("Engagement beacon failed", extra={"error": str(e)})
