"""Outbound GET with a fixed per-attempt timeout and linear backoff.

One httpx.AsyncClient is shared for the life of the process; call
``aclose()`` on shutdown. The delay function is injectable so tests can
record backoff without waiting.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable

import httpx

from config import Settings, settings as default_settings
from errors import UpstreamError

logger = logging.getLogger(__name__)


class Fetcher:
    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.settings = settings or default_settings
        self._sleep = sleep
        self._client = httpx.AsyncClient(
            transport=transport,
            headers={
                "User-Agent": self.settings.user_agent,
                "Accept": "application/json",
                "Cache-Control": "no-cache",
            },
        )

    async def fetch(self, url: str, retries: int | None = None, timeout_ms: int | None = None) -> Any:
        """GET ``url`` and return the decoded JSON body.

        Makes up to ``retries`` attempts. After a failed attempt ``i`` (0-based)
        waits ``backoff_ms * (i + 1)`` before the next one. Raises
        UpstreamError with the last error's message once attempts run out.
        """
        retries = self.settings.fetch_retries if retries is None else retries
        timeout_ms = self.settings.fetch_timeout_ms if timeout_ms is None else timeout_ms
        if retries < 1:
            raise ValueError(f"retries must be at least 1, got {retries}")

        for attempt in range(retries):
            try:
                # Caps the whole attempt; httpx timeouts only bound each phase.
                return await asyncio.wait_for(self._attempt(url, timeout_ms), timeout_ms / 1000)
            except (httpx.HTTPError, ValueError, asyncio.TimeoutError) as e:
                if isinstance(e, asyncio.TimeoutError):
                    message = f"Timed out after {timeout_ms}ms"
                else:
                    message = str(e) or type(e).__name__
                logger.warning("Attempt %d failed for %s: %s", attempt + 1, url, message)
                if attempt == retries - 1:
                    logger.error("Giving up on %s after %d attempts", url, retries)
                    raise UpstreamError(message, url=url) from e
                await self._sleep(self.settings.fetch_backoff_ms * (attempt + 1) / 1000)

    async def _attempt(self, url: str, timeout_ms: int) -> Any:
        resp = await self._client.get(url, timeout=httpx.Timeout(timeout_ms / 1000))
        resp.raise_for_status()
        return resp.json()

    @property
    def closed(self) -> bool:
        return self._client.is_closed

    async def aclose(self) -> None:
        await self._client.aclose()
