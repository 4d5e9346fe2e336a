"""Sliding-window rate limiter shared by the HTTP integrations."""

import asyncio
import logging
import time
from typing import Optional

logger = logging.getLogger(__name__)


class RateLimiter:
    """Sliding-window limiter usable from sync and async code.

    Nominatim asks for at most one request per second (``min_interval=1.0``)
    and the LLM providers enforce per-minute quotas, so each of those clients
    owns one of these.

    Usage::

        limiter = RateLimiter(requests_per_minute=30, name="openai")

        async with limiter:
            await call_provider()
    """

    def __init__(
        self,
        requests_per_minute: int = 60,
        requests_per_hour: Optional[int] = None,
        name: str = "default",
        min_interval: float = 0.0,
    ):
        self._rpm = requests_per_minute
        self._rph = requests_per_hour
        self._name = name
        self._min_interval = min_interval
        self._minute_window: list[float] = []
        self._hour_window: list[float] = []
        self._last_call: Optional[float] = None
        self._lock: Optional[asyncio.Lock] = None
        self._lock_loop: Optional[asyncio.AbstractEventLoop] = None

    def _prune(self, now: float) -> None:
        self._minute_window = [t for t in self._minute_window if now - t < 60.0]
        if self._rph:
            self._hour_window = [t for t in self._hour_window if now - t < 3600.0]

    def wait_time(self) -> float:
        """Seconds until the next call is allowed (0 when a slot is free)."""
        now = time.monotonic()
        self._prune(now)
        wait = 0.0
        if len(self._minute_window) >= self._rpm:
            wait = 60.0 - (now - self._minute_window[0])
        if self._rph and len(self._hour_window) >= self._rph:
            wait = max(wait, 3600.0 - (now - self._hour_window[0]))
        if self._min_interval and self._last_call is not None:
            wait = max(wait, self._min_interval - (now - self._last_call))
        return max(wait, 0.0)

    def _record(self) -> None:
        now = time.monotonic()
        self._last_call = now
        self._minute_window.append(now)
        if self._rph:
            self._hour_window.append(now)

    def acquire_sync(self) -> None:
        """Block the calling thread until a slot is free, then take it."""
        while True:
            wait = self.wait_time()
            if wait <= 0:
                break
            logger.debug("RateLimiter(%s) sleeping %.2fs", self._name, wait)
            time.sleep(wait)
        self._record()

    async def acquire(self) -> None:
        """Await a free slot, then take it."""
        # asyncio.Lock is bound to one loop; the dashboard runs each analysis in a new one.
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        async with self._lock:
            while True:
                wait = self.wait_time()
                if wait <= 0:
                    break
                logger.debug("RateLimiter(%s) async sleeping %.2fs", self._name, wait)
                await asyncio.sleep(wait)
            self._record()

    async def __aenter__(self):
        await self.acquire()
        return self

    async def __aexit__(self, *args):
        pass

    def __enter__(self):
        self.acquire_sync()
        return self

    def __exit__(self, *args):
        pass

    @property
    def requests_in_last_minute(self) -> int:
        self._prune(time.monotonic())
        return len(self._minute_window)
