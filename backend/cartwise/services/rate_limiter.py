"""Process-local sliding-window rate limiter with a countdown ticker."""

import asyncio
import logging
import math
import time
from collections import deque

from cartwise.config import settings

logger = logging.getLogger(__name__)


class SlidingWindowRateLimiter:
    """At most ``max_requests`` accepted calls in any rolling ``window_seconds``.

    Rejected calls are not recorded and do not consume a slot.
    """

    def __init__(
        self,
        max_requests: int | None = None,
        window_seconds: float | None = None,
        clock=time.monotonic,
    ):
        self.max_requests = settings.chat_rate_limit_requests if max_requests is None else max_requests
        self.window_seconds = (
            settings.chat_rate_limit_window_seconds if window_seconds is None else window_seconds
        )
        self.clock = clock
        self._accepted: deque[float] = deque()
        self.window_ends_at: float | None = None

    def allow(self, now: float | None = None) -> bool:
        now = self.clock() if now is None else now
        self._evict(now)

        if len(self._accepted) >= self.max_requests:
            self.window_ends_at = self._accepted[0] + self.window_seconds
            logger.debug(f"Rate limited; window ends in {self.window_ends_at - now:.1f}s")
            return False

        self._accepted.append(now)
        return True

    def seconds_until_reset(self, now: float | None = None) -> int:
        """Whole seconds until a rejected caller may try again (0 when open)."""
        if self.window_ends_at is None:
            return 0
        now = self.clock() if now is None else now
        remaining = max(0, math.ceil(self.window_ends_at - now))
        if remaining == 0:
            self.window_ends_at = None
        return remaining

    @property
    def is_limited(self) -> bool:
        return self.seconds_until_reset() > 0

    def recent_count(self, now: float | None = None) -> int:
        now = self.clock() if now is None else now
        self._evict(now)
        return len(self._accepted)

    def _evict(self, now: float) -> None:
        cutoff = now - self.window_seconds
        while self._accepted and self._accepted[0] <= cutoff:
            self._accepted.popleft()


class CountdownTicker:
    """Ticks once per interval with the seconds left on a limiter's window.

    Stops itself when the count reaches 0. Owners must ``cancel()`` it on
    teardown so no task outlives its session.
    """

    def __init__(self, limiter: SlidingWindowRateLimiter, on_tick=None, interval: float = 1.0):
        self.limiter = limiter
        self.on_tick = on_tick
        self.interval = interval
        self.remaining = 0
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start ticking on the running loop; no-op if already running."""
        if self.running:
            return
        self.remaining = self.limiter.seconds_until_reset()
        self._task = asyncio.get_running_loop().create_task(self._run())

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _run(self) -> None:
        while True:
            self.remaining = self.limiter.seconds_until_reset()
            if self.on_tick is not None:
                self.on_tick(self.remaining)
            if self.remaining <= 0:
                return
            await asyncio.sleep(self.interval)
