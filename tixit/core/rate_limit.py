"""Fixed-window request counters keyed by (bucket, client address).

This is the only in-process state shared between requests. One instance
lives on ``app.state.rate_limiter``; sync routes run in a thread pool, so
every read-modify-write happens under a lock.
"""

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Limit:
    requests: int
    window_seconds: int


@dataclass(frozen=True)
class Decision:
    allowed: bool
    remaining: int
    retry_after: int


class RateLimiter:

    def __init__(self, limits: dict[str, Limit], clock: Callable[[], float] = time.monotonic):
        self._limits = dict(limits)
        self._clock = clock
        self._lock = threading.Lock()
        # (bucket, key) -> [window_start, count]
        self._windows: dict[tuple[str, str], list[float]] = {}
        # full sweeps run at most once per shortest window
        self._sweep_interval = min((limit.window_seconds for limit in self._limits.values()), default=60)
        self._next_sweep: float | None = None

    def limit_for(self, bucket: str) -> Limit:
        return self._limits[bucket]

    def hit(self, bucket: str, key: str) -> Decision:
        """Count one request; the request is allowed when the window still has room."""
        limit = self._limits[bucket]
        now = self._clock()
        with self._lock:
            if self._next_sweep is None or now >= self._next_sweep:
                self._evict_expired(now)
                self._next_sweep = now + self._sweep_interval
            slot = self._windows.get((bucket, key))
            if slot is None or now - slot[0] >= limit.window_seconds:
                slot = [now, 0]
                self._windows[(bucket, key)] = slot
            if slot[1] >= limit.requests:
                retry_after = max(1, math.ceil(slot[0] + limit.window_seconds - now))
                logger.info("Rate limit exceeded", extra={"bucket": bucket, "client": key})
                return Decision(allowed=False, remaining=0, retry_after=retry_after)
            slot[1] += 1
            return Decision(allowed=True, remaining=limit.requests - int(slot[1]), retry_after=0)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

    def _evict_expired(self, now: float) -> None:
        expired = [
            k for k, (start, _) in self._windows.items()
            if now - start >= self._limits[k[0]].window_seconds
        ]
        for k in expired:
            del self._windows[k]


def limiter_from_settings(s) -> RateLimiter:
    return RateLimiter({
        "auth": Limit(s.RATE_LIMIT_AUTH, s.RATE_LIMIT_AUTH_WINDOW_SECONDS),
        "ticket_create": Limit(s.RATE_LIMIT_TICKET_CREATE, s.RATE_LIMIT_TICKET_CREATE_WINDOW_SECONDS),
        "ticket_list": Limit(s.RATE_LIMIT_TICKET_LIST, s.RATE_LIMIT_TICKET_LIST_WINDOW_SECONDS),
    })
