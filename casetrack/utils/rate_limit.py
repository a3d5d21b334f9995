# casetrack/utils/rate_limit.py
import logging
import math
import threading
import time
from collections import defaultdict, deque
from typing import Callable, Deque, Dict

from fastapi import Request

from casetrack.exceptions import RateLimited

logger = logging.getLogger(__name__)

AUTH = "auth"
API = "api"


class SlidingWindowLimiter:
    """Counts requests per key over the last ``window`` seconds.

    Keys whose newest hit has left the window are dropped, at most once per
    window, so the table only holds clients seen recently.
    """

    def __init__(self, limit: int, window: float, clock: Callable[[], float] = time.monotonic):
        self.limit = limit
        self.window = window
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._last_sweep = clock()
        self._lock = threading.Lock()

    def _sweep(self, now: float) -> None:
        cutoff = now - self.window
        for key in [k for k, hits in self._hits.items() if not hits or hits[-1] <= cutoff]:
            del self._hits[key]
        self._last_sweep = now

    def hit(self, key: str) -> None:
        """Record one request for *key*, raising ``RateLimited`` once over the ceiling."""
        now = self._clock()
        with self._lock:
            if now - self._last_sweep >= self.window:
                self._sweep(now)
            hits = self._hits[key]
            while hits and hits[0] <= now - self.window:
                hits.popleft()
            if len(hits) >= self.limit:
                retry_after = max(1, math.ceil(hits[0] + self.window - now))
                raise RateLimited(retry_after)
            hits.append(now)

    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._hits)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()


def _client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


# Dependency factory; the limiter instances live on app.state
def rate_limit(policy: str):
    def _checker(request: Request) -> None:
        limiter: SlidingWindowLimiter = request.app.state.rate_limiters[policy]
        key = _client_key(request)
        try:
            limiter.hit(key)
        except RateLimited:
            logger.warning("Rate limit '%s' exceeded for %s on %s", policy, key, request.url.path)
            raise
    return _checker
