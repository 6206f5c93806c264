"""Per-client request cap over a rolling window."""

from __future__ import annotations

import logging
import math
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable

from fastapi import Request

from ..exceptions import RateLimitedError

logger = logging.getLogger(__name__)


@dataclass
class RateLimiter:
    """Sliding-log limiter keyed by client address."""

    max_requests: int = 100
    window_seconds: float = 15 * 60
    clock: Callable[[], float] = time.monotonic
    hits: dict[str, deque[float]] = field(default_factory=dict)
    prune_interval_seconds: float | None = None
    _next_prune: float = field(default=float("-inf"), init=False, repr=False)

    def check(self, key: str) -> None:
        now = self.clock()
        window_start = now - self.window_seconds
        bucket = self.hits.setdefault(key, deque())
        while bucket and bucket[0] <= window_start:
            bucket.popleft()
        if len(bucket) >= self.max_requests:
            retry_after = max(1, math.ceil(bucket[0] + self.window_seconds - now))
            logger.warning(
                "rate_limit.rejected",
                extra={"client": key, "retry_after": retry_after},
            )
            raise RateLimitedError(retry_after)
        bucket.append(now)
        if now >= self._next_prune:
            self._prune(window_start)
            self._next_prune = now + (self.prune_interval_seconds or self.window_seconds)

    def _prune(self, window_start: float) -> None:
        """Drop clients with no hits inside the current window."""
        stale = [key for key, bucket in self.hits.items() if not bucket or bucket[-1] <= window_start]
        for key in stale:
            del self.hits[key]


def client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def enforce_rate_limit(request: Request) -> None:
    """App-wide dependency; runs before any endpoint logic."""
    limiter: RateLimiter | None = getattr(request.app.state, "rate_limiter", None)
    if limiter is None:
        return
    limiter.check(client_key(request))


__all__ = ["RateLimiter", "client_key", "enforce_rate_limit"]
