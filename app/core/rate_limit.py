"""
Fixed-window request limiter.

Counters live in process memory, so each API instance limits independently.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable
from uuid import UUID

from fastapi import Request

from app.config import settings
from app.core.exceptions import RateLimitError

logger = logging.getLogger(__name__)


@dataclass
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_in: float


class RateLimiter:
    """Counts requests per key inside fixed windows of `window_seconds`."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._windows: dict[str, tuple[float, int]] = {}

    def check(self, key: str, limit: int, window_seconds: int) -> RateLimitResult:
        now = self._clock()
        window_start, count = self._windows.get(key, (now, 0))

        if now - window_start >= window_seconds:
            window_start, count = now, 0

        reset_in = window_seconds - (now - window_start)
        if count >= limit:
            return RateLimitResult(allowed=False, remaining=0, reset_in=reset_in)

        count += 1
        self._windows[key] = (window_start, count)
        self._prune(now, window_seconds)
        return RateLimitResult(allowed=True, remaining=limit - count, reset_in=reset_in)

    def reset(self, key: str | None = None) -> None:
        if key is None:
            self._windows.clear()
        else:
            self._windows.pop(key, None)

    def _prune(self, now: float, window_seconds: int) -> None:
        # Only sweep once the table grows; expired windows are harmless otherwise
        if len(self._windows) < 10_000:
            return
        expired = [k for k, (start, _) in self._windows.items() if now - start >= window_seconds]
        for k in expired:
            del self._windows[k]


rate_limiter = RateLimiter()


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


def enforce_rate_limit(request: Request, user_id: UUID, scope: str, limit: int) -> None:
    """Raise RateLimitError when `user_id` exceeded `limit` calls for `scope`."""
    if not settings.RATE_LIMIT_ENABLED:
        return

    key = f"{client_ip(request)}:{user_id}:{scope}"
    result = rate_limiter.check(key, limit, settings.RATE_LIMIT_WINDOW_SECONDS)
    if not result.allowed:
        retry_after = max(1, math.ceil(result.reset_in))
        logger.warning("Rate limit exceeded (key=%s, limit=%d)", key, limit)
        raise RateLimitError(retry_after=retry_after)
