from __future__ import annotations

import hmac
import logging
import math
import time
from dataclasses import dataclass

from fastapi import HTTPException, Request
from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter

logger = logging.getLogger(__name__)

ADMIN_KEY_HEADER = "X-API-Key"


@dataclass(frozen=True)
class _LimitRule:
    max_requests: int
    window_seconds: int


def client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def is_admin_key(candidate: str | None, admin_key: str | None) -> bool:
    if not candidate or not admin_key:
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), admin_key.encode("utf-8"))


class FixedWindowLimiter:
    """Fixed-window request limiter keyed by client address.

    Used as a FastAPI dependency. Rejected requests get a 429 with a
    Retry-After header counting the seconds until the window resets.
    Requests carrying the admin key in X-API-Key are neither counted nor
    rejected.
    """

    def __init__(
        self,
        name: str,
        *,
        max_requests: int,
        window_ms: int,
        admin_key: str | None = None,
        enabled: bool = True,
        message: str = "Please slow down and try again later.",
    ) -> None:
        self.name = name
        self.enabled = enabled
        self.admin_key = admin_key
        self.message = message
        # limits works in whole seconds; sub-second windows round up.
        self.rule = _LimitRule(
            max_requests=max(1, int(max_requests)),
            window_seconds=max(1, math.ceil(int(window_ms) / 1000)),
        )
        self._item = RateLimitItemPerSecond(self.rule.max_requests, self.rule.window_seconds)
        self._storage = MemoryStorage()
        self._limiter = FixedWindowRateLimiter(self._storage)

    def hit(self, key: str) -> tuple[bool, int]:
        """Count one request for key. Returns (allowed, retry_after_seconds)."""
        if self._limiter.hit(self._item, self.name, key):
            return True, 0
        reset_time, _ = self._limiter.get_window_stats(self._item, self.name, key)
        retry_after = max(1, math.ceil(reset_time - time.time()))
        return False, retry_after

    def remaining(self, key: str) -> int:
        _, remaining = self._limiter.get_window_stats(self._item, self.name, key)
        return int(remaining)

    def reset(self) -> None:
        self._storage.reset()

    async def __call__(self, request: Request) -> None:
        if not self.enabled:
            return
        if is_admin_key(request.headers.get(ADMIN_KEY_HEADER), self.admin_key):
            return

        key = client_key(request)
        allowed, retry_after = self.hit(key)
        if allowed:
            return

        logger.warning("Rate limit %s exceeded by %s on %s", self.name, key, request.url.path)
        raise HTTPException(
            status_code=429,
            detail={
                "error": "Too many requests",
                "message": self.message,
                "retryAfter": retry_after,
            },
            headers={"Retry-After": str(retry_after)},
        )
