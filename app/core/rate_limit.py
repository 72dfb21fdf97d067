"""Sliding-window rate limiter keyed by client address.

The limiter is owned by the application instance (``app.state.rate_limiter``)
rather than living at module level, so every app and every test gets its own
counters.  State is advisory: losing it on restart only resets quotas.

``sweep()`` runs on the APScheduler background thread while ``check()``
runs on the event loop, hence the ``threading.Lock``.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from fastapi import Request

from app.core.errors import RateLimitExceededError
from app.models.enums import FailureKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    retry_after: int = 0


class SlidingWindowRateLimiter:
    """Allow at most ``max_requests`` per client within ``window_seconds``."""

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._requests: dict[str, list[float]] = {}

    def check(self, client_id: str) -> RateLimitDecision:
        """Record a request for ``client_id`` if it fits in the window."""
        now = self._clock()
        window_start = now - self.window_seconds

        with self._lock:
            recent = [ts for ts in self._requests.get(client_id, []) if ts > window_start]

            if len(recent) >= self.max_requests:
                self._requests[client_id] = recent
                retry_after = max(1, math.ceil(recent[0] + self.window_seconds - now))
                return RateLimitDecision(allowed=False, remaining=0, retry_after=retry_after)

            recent.append(now)
            self._requests[client_id] = recent
            return RateLimitDecision(
                allowed=True,
                remaining=self.max_requests - len(recent),
            )

    def sweep(self) -> int:
        """Drop expired timestamps and forget idle clients.

        Returns the number of clients removed.
        """
        cutoff = self._clock() - self.window_seconds
        removed = 0

        with self._lock:
            for client_id in list(self._requests):
                recent = [ts for ts in self._requests[client_id] if ts > cutoff]
                if recent:
                    self._requests[client_id] = recent
                else:
                    del self._requests[client_id]
                    removed += 1
            active = len(self._requests)

        logger.debug(
            "rate_limiter_sweep",
            extra={"removed_clients": removed, "active_clients": active},
        )
        return removed

    @property
    def active_clients(self) -> int:
        with self._lock:
            return len(self._requests)


def client_identifier(request: Request) -> str:
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


async def enforce_rate_limit(request: Request) -> None:
    """Router dependency rejecting callers over their quota with 429."""
    limiter: SlidingWindowRateLimiter = request.app.state.rate_limiter
    client_id = client_identifier(request)
    decision = limiter.check(client_id)

    if not decision.allowed:
        logger.warning(
            "rate_limit_exceeded",
            extra={
                "client_id": client_id,
                "path": request.url.path,
                "retry_after": decision.retry_after,
            },
        )
        metrics = getattr(request.app.state, "metrics", None)
        if metrics is not None:
            metrics.record_failure(FailureKind.rate_limited)
        raise RateLimitExceededError(decision.retry_after)
