"""
Fixed-window rate limiting.

Each API key gets ``capacity`` admitted requests per window of
``window_ms`` milliseconds. The window opens on the first request and a
request arriving after ``reset_time`` starts a fresh window. State lives in
the rate_limits table; within one process every read-modify-write for a
key runs under that key's lock and commits before the lock is released.
"""

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.config import get_settings
from helpdesk.core.locks import KeyedLock
from helpdesk.core.timestamps import now_ms
from helpdesk.repositories.rate_limit import RateLimitRepository

logger = logging.getLogger(__name__)

LIMIT_HEADER = "x-ratelimit-limit"
REMAINING_HEADER = "x-ratelimit-remaining"
RESET_HEADER = "x-ratelimit-reset"


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of one admission attempt against the limiter."""

    allowed: bool
    limit: int
    count: int
    reset_time: int  # epoch milliseconds
    now: int

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.count)

    @property
    def retry_after(self) -> int:
        """Whole seconds until the window resets, at least 1."""
        return max(1, math.ceil((self.reset_time - self.now) / 1000))

    def headers(self) -> dict[str, str]:
        headers = {
            LIMIT_HEADER: str(self.limit),
            REMAINING_HEADER: str(self.remaining),
            RESET_HEADER: str(self.reset_time),
        }
        if not self.allowed:
            headers["Retry-After"] = str(self.retry_after)
        return headers


class FixedWindowRateLimiter:
    """
    Per-key fixed-window counter backed by the database.

    Transitions per request:
        no counter           -> create with count 1, reset = now + window
        now > reset_time     -> count 1, reset = now + window
        count >= capacity    -> reject (state unchanged)
        otherwise            -> count + 1
    """

    def __init__(
        self,
        capacity: int,
        window_ms: int,
        clock: Callable[[], int] = now_ms,
    ):
        """
        Args:
            capacity: Requests admitted per window
            window_ms: Window length in milliseconds
            clock: Source of the current time in epoch milliseconds
        """
        self.capacity = capacity
        self.window_ms = window_ms
        self.clock = clock
        self._locks = KeyedLock()

    async def hit(self, session: AsyncSession, key_hash: str) -> RateLimitDecision:
        """
        Count one request for a key and decide whether to admit it.

        Commits the session before returning.

        Args:
            session: Session dedicated to admission
            key_hash: Hash of the presented API key

        Returns:
            RateLimitDecision with the post-request window state
        """
        repo = RateLimitRepository(session)

        async with self._locks.hold(key_hash):
            now = self.clock()
            next_reset = now + self.window_ms

            counter = await repo.get(key_hash)
            if counter is None:
                state = await repo.open_window(key_hash, next_reset)
            else:
                state = await repo.reset_if_expired(key_hash, now, next_reset)
                if state is None:
                    state = await repo.increment_below(key_hash, self.capacity)

            await session.commit()

        if state is None:
            return RateLimitDecision(
                allowed=False,
                limit=self.capacity,
                count=counter.count,
                reset_time=counter.reset_time,
                now=now,
            )

        count, reset_time = state
        return RateLimitDecision(
            allowed=True, limit=self.capacity, count=count, reset_time=reset_time, now=now
        )


_rate_limiter: FixedWindowRateLimiter | None = None


def get_rate_limiter() -> FixedWindowRateLimiter:
    """
    Get the process-wide rate limiter (FastAPI dependency).

    Returns:
        FixedWindowRateLimiter configured from settings
    """
    global _rate_limiter
    if _rate_limiter is None:
        settings = get_settings()
        _rate_limiter = FixedWindowRateLimiter(
            capacity=settings.rate_limit_requests,
            window_ms=settings.rate_limit_window_ms,
        )
    return _rate_limiter


def reset_rate_limiter() -> None:
    """Reset the rate limiter singleton (for testing)."""
    global _rate_limiter
    _rate_limiter = None
