"""
Rate Limit Repository

Single-statement transitions of the fixed-window counter. Each
conditional UPDATE only matches when its precondition still holds, so a
transition is never applied on stale state.
"""

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.models.orm.rate_limit import RateLimitCounter


class RateLimitRepository:
    """Repository for RateLimitCounter rows."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, key_hash: str) -> RateLimitCounter | None:
        result = await self.session.execute(
            select(RateLimitCounter).where(RateLimitCounter.key_hash == key_hash)
        )
        return result.scalar_one_or_none()

    async def open_window(self, key_hash: str, reset_time: int) -> tuple[int, int]:
        """First request for a key: count 1 in a fresh window."""
        self.session.add(RateLimitCounter(key_hash=key_hash, count=1, reset_time=reset_time))
        await self.session.flush()
        return 1, reset_time

    async def reset_if_expired(
        self, key_hash: str, now: int, reset_time: int
    ) -> tuple[int, int] | None:
        """
        Start a new window when the current one has passed.

        Returns:
            (count, reset_time) after the reset, or None if the window is live
        """
        result = await self.session.execute(
            update(RateLimitCounter)
            .where(
                RateLimitCounter.key_hash == key_hash,
                RateLimitCounter.reset_time < now,
            )
            .values(count=1, reset_time=reset_time)
            .returning(RateLimitCounter.count, RateLimitCounter.reset_time)
        )
        row = result.first()
        return (row.count, row.reset_time) if row else None

    async def increment_below(self, key_hash: str, capacity: int) -> tuple[int, int] | None:
        """
        Count a request in the live window if capacity remains.

        Returns:
            (count, reset_time) after the increment, or None when at capacity
        """
        result = await self.session.execute(
            update(RateLimitCounter)
            .where(
                RateLimitCounter.key_hash == key_hash,
                RateLimitCounter.count < capacity,
            )
            .values(count=RateLimitCounter.count + 1)
            .returning(RateLimitCounter.count, RateLimitCounter.reset_time)
        )
        row = result.first()
        return (row.count, row.reset_time) if row else None
