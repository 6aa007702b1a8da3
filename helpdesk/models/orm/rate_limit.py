"""
Rate limit counter ORM model.

One fixed-window counter per API key, keyed by the key's hash and removed
together with the key.
"""

from sqlalchemy import BigInteger, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from helpdesk.models.orm.base import Base, TimestampMixin


class RateLimitCounter(TimestampMixin, Base):
    """Rate limit database table."""

    __tablename__ = "rate_limits"

    key_hash: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("api_keys.key_hash", ondelete="CASCADE"),
        primary_key=True,
    )
    count: Mapped[int] = mapped_column(Integer, default=0)
    reset_time: Mapped[int] = mapped_column(BigInteger)  # epoch milliseconds
