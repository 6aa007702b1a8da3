"""
User ORM model.

Represents agents and admins belonging to one organization.
"""

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from helpdesk.models.enums import UserRole
from helpdesk.models.orm.base import Base, TimestampMixin

if TYPE_CHECKING:
    from helpdesk.models.orm.api_key import APIKey
    from helpdesk.models.orm.organization import Organization


class User(TimestampMixin, Base):
    """User database table."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), unique=True)
    name: Mapped[str] = mapped_column(String(255))
    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
    )
    role: Mapped[UserRole] = mapped_column(String(20), default=UserRole.AGENT.value)

    # Relationships
    organization: Mapped["Organization"] = relationship(back_populates="users")
    api_keys: Mapped[list["APIKey"]] = relationship(
        back_populates="user", passive_deletes=True
    )

    __table_args__ = (Index("ix_users_organization_id", "organization_id"),)
