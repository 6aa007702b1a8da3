"""
Organization ORM model.

Represents tenant organizations. Every other tenant-owned row cascades
from here.
"""

from typing import TYPE_CHECKING

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from helpdesk.models.orm.base import Base, TimestampMixin

if TYPE_CHECKING:
    from helpdesk.models.orm.user import User


class Organization(TimestampMixin, Base):
    """Organization database table."""

    __tablename__ = "organizations"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255))
    slug: Mapped[str] = mapped_column(String(255), unique=True)

    # Relationships
    users: Mapped[list["User"]] = relationship(
        back_populates="organization", passive_deletes=True
    )

    __table_args__ = (Index("ix_organizations_name", "name"),)
