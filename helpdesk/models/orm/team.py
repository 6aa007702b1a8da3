"""
Team ORM models.

Teams group users of one organization; names are unique per organization.
"""

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from helpdesk.models.orm.base import Base, TimestampMixin

if TYPE_CHECKING:
    from helpdesk.models.orm.user import User


class Team(TimestampMixin, Base):
    """Team database table."""

    __tablename__ = "teams"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255))
    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Relationships
    members: Mapped[list["User"]] = relationship(
        secondary="team_members",
        order_by="User.id",
        lazy="selectin",
        viewonly=True,
    )

    __table_args__ = (
        UniqueConstraint("name", "organization_id", name="uq_teams_name_organization"),
        Index("ix_teams_organization_id", "organization_id"),
    )


class TeamMember(TimestampMixin, Base):
    """Team membership link table."""

    __tablename__ = "team_members"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id", ondelete="CASCADE"))
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))

    __table_args__ = (
        UniqueConstraint("team_id", "user_id", name="uq_team_members_team_user"),
        Index("ix_team_members_team_id", "team_id"),
        Index("ix_team_members_user_id", "user_id"),
    )
