"""
Team Repository

Provides database operations for Team and TeamMember models.
"""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.core.pagination import Page
from helpdesk.models.orm.team import Team, TeamMember
from helpdesk.repositories.base import Repository


class TeamRepository:
    """Repository for Team model operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.records = Repository(session, Team)

    async def get_by_id(self, id: int) -> Team | None:
        return await self.records.get_by_id(id)

    async def list_for_organization(
        self, organization_id: int, cursor: str | None = None, limit: int | None = None
    ) -> Page[Team]:
        return await self.records.list_page(
            filters=[Team.organization_id == organization_id], cursor=cursor, limit=limit
        )

    async def create(self, organization_id: int, name: str) -> Team:
        return await self.records.create(Team(organization_id=organization_id, name=name))

    async def update(self, team: Team, changes: dict) -> Team:
        return await self.records.update(team, changes)

    async def delete(self, team: Team) -> None:
        await self.records.delete(team)

    async def is_member(self, team_id: int, user_id: int) -> bool:
        result = await self.session.execute(
            select(TeamMember.id).where(
                TeamMember.team_id == team_id,
                TeamMember.user_id == user_id,
            )
        )
        return result.first() is not None

    async def add_member(self, team: Team, user_id: int) -> Team:
        """
        Add a user to a team.

        Raises:
            IntegrityError: If the user is already a member
        """
        self.session.add(TeamMember(team_id=team.id, user_id=user_id))
        await self.session.flush()
        await self.session.refresh(team)
        return team

    async def remove_member(self, team: Team, user_id: int) -> bool:
        """
        Remove a user from a team.

        Returns:
            True if a membership was removed
        """
        result = await self.session.execute(
            delete(TeamMember).where(
                TeamMember.team_id == team.id,
                TeamMember.user_id == user_id,
            )
        )
        await self.session.refresh(team)
        return result.rowcount > 0
