"""
Organization Repository

Provides database operations for Organization model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.core.pagination import Page
from helpdesk.models.orm.organization import Organization
from helpdesk.repositories.base import Repository


class OrganizationRepository:
    """Repository for Organization model operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.records = Repository(session, Organization)

    async def get_by_id(self, id: int) -> Organization | None:
        return await self.records.get_by_id(id)

    async def get_by_slug(self, slug: str) -> Organization | None:
        result = await self.session.execute(
            select(Organization).where(Organization.slug == slug)
        )
        return result.scalar_one_or_none()

    async def list_visible(
        self, organization_id: int, cursor: str | None = None, limit: int | None = None
    ) -> Page[Organization]:
        """A caller only ever sees its own organization."""
        return await self.records.list_page(
            filters=[Organization.id == organization_id], cursor=cursor, limit=limit
        )

    async def create(self, name: str, slug: str) -> Organization:
        return await self.records.create(Organization(name=name, slug=slug))

    async def update(self, organization: Organization, changes: dict) -> Organization:
        return await self.records.update(organization, changes)
