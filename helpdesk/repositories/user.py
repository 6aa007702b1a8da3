"""
User Repository

Provides database operations for User model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.core.pagination import Page
from helpdesk.models.orm.user import User
from helpdesk.repositories.base import Repository


class UserRepository:
    """Repository for User model operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.records = Repository(session, User)

    async def get_by_id(self, id: int) -> User | None:
        return await self.records.get_by_id(id)

    async def get_scoped(self, id: int, organization_id: int) -> User | None:
        return await self.records.get_scoped(id, organization_id)

    async def get_by_email(self, email: str) -> User | None:
        """
        Get user by email address.

        Args:
            email: Email address (exact match)

        Returns:
            User or None if not found
        """
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def list_for_organization(
        self,
        organization_id: int,
        *,
        email: str | None = None,
        name: str | None = None,
        cursor: str | None = None,
        limit: int | None = None,
    ) -> Page[User]:
        """
        List users of an organization.

        Args:
            organization_id: Tenant scope
            email: Substring match on email
            name: Substring match on name
            cursor: Cursor from the previous page
            limit: Page size

        Returns:
            Page of users ordered by id
        """
        filters = [User.organization_id == organization_id]
        if email:
            filters.append(User.email.ilike(f"%{email}%"))
        if name:
            filters.append(User.name.ilike(f"%{name}%"))
        return await self.records.list_page(filters=filters, cursor=cursor, limit=limit)

    async def create(self, organization_id: int, email: str, name: str, role: str) -> User:
        user = User(organization_id=organization_id, email=email, name=name, role=role)
        return await self.records.create(user)

    async def update(self, user: User, changes: dict) -> User:
        return await self.records.update(user, changes)

    async def delete(self, user: User) -> None:
        await self.records.delete(user)
