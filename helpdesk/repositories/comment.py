"""
Comment Repository

Provides database operations for Comment model.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.core.pagination import Page
from helpdesk.models.orm.comment import Comment
from helpdesk.repositories.base import Repository


class CommentRepository:
    """Repository for Comment model operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.records = Repository(session, Comment)

    async def get_by_id(self, id: int) -> Comment | None:
        return await self.records.get_by_id(id)

    async def get_scoped(self, id: int, organization_id: int) -> Comment | None:
        return await self.records.get_scoped(id, organization_id)

    async def list_for_organization(
        self,
        organization_id: int,
        *,
        ticket_id: int | None = None,
        is_private: bool | None = None,
        cursor: str | None = None,
        limit: int | None = None,
    ) -> Page[Comment]:
        filters = [Comment.organization_id == organization_id]
        if ticket_id is not None:
            filters.append(Comment.ticket_id == ticket_id)
        if is_private is not None:
            filters.append(Comment.is_private == is_private)
        return await self.records.list_page(filters=filters, cursor=cursor, limit=limit)

    async def create(self, comment: Comment) -> Comment:
        return await self.records.create(comment)

    async def update(self, comment: Comment, changes: dict) -> Comment:
        return await self.records.update(comment, changes)

    async def delete(self, comment: Comment) -> None:
        await self.records.delete(comment)
