"""
Attachment Repository

Provides database operations for Attachment model and its ticket/comment
link tables.
"""

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.core.pagination import Page
from helpdesk.models.orm.attachment import Attachment
from helpdesk.models.orm.comment import CommentAttachment
from helpdesk.models.orm.ticket import TicketAttachment
from helpdesk.repositories.base import Repository


class AttachmentRepository:
    """Repository for Attachment model operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.records = Repository(session, Attachment)

    async def get_by_id(self, id: int) -> Attachment | None:
        return await self.records.get_by_id(id)

    async def list_for_organization(
        self, organization_id: int, cursor: str | None = None, limit: int | None = None
    ) -> Page[Attachment]:
        return await self.records.list_page(
            filters=[Attachment.organization_id == organization_id], cursor=cursor, limit=limit
        )

    async def create(self, attachment: Attachment) -> Attachment:
        return await self.records.create(attachment)

    async def delete(self, attachment: Attachment) -> None:
        await self.records.delete(attachment)

    async def link_ticket(self, attachment_id: int, ticket_id: int) -> None:
        """
        Raises:
            IntegrityError: If the link already exists
        """
        self.session.add(TicketAttachment(ticket_id=ticket_id, attachment_id=attachment_id))
        await self.session.flush()

    async def unlink_ticket(self, attachment_id: int, ticket_id: int) -> bool:
        result = await self.session.execute(
            delete(TicketAttachment).where(
                TicketAttachment.ticket_id == ticket_id,
                TicketAttachment.attachment_id == attachment_id,
            )
        )
        return result.rowcount > 0

    async def link_comment(self, attachment_id: int, comment_id: int) -> None:
        """
        Raises:
            IntegrityError: If the link already exists
        """
        self.session.add(CommentAttachment(comment_id=comment_id, attachment_id=attachment_id))
        await self.session.flush()

    async def unlink_comment(self, attachment_id: int, comment_id: int) -> bool:
        result = await self.session.execute(
            delete(CommentAttachment).where(
                CommentAttachment.comment_id == comment_id,
                CommentAttachment.attachment_id == attachment_id,
            )
        )
        return result.rowcount > 0
