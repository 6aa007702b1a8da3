"""
Ticket Repository

Tickets list newest first with a compound (created_at, id) cursor, so
rows created in the same instant page deterministically.
"""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.core.pagination import KeysetOrder, Page, SortKey
from helpdesk.models.orm.ticket import Ticket
from helpdesk.repositories.base import Repository

TICKET_ORDER = KeysetOrder(
    keys=(
        SortKey("created_at", Ticket.created_at, kind="datetime"),
        SortKey("id", Ticket.id),
    ),
    descending=True,
)


class TicketRepository:
    """Repository for Ticket model operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.records = Repository(session, Ticket, order=TICKET_ORDER)

    async def get_by_id(self, id: int) -> Ticket | None:
        return await self.records.get_by_id(id)

    async def get_scoped(self, id: int, organization_id: int) -> Ticket | None:
        return await self.records.get_scoped(id, organization_id)

    async def list_for_organization(
        self,
        organization_id: int,
        *,
        assignee_id: int | None = None,
        contact_id: int | None = None,
        status: str | None = None,
        priority: str | None = None,
        created_at_gt: datetime | None = None,
        created_at_lt: datetime | None = None,
        updated_at_gt: datetime | None = None,
        updated_at_lt: datetime | None = None,
        cursor: str | None = None,
        limit: int | None = None,
    ) -> Page[Ticket]:
        """
        List tickets of an organization, newest first.

        Date bounds are exclusive and expected as aware UTC datetimes.
        """
        filters = [Ticket.organization_id == organization_id]
        if assignee_id is not None:
            filters.append(Ticket.assignee_id == assignee_id)
        if contact_id is not None:
            filters.append(Ticket.contact_id == contact_id)
        if status is not None:
            filters.append(Ticket.status == status)
        if priority is not None:
            filters.append(Ticket.priority == priority)
        if created_at_gt is not None:
            filters.append(Ticket.created_at > created_at_gt)
        if created_at_lt is not None:
            filters.append(Ticket.created_at < created_at_lt)
        if updated_at_gt is not None:
            filters.append(Ticket.updated_at > updated_at_gt)
        if updated_at_lt is not None:
            filters.append(Ticket.updated_at < updated_at_lt)

        return await self.records.list_page(filters=filters, cursor=cursor, limit=limit)

    async def create(self, ticket: Ticket) -> Ticket:
        return await self.records.create(ticket)

    async def update(self, ticket: Ticket, changes: dict) -> Ticket:
        return await self.records.update(ticket, changes)

    async def delete(self, ticket: Ticket) -> None:
        await self.records.delete(ticket)
