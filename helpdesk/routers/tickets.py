"""
Tickets Router

Tickets list newest first. Referenced assignees and contacts must belong
to the caller's organization.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.core.auth import CurrentUser, UserPrincipal, admit_request, ensure_owned
from helpdesk.core.database import DbSession
from helpdesk.core.timestamps import parse_wire_timestamp, to_storage, utc_now
from helpdesk.models.contracts.common import SuccessResponse
from helpdesk.models.contracts.pagination import CursorPage
from helpdesk.models.contracts.ticket import TicketCreate, TicketPublic, TicketUpdate
from helpdesk.models.enums import TicketPriority, TicketStatus
from helpdesk.models.orm.ticket import Ticket
from helpdesk.repositories.contact import ContactRepository
from helpdesk.repositories.ticket import TicketRepository
from helpdesk.repositories.user import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tickets", tags=["tickets"], dependencies=[Depends(admit_request)])


def _parse_bound(name: str, value: str | None) -> datetime | None:
    if value is None:
        return None
    parsed = parse_wire_timestamp(value)
    if parsed is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {name} date format",
        )
    return parsed


async def _check_references(
    db: AsyncSession,
    user: UserPrincipal,
    assignee_id: int | None,
    contact_id: int | None,
) -> None:
    """Reject assignees and contacts outside the caller's organization."""
    if assignee_id is not None:
        if await UserRepository(db).get_scoped(assignee_id, user.organization_id) is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid assignee")
    if contact_id is not None:
        if await ContactRepository(db).get_scoped(contact_id, user.organization_id) is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid contact")


@router.get("", response_model=CursorPage[TicketPublic])
async def list_tickets(
    current_user: CurrentUser,
    db: DbSession,
    assignee_id: int | None = Query(None, description="Filter by assignee"),
    contact_id: int | None = Query(None, description="Filter by contact"),
    ticket_status: TicketStatus | None = Query(None, alias="status", description="open or closed"),
    priority: TicketPriority | None = Query(None, description="low, normal or high"),
    created_at_gt: str | None = Query(None, description="Created strictly after (ISO 8601)"),
    created_at_lt: str | None = Query(None, description="Created strictly before (ISO 8601)"),
    updated_at_gt: str | None = Query(None, description="Updated strictly after (ISO 8601)"),
    updated_at_lt: str | None = Query(None, description="Updated strictly before (ISO 8601)"),
    cursor: str | None = Query(None, description="Cursor from a previous page"),
    limit: int | None = Query(None, description="Maximum results per page"),
) -> CursorPage[TicketPublic]:
    """
    List tickets of the caller's organization, newest first.

    Raises:
        HTTPException: 400 for malformed dates or foreign assignee/contact ids
    """
    bounds = {
        "created_at_gt": _parse_bound("created_at_gt", created_at_gt),
        "created_at_lt": _parse_bound("created_at_lt", created_at_lt),
        "updated_at_gt": _parse_bound("updated_at_gt", updated_at_gt),
        "updated_at_lt": _parse_bound("updated_at_lt", updated_at_lt),
    }
    await _check_references(db, current_user, assignee_id, contact_id)

    page = await TicketRepository(db).list_for_organization(
        current_user.organization_id,
        assignee_id=assignee_id,
        contact_id=contact_id,
        status=ticket_status.value if ticket_status else None,
        priority=priority.value if priority else None,
        cursor=cursor,
        limit=limit,
        **bounds,
    )
    return CursorPage[TicketPublic].from_page(page, TicketPublic)


@router.get("/{ticket_id}", response_model=TicketPublic)
async def get_ticket(ticket_id: int, current_user: CurrentUser, db: DbSession) -> TicketPublic:
    ticket = ensure_owned(await TicketRepository(db).get_by_id(ticket_id), current_user, "Ticket")
    return TicketPublic.model_validate(ticket)


@router.post("", response_model=TicketPublic, status_code=status.HTTP_201_CREATED)
async def create_ticket(
    ticket_data: TicketCreate,
    current_user: CurrentUser,
    db: DbSession,
) -> TicketPublic:
    """
    Create a ticket. Status defaults to open and priority to normal.

    Returns:
        Created ticket
    """
    await _check_references(db, current_user, ticket_data.assignee_id, ticket_data.contact_id)

    now = utc_now()
    created_at = to_storage(ticket_data.created_at) if ticket_data.created_at else now
    ticket = Ticket(
        organization_id=current_user.organization_id,
        subject=ticket_data.subject,
        description=ticket_data.description,
        status=ticket_data.status.value,
        priority=ticket_data.priority.value,
        assignee_id=ticket_data.assignee_id,
        contact_id=ticket_data.contact_id,
        closed_at=now if ticket_data.status == TicketStatus.CLOSED else None,
        created_at=created_at,
        updated_at=max(created_at, now),
    )
    ticket = await TicketRepository(db).create(ticket)
    logger.info(
        "Created ticket",
        extra={"organization_id": ticket.organization_id, "ticket_id": ticket.id},
    )
    return TicketPublic.model_validate(ticket)


@router.patch("/{ticket_id}", response_model=TicketPublic)
async def update_ticket(
    ticket_id: int,
    update_data: TicketUpdate,
    current_user: CurrentUser,
    db: DbSession,
) -> TicketPublic:
    """
    Update a ticket.

    Closing sets closed_at; reopening clears it. An explicit null
    assignee_id or contact_id unassigns.
    """
    repo = TicketRepository(db)
    ticket = ensure_owned(await repo.get_by_id(ticket_id), current_user, "Ticket")

    changes = update_data.model_dump(exclude_unset=True)
    for field in ("subject", "status", "priority"):
        if changes.get(field, ...) is None:
            changes.pop(field)

    await _check_references(db, current_user, changes.get("assignee_id"), changes.get("contact_id"))

    if "status" in changes:
        new_status = TicketStatus(changes["status"])
        changes["status"] = new_status.value
        if new_status == TicketStatus.CLOSED and ticket.status != TicketStatus.CLOSED:
            changes["closed_at"] = utc_now()
        elif new_status == TicketStatus.OPEN:
            changes["closed_at"] = None
    if "priority" in changes:
        changes["priority"] = TicketPriority(changes["priority"]).value

    ticket = await repo.update(ticket, changes)
    logger.info(
        "Updated ticket",
        extra={"organization_id": ticket.organization_id, "ticket_id": ticket.id},
    )
    return TicketPublic.model_validate(ticket)


@router.delete("/{ticket_id}", response_model=SuccessResponse)
async def delete_ticket(ticket_id: int, current_user: CurrentUser, db: DbSession) -> SuccessResponse:
    repo = TicketRepository(db)
    ticket = ensure_owned(await repo.get_by_id(ticket_id), current_user, "Ticket")
    await repo.delete(ticket)
    logger.info(
        "Deleted ticket",
        extra={"organization_id": current_user.organization_id, "ticket_id": ticket_id},
    )
    return SuccessResponse()
