"""
Contacts Router

Contact writes go through the merge service so a payload that shares an
email or phone with an existing contact updates it instead of creating a
duplicate.
"""

import logging

from fastapi import APIRouter, Depends, Query, status

from helpdesk.core.auth import CurrentUser, admit_request, ensure_owned
from helpdesk.core.database import DbSession
from helpdesk.models.contracts.common import SuccessResponse
from helpdesk.models.contracts.contact import ContactCreate, ContactPublic, ContactUpdate
from helpdesk.models.contracts.pagination import CursorPage
from helpdesk.repositories.contact import ContactRepository
from helpdesk.services.contact_merge import ContactMergeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contacts", tags=["contacts"], dependencies=[Depends(admit_request)])


@router.get("", response_model=CursorPage[ContactPublic])
async def list_contacts(
    current_user: CurrentUser,
    db: DbSession,
    email: str | None = Query(None, description="Filter by email (substring)"),
    phone: str | None = Query(None, description="Filter by phone (substring)"),
    name: str | None = Query(None, description="Filter by name (substring)"),
    cursor: str | None = Query(None, description="Cursor from a previous page"),
    limit: int | None = Query(None, description="Maximum results per page"),
) -> CursorPage[ContactPublic]:
    """List contacts of the caller's organization."""
    page = await ContactRepository(db).list_for_organization(
        current_user.organization_id,
        email=email,
        phone=phone,
        name=name,
        cursor=cursor,
        limit=limit,
    )
    return CursorPage[ContactPublic].from_page(page, ContactPublic)


@router.get("/{contact_id}", response_model=ContactPublic)
async def get_contact(contact_id: int, current_user: CurrentUser, db: DbSession) -> ContactPublic:
    contact = ensure_owned(await ContactRepository(db).get_by_id(contact_id), current_user, "Contact")
    return ContactPublic.model_validate(contact)


@router.post("", response_model=ContactPublic, status_code=status.HTTP_201_CREATED)
async def create_contact(
    contact_data: ContactCreate,
    current_user: CurrentUser,
    db: DbSession,
) -> ContactPublic:
    """
    Create a contact, merging into an existing one sharing any identifier.

    Returns:
        The created or merged contact
    """
    contact, _ = await ContactMergeService(db).create_or_merge(
        current_user.organization_id,
        contact_data.name,
        contact_data.emails,
        contact_data.phones,
    )
    return ContactPublic.model_validate(contact)


@router.patch("/{contact_id}", response_model=ContactPublic)
async def update_contact(
    contact_id: int,
    update_data: ContactUpdate,
    current_user: CurrentUser,
    db: DbSession,
) -> ContactPublic:
    """
    Update a contact. Supplied collections replace the stored ones.

    Raises:
        ContactValidationError: If the contact would be left with no email and no phone
    """
    contact = ensure_owned(await ContactRepository(db).get_by_id(contact_id), current_user, "Contact")
    contact = await ContactMergeService(db).update_contact(
        contact,
        name=update_data.name,
        emails=update_data.emails,
        phones=update_data.phones,
    )
    return ContactPublic.model_validate(contact)


@router.delete("/{contact_id}", response_model=SuccessResponse)
async def delete_contact(contact_id: int, current_user: CurrentUser, db: DbSession) -> SuccessResponse:
    repo = ContactRepository(db)
    contact = ensure_owned(await repo.get_by_id(contact_id), current_user, "Contact")
    await repo.delete(contact)
    logger.info(
        "Deleted contact",
        extra={"organization_id": current_user.organization_id, "contact_id": contact_id},
    )
    return SuccessResponse()
