"""
Organizations Router

A caller can read and rename only its own organization.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from helpdesk.core.auth import CurrentUser, admit_request
from helpdesk.core.database import DbSession
from helpdesk.models.contracts.organization import OrganizationPublic, OrganizationUpdate
from helpdesk.models.contracts.pagination import CursorPage
from helpdesk.repositories.organization import OrganizationRepository

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/organizations",
    tags=["organizations"],
    dependencies=[Depends(admit_request)],
)


@router.get("", response_model=CursorPage[OrganizationPublic])
async def list_organizations(
    current_user: CurrentUser,
    db: DbSession,
    cursor: str | None = Query(None, description="Cursor from a previous page"),
    limit: int | None = Query(None, description="Maximum results per page"),
) -> CursorPage[OrganizationPublic]:
    """List organizations visible to the caller (only its own)."""
    page = await OrganizationRepository(db).list_visible(
        current_user.organization_id, cursor=cursor, limit=limit
    )
    return CursorPage[OrganizationPublic].from_page(page, OrganizationPublic)


@router.get("/{organization_id}", response_model=OrganizationPublic)
async def get_organization(
    organization_id: int,
    current_user: CurrentUser,
    db: DbSession,
) -> OrganizationPublic:
    """
    Get the caller's organization.

    Raises:
        HTTPException: 403 for any other organization
    """
    if organization_id != current_user.organization_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")

    organization = await OrganizationRepository(db).get_by_id(organization_id)
    if organization is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Organization not found")
    return OrganizationPublic.model_validate(organization)


@router.patch("/{organization_id}", response_model=OrganizationPublic)
async def update_organization(
    organization_id: int,
    update_data: OrganizationUpdate,
    current_user: CurrentUser,
    db: DbSession,
) -> OrganizationPublic:
    """
    Update the caller's organization.

    Raises:
        HTTPException: 403 for another organization, 409 if the slug is taken
    """
    if organization_id != current_user.organization_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")

    repo = OrganizationRepository(db)
    organization = await repo.get_by_id(organization_id)
    if organization is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Organization not found")

    changes = update_data.model_dump(exclude_unset=True, exclude_none=True)
    if "slug" in changes and changes["slug"] != organization.slug:
        existing = await repo.get_by_slug(changes["slug"])
        if existing is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Organization with this slug already exists",
            )

    organization = await repo.update(organization, changes)
    logger.info(
        "Organization updated",
        extra={"organization_id": organization.id, "user_id": current_user.user_id},
    )
    return OrganizationPublic.model_validate(organization)
