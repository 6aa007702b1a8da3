"""
Teams Router

Everyone in an organization can read its teams; only admins change them.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError

from helpdesk.core.auth import CurrentUser, RequireAdmin, admit_request, ensure_owned
from helpdesk.core.database import DbSession
from helpdesk.models.contracts.common import SuccessResponse
from helpdesk.models.contracts.pagination import CursorPage
from helpdesk.models.contracts.team import TeamCreate, TeamMemberAdd, TeamPublic, TeamUpdate
from helpdesk.repositories.team import TeamRepository
from helpdesk.repositories.user import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/teams", tags=["teams"], dependencies=[Depends(admit_request)])

DUPLICATE_NAME = "Team with this name already exists in your organization"


@router.get("", response_model=CursorPage[TeamPublic])
async def list_teams(
    current_user: CurrentUser,
    db: DbSession,
    cursor: str | None = Query(None, description="Cursor from a previous page"),
    limit: int | None = Query(None, description="Maximum results per page"),
) -> CursorPage[TeamPublic]:
    """List teams of the caller's organization with their members."""
    page = await TeamRepository(db).list_for_organization(
        current_user.organization_id, cursor=cursor, limit=limit
    )
    return CursorPage[TeamPublic].from_page(page, TeamPublic)


@router.get("/{team_id}", response_model=TeamPublic)
async def get_team(team_id: int, current_user: CurrentUser, db: DbSession) -> TeamPublic:
    team = ensure_owned(await TeamRepository(db).get_by_id(team_id), current_user, "Team")
    return TeamPublic.model_validate(team)


@router.post("", response_model=TeamPublic, status_code=status.HTTP_201_CREATED)
async def create_team(team_data: TeamCreate, current_user: RequireAdmin, db: DbSession) -> TeamPublic:
    """
    Create a team (admin only).

    Raises:
        HTTPException: 409 if the organization already has a team with this name
    """
    try:
        team = await TeamRepository(db).create(current_user.organization_id, team_data.name)
    except IntegrityError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_NAME) from e

    logger.info(
        f"Created team {team.name}",
        extra={"organization_id": team.organization_id, "team_id": team.id},
    )
    return TeamPublic.model_validate(team)


@router.patch("/{team_id}", response_model=TeamPublic)
async def update_team(
    team_id: int,
    update_data: TeamUpdate,
    current_user: RequireAdmin,
    db: DbSession,
) -> TeamPublic:
    repo = TeamRepository(db)
    team = ensure_owned(await repo.get_by_id(team_id), current_user, "Team")
    try:
        team = await repo.update(team, update_data.model_dump(exclude_unset=True, exclude_none=True))
    except IntegrityError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_NAME) from e
    return TeamPublic.model_validate(team)


@router.delete("/{team_id}", response_model=SuccessResponse)
async def delete_team(team_id: int, current_user: RequireAdmin, db: DbSession) -> SuccessResponse:
    repo = TeamRepository(db)
    team = ensure_owned(await repo.get_by_id(team_id), current_user, "Team")
    await repo.delete(team)
    logger.info(
        "Deleted team",
        extra={"organization_id": current_user.organization_id, "team_id": team_id},
    )
    return SuccessResponse()


@router.post("/{team_id}/members", response_model=TeamPublic)
async def add_team_member(
    team_id: int,
    member: TeamMemberAdd,
    current_user: RequireAdmin,
    db: DbSession,
) -> TeamPublic:
    """
    Add a user of the same organization to a team (admin only).

    Raises:
        HTTPException: 400 for users of other organizations, 409 if already a member
    """
    repo = TeamRepository(db)
    team = ensure_owned(await repo.get_by_id(team_id), current_user, "Team")

    user = await UserRepository(db).get_scoped(member.user_id, current_user.organization_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid user")

    if await repo.is_member(team.id, user.id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User is already a member")

    team = await repo.add_member(team, user.id)
    return TeamPublic.model_validate(team)


@router.delete("/{team_id}/members/{user_id}", response_model=TeamPublic)
async def remove_team_member(
    team_id: int,
    user_id: int,
    current_user: RequireAdmin,
    db: DbSession,
) -> TeamPublic:
    """
    Remove a user from a team (admin only).

    Raises:
        HTTPException: 404 if the user is not a member
    """
    repo = TeamRepository(db)
    team = ensure_owned(await repo.get_by_id(team_id), current_user, "Team")

    if not await repo.remove_member(team, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found in team")
    return TeamPublic.model_validate(team)
