"""
Users Router

User management within the caller's organization.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from helpdesk.core.auth import CurrentUser, RequireAdmin, admit_request, ensure_owned
from helpdesk.core.database import DbSession
from helpdesk.models.contracts.common import SuccessResponse
from helpdesk.models.contracts.pagination import CursorPage
from helpdesk.models.contracts.user import UserCreate, UserPublic, UserUpdate
from helpdesk.models.enums import UserRole
from helpdesk.repositories.user import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"], dependencies=[Depends(admit_request)])


@router.get("/me", response_model=UserPublic)
async def get_me(current_user: CurrentUser, db: DbSession) -> UserPublic:
    """Get the calling user."""
    user = await UserRepository(db).get_by_id(current_user.user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserPublic.model_validate(user)


@router.get("", response_model=CursorPage[UserPublic])
async def list_users(
    current_user: CurrentUser,
    db: DbSession,
    email: str | None = Query(None, description="Filter by email (substring)"),
    name: str | None = Query(None, description="Filter by name (substring)"),
    cursor: str | None = Query(None, description="Cursor from a previous page"),
    limit: int | None = Query(None, description="Maximum results per page"),
) -> CursorPage[UserPublic]:
    """List users in the caller's organization."""
    page = await UserRepository(db).list_for_organization(
        current_user.organization_id, email=email, name=name, cursor=cursor, limit=limit
    )
    return CursorPage[UserPublic].from_page(page, UserPublic)


@router.get("/{user_id}", response_model=UserPublic)
async def get_user(user_id: int, current_user: CurrentUser, db: DbSession) -> UserPublic:
    """Get a user of the caller's organization."""
    user = ensure_owned(await UserRepository(db).get_by_id(user_id), current_user, "User")
    return UserPublic.model_validate(user)


@router.post("", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    current_user: RequireAdmin,
    db: DbSession,
) -> UserPublic:
    """
    Create a user in the caller's organization (admin only).

    Raises:
        HTTPException: 409 if the email is already registered
    """
    repo = UserRepository(db)
    if await repo.get_by_email(user_data.email) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this email already exists",
        )

    user = await repo.create(
        organization_id=current_user.organization_id,
        email=user_data.email,
        name=user_data.name,
        role=user_data.role.value,
    )
    logger.info(
        f"Created user {user.email}",
        extra={"organization_id": user.organization_id, "user_id": user.id},
    )
    return UserPublic.model_validate(user)


@router.patch("/{user_id}", response_model=UserPublic)
async def update_user(
    user_id: int,
    update_data: UserUpdate,
    current_user: CurrentUser,
    db: DbSession,
) -> UserPublic:
    """
    Update a user.

    Only admins change roles, and nobody changes their own role.

    Raises:
        HTTPException: 403 on a forbidden role change, 409 on a taken email
    """
    repo = UserRepository(db)
    user = ensure_owned(await repo.get_by_id(user_id), current_user, "User")

    changes = update_data.model_dump(exclude_unset=True, exclude_none=True)
    if "role" in changes:
        if user.id == current_user.user_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="Cannot update your own role"
            )
        if not current_user.is_admin:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="Only admins can update user roles"
            )
        changes["role"] = UserRole(changes["role"]).value

    if "email" in changes and changes["email"] != user.email:
        if await repo.get_by_email(changes["email"]) is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="User with this email already exists",
            )

    user = await repo.update(user, changes)
    logger.info(
        "User updated",
        extra={"organization_id": user.organization_id, "user_id": user.id},
    )
    return UserPublic.model_validate(user)


@router.delete("/{user_id}", response_model=SuccessResponse)
async def delete_user(user_id: int, current_user: CurrentUser, db: DbSession) -> SuccessResponse:
    """
    Delete a user.

    Raises:
        HTTPException: 403 when deleting yourself or an admin
    """
    if user_id == current_user.user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Cannot delete your own account"
        )

    repo = UserRepository(db)
    user = ensure_owned(await repo.get_by_id(user_id), current_user, "User")
    if user.role == UserRole.ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot delete admin users")

    await repo.delete(user)
    logger.info(
        "User deleted",
        extra={"organization_id": current_user.organization_id, "user_id": user_id},
    )
    return SuccessResponse()
