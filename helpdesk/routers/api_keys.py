"""
API Keys Router

Manage the caller's API keys.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from helpdesk.core.auth import CurrentUser, admit_request
from helpdesk.core.database import DbSession
from helpdesk.models.contracts.api_key import ApiKeyCreate, ApiKeyCreated, ApiKeyPublic
from helpdesk.models.contracts.pagination import CursorPage
from helpdesk.repositories.api_key import ApiKeyRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api-keys", tags=["api-keys"], dependencies=[Depends(admit_request)])


@router.get("", response_model=CursorPage[ApiKeyPublic])
async def list_api_keys(
    current_user: CurrentUser,
    db: DbSession,
    cursor: str | None = Query(None, description="Cursor from a previous page"),
    limit: int | None = Query(None, description="Maximum results per page"),
) -> CursorPage[ApiKeyPublic]:
    """
    List the caller's API keys.

    Returns:
        Page of API keys (without key values)
    """
    page = await ApiKeyRepository(db).list_for_user(current_user.user_id, cursor=cursor, limit=limit)
    return CursorPage[ApiKeyPublic].from_page(page, ApiKeyPublic)


@router.post("", response_model=ApiKeyCreated, status_code=status.HTTP_201_CREATED)
async def create_api_key(
    key_data: ApiKeyCreate,
    current_user: CurrentUser,
    db: DbSession,
) -> ApiKeyCreated:
    """
    Create a new API key for the caller.

    The full key is only returned once.

    Returns:
        Created API key including the raw key value
    """
    api_key, raw_key = await ApiKeyRepository(db).issue(current_user.user_id, key_data.name)
    logger.info(
        f"Created API key {api_key.key_prefix}...",
        extra={"user_id": current_user.user_id, "api_key_id": api_key.id},
    )
    return ApiKeyCreated(**ApiKeyPublic.model_validate(api_key).model_dump(), key=raw_key)


@router.delete("/{api_key_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_api_key(api_key_id: int, current_user: CurrentUser, db: DbSession) -> None:
    """
    Revoke one of the caller's API keys.

    Raises:
        HTTPException: 404 if the key does not exist or belongs to someone else
    """
    repo = ApiKeyRepository(db)
    api_key = await repo.get_by_id_and_user(api_key_id, current_user.user_id)
    if api_key is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="API key not found")

    await repo.delete(api_key)
    logger.info(
        "Revoked API key",
        extra={"user_id": current_user.user_id, "api_key_id": api_key_id},
    )
