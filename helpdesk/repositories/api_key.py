"""
API Key Repository

Provides database operations for APIKey model.
"""

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from helpdesk.core.pagination import Page
from helpdesk.core.security import display_prefix, generate_api_key, hash_api_key
from helpdesk.core.timestamps import utc_now
from helpdesk.models.orm.api_key import APIKey
from helpdesk.repositories.base import Repository


class ApiKeyRepository:
    """Repository for APIKey model operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.records = Repository(session, APIKey)

    async def issue(self, user_id: int, name: str = "default") -> tuple[APIKey, str]:
        """
        Create a new API key for a user.

        Args:
            user_id: Owner of the key
            name: Display name

        Returns:
            Tuple of (stored key row, raw key). The raw key is not persisted.
        """
        raw_key = generate_api_key()
        api_key = APIKey(
            user_id=user_id,
            name=name,
            key_hash=hash_api_key(raw_key),
            key_prefix=display_prefix(raw_key),
        )
        return await self.records.create(api_key), raw_key

    async def list_for_user(
        self, user_id: int, cursor: str | None = None, limit: int | None = None
    ) -> Page[APIKey]:
        return await self.records.list_page(
            filters=[APIKey.user_id == user_id], cursor=cursor, limit=limit
        )

    async def get_by_id_and_user(self, id: int, user_id: int) -> APIKey | None:
        """
        Get an API key by ID within user scope.

        Args:
            id: API key ID
            user_id: User ID

        Returns:
            APIKey if found and belongs to user, None otherwise
        """
        result = await self.session.execute(
            select(APIKey).where(
                APIKey.id == id,
                APIKey.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_by_key_hash(self, key_hash: str) -> APIKey | None:
        """
        Get an API key by its hash, with its owner loaded.

        Args:
            key_hash: SHA-256 hash of the API key

        Returns:
            APIKey if found, None otherwise
        """
        result = await self.session.execute(
            select(APIKey)
            .where(APIKey.key_hash == key_hash)
            .options(selectinload(APIKey.user))
        )
        return result.scalar_one_or_none()

    async def touch_last_used(self, id: int) -> None:
        await self.session.execute(
            update(APIKey).where(APIKey.id == id).values(last_used_at=utc_now())
        )

    async def delete(self, api_key: APIKey) -> None:
        await self.records.delete(api_key)
