"""
Generic Repository

One CRUD and keyset-pagination implementation, instantiated per entity.
Entity repositories hold a Repository and add their own filters and
lookups on top of it rather than subclassing it.
"""

from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from helpdesk.core.pagination import (
    KeysetOrder,
    Page,
    ascending_by_id,
    clamp_page_size,
    paginate,
    resolve_cursor,
)
from helpdesk.models.orm.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class Repository(Generic[ModelT]):
    """
    CRUD and cursor pagination for one ORM model.

    Usage:
        tickets = Repository(session, Ticket, order=TICKET_ORDER)
        page = await tickets.list_page(filters=[...], cursor=token, limit=20)
    """

    def __init__(
        self,
        session: AsyncSession,
        model: type[ModelT],
        order: KeysetOrder | None = None,
    ):
        """
        Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
            model: ORM model class with an integer ``id`` primary key
            order: Default listing order (ascending id when omitted)
        """
        self.session = session
        self.model = model
        self.order = order or ascending_by_id(model.id)  # type: ignore[attr-defined]

    async def get_by_id(self, id: int, options: Sequence[Any] | None = None) -> ModelT | None:
        """
        Get entity by ID regardless of tenant.

        Args:
            id: Entity ID
            options: Loader options (e.g. selectinload)

        Returns:
            Entity or None if not found
        """
        query = select(self.model).where(self.model.id == id)  # type: ignore[attr-defined]
        for opt in options or ():
            query = query.options(opt)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_scoped(self, id: int, organization_id: int) -> ModelT | None:
        """
        Get entity by ID only if it belongs to the organization.

        Args:
            id: Entity ID
            organization_id: Tenant the entity must belong to

        Returns:
            Entity or None if missing or owned by another tenant
        """
        result = await self.session.execute(
            select(self.model).where(
                self.model.id == id,  # type: ignore[attr-defined]
                self.model.organization_id == organization_id,  # type: ignore[attr-defined]
            )
        )
        return result.scalar_one_or_none()

    async def create(self, entity: ModelT) -> ModelT:
        """
        Create a new entity.

        Args:
            entity: Entity to create

        Returns:
            Created entity with generated ID
        """
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def update(self, entity: ModelT, changes: dict[str, Any] | None = None) -> ModelT:
        """
        Apply changes to an existing entity and flush.

        Args:
            entity: Entity to update
            changes: Attribute values to set before flushing

        Returns:
            Updated entity
        """
        for field, value in (changes or {}).items():
            setattr(entity, field, value)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def delete(self, entity: ModelT) -> None:
        """
        Delete an entity.

        Args:
            entity: Entity to delete
        """
        await self.session.delete(entity)
        await self.session.flush()

    async def list_page(
        self,
        *,
        filters: Sequence[ColumnElement[bool]] | None = None,
        order: KeysetOrder | None = None,
        cursor: str | None = None,
        limit: int | None = None,
        options: Sequence[Any] | None = None,
    ) -> Page[ModelT]:
        """
        Get one keyset page.

        Args:
            filters: SQLAlchemy filter conditions (tenant scope included)
            order: Ordering override for this listing
            cursor: Opaque cursor from the previous page
            limit: Requested page size (clamped)
            options: Loader options (e.g. selectinload)

        Returns:
            Page of entities with next/prev cursors

        Raises:
            InvalidCursorError: If the cursor does not decode for this ordering
        """
        order = order or self.order
        page_size = clamp_page_size(limit)
        position = resolve_cursor(cursor, order)

        query = select(self.model)
        for opt in options or ():
            query = query.options(opt)
        for f in filters or ():
            query = query.where(f)
        if position is not None:
            query = query.where(order.continuation(position))

        query = query.order_by(*order.order_by()).limit(page_size + 1)
        result = await self.session.execute(query)
        rows = list(result.unique().scalars().all())

        return paginate(rows, page_size, order, cursor_supplied=position is not None)
