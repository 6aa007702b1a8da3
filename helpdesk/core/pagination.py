"""
Pagination Engine

Keyset (cursor) pagination shared by every list endpoint.

Callers fetch ``page_size + 1`` rows ordered by a KeysetOrder; ``paginate``
trims the extra row and produces the next/previous cursor tokens. Compound
orderings (e.g. created_at then id) get a total-order continuation
predicate so rows sharing an order value are neither skipped nor repeated.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, Literal, TypeVar

from sqlalchemy import and_, or_
from sqlalchemy.sql.elements import ColumnElement

from helpdesk.config import get_settings
from helpdesk.core.cursor import decode_cursor, encode_cursor
from helpdesk.core.timestamps import parse_wire_timestamp, to_storage, to_wire

T = TypeVar("T")
U = TypeVar("U")

# Primary keys are 32-bit integer columns
MAX_ID = 2**31 - 1


class InvalidCursorError(ValueError):
    """Raised when a client supplies a cursor that does not decode for the listing."""

    def __init__(self, message: str = "Invalid cursor"):
        super().__init__(message)


@dataclass(frozen=True)
class SortKey:
    """One ordering column and how its values travel inside a cursor."""

    name: str
    column: Any
    kind: Literal["int", "datetime"] = "int"

    def encode(self, value: Any) -> Any:
        if self.kind == "datetime":
            return to_wire(value)
        return int(value)

    def parse(self, raw: Any) -> Any | None:
        if self.kind == "datetime":
            return parse_wire_timestamp(raw) if isinstance(raw, str) else None
        if isinstance(raw, bool) or not isinstance(raw, int):
            return None
        return raw if 0 < raw <= MAX_ID else None


@dataclass(frozen=True)
class KeysetOrder:
    """
    Ordering for a keyset-paginated query.

    The last key must be unique (the primary key) so the ordering is total.
    """

    keys: tuple[SortKey, ...]
    descending: bool = False

    @property
    def is_compound(self) -> bool:
        return len(self.keys) > 1

    def order_by(self) -> list[Any]:
        """ORDER BY clauses for the query."""
        return [key.column.desc() if self.descending else key.column.asc() for key in self.keys]

    def position_of(self, row: Any) -> dict[str, Any]:
        """Cursor position of a returned row."""
        return {key.name: key.encode(getattr(row, key.name)) for key in self.keys}

    def parse_position(self, raw: dict[str, Any]) -> dict[str, Any] | None:
        """
        Convert a decoded cursor into typed values for this ordering.

        Returns None when the cursor was produced for a different ordering.
        """
        if set(raw) != {key.name for key in self.keys}:
            return None

        position: dict[str, Any] = {}
        for key in self.keys:
            value = key.parse(raw[key.name])
            if value is None:
                return None
            position[key.name] = value
        return position

    def continuation(self, position: dict[str, Any]) -> ColumnElement[bool]:
        """
        Predicate selecting rows strictly after ``position``.

        For keys (k1, k2) ascending this is
        ``k1 > v1 OR (k1 = v1 AND k2 > v2)``; descending flips to ``<``.
        """
        clauses = []
        for index, key in enumerate(self.keys):
            value = _storage_value(position[key.name])
            ties = [
                prior.column == _storage_value(position[prior.name])
                for prior in self.keys[:index]
            ]
            beyond = key.column < value if self.descending else key.column > value
            clauses.append(and_(*ties, beyond))
        return or_(*clauses)


def _storage_value(value: Any) -> Any:
    return to_storage(value) if isinstance(value, datetime) else value


def ascending_by_id(id_column: Any) -> KeysetOrder:
    """Simple listing order: ascending identifier, ``{id}`` cursor."""
    return KeysetOrder(keys=(SortKey("id", id_column),))


@dataclass
class Page(Generic[T]):
    """A trimmed page of rows plus navigation cursors ("" means none)."""

    items: list[T] = field(default_factory=list)
    next_cursor: str = ""
    prev_cursor: str = ""

    def map(self, func: Callable[[T], U]) -> "Page[U]":
        return Page(
            items=[func(item) for item in self.items],
            next_cursor=self.next_cursor,
            prev_cursor=self.prev_cursor,
        )


def paginate(
    rows: Sequence[T],
    page_size: int,
    order: KeysetOrder,
    cursor_supplied: bool,
) -> Page[T]:
    """
    Build a page from ``page_size + 1`` ordered rows.

    Args:
        rows: Rows fetched with LIMIT page_size + 1
        page_size: Requested (already clamped) page size
        order: Ordering the rows were fetched with
        cursor_supplied: Whether the request carried a cursor

    Returns:
        Page whose next_cursor points at the last retained row when more
        rows exist, and whose prev_cursor points at the first retained row
        whenever the request carried a cursor.
    """
    has_next = len(rows) > page_size
    items = list(rows[:page_size])

    if not items:
        return Page(items=[])

    next_cursor = encode_cursor(order.position_of(items[-1])) if has_next else ""
    prev_cursor = encode_cursor(order.position_of(items[0])) if cursor_supplied else ""

    return Page(items=items, next_cursor=next_cursor, prev_cursor=prev_cursor)


def resolve_cursor(token: str | None, order: KeysetOrder) -> dict[str, Any] | None:
    """
    Turn a request cursor into a typed position.

    Args:
        token: Cursor query parameter (None or "" means first page)
        order: Ordering of the listing

    Returns:
        Typed position, or None for the first page

    Raises:
        InvalidCursorError: If the token is malformed or foreign to this ordering
    """
    if not token:
        return None

    raw = decode_cursor(token)
    if raw is None:
        raise InvalidCursorError()

    position = order.parse_position(raw)
    if position is None:
        raise InvalidCursorError()
    return position


def clamp_page_size(limit: int | None) -> int:
    """Clamp a requested page size into [1, max_page_size]."""
    settings = get_settings()
    if limit is None:
        return settings.default_page_size
    return max(1, min(limit, settings.max_page_size))
