"""
Pagination contracts for API responses.

Every list endpoint returns the same cursor envelope. An empty string
cursor means there is no page in that direction.
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

from helpdesk.core.pagination import Page

T = TypeVar("T")


class CursorPage(BaseModel, Generic[T]):
    """
    Generic cursor-paginated response model.

    Provides consistent pagination structure across all list endpoints.
    """

    data: list[T]
    next_cursor: str = Field(default="", description="Cursor for the following page")
    prev_cursor: str = Field(default="", description="Cursor of the first item on this page")

    @classmethod
    def from_page(cls, page: Page[Any], item_model: type[BaseModel]) -> "CursorPage[T]":
        """Validate ORM rows of a Page into the envelope."""
        return cls(
            data=[item_model.model_validate(item) for item in page.items],
            next_cursor=page.next_cursor,
            prev_cursor=page.prev_cursor,
        )
