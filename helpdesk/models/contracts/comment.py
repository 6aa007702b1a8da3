"""
Comment contracts (API request/response schemas).
"""

from pydantic import BaseModel, ConfigDict, Field

from helpdesk.core.timestamps import WireDatetime
from helpdesk.models.enums import AuthorType


class CommentCreate(BaseModel):
    """Comment creation request model. The author is always the caller."""

    ticket_id: int
    body: str = Field(..., min_length=1)
    is_private: bool = False


class CommentUpdate(BaseModel):
    """Comment update request model."""

    body: str | None = Field(None, min_length=1)
    is_private: bool | None = None


class CommentPublic(BaseModel):
    """Comment public response model."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    ticket_id: int
    body: str
    body_html: str
    is_private: bool
    author_type: AuthorType
    author_id: int
    organization_id: int
    created_at: WireDatetime
    updated_at: WireDatetime
