"""
Organization contracts (API request/response schemas).
"""

from pydantic import BaseModel, ConfigDict, Field

from helpdesk.core.timestamps import WireDatetime

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class OrganizationCreate(BaseModel):
    """Organization creation model (CLI bootstrap)."""

    name: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=1, max_length=255, pattern=SLUG_PATTERN)


class OrganizationUpdate(BaseModel):
    """Organization update request model."""

    name: str | None = Field(None, min_length=1, max_length=255)
    slug: str | None = Field(None, min_length=1, max_length=255, pattern=SLUG_PATTERN)


class OrganizationPublic(BaseModel):
    """Organization public response model."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    created_at: WireDatetime
    updated_at: WireDatetime
