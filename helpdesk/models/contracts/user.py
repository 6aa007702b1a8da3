"""
User contracts (API request/response schemas).
"""

from pydantic import BaseModel, ConfigDict, Field

from helpdesk.core.timestamps import WireDatetime
from helpdesk.models.enums import UserRole

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


class UserCreate(BaseModel):
    """User creation request model."""

    email: str = Field(..., max_length=320, pattern=EMAIL_PATTERN)
    name: str = Field(..., min_length=1, max_length=255)
    role: UserRole = UserRole.AGENT


class UserUpdate(BaseModel):
    """User update request model."""

    email: str | None = Field(None, max_length=320, pattern=EMAIL_PATTERN)
    name: str | None = Field(None, min_length=1, max_length=255)
    role: UserRole | None = None


class UserPublic(BaseModel):
    """User public response model."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str
    role: UserRole
    organization_id: int
    created_at: WireDatetime
    updated_at: WireDatetime
