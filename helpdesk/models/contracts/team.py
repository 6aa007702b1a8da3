"""
Team contracts (API request/response schemas).
"""

from pydantic import BaseModel, ConfigDict, Field

from helpdesk.core.timestamps import WireDatetime
from helpdesk.models.contracts.user import UserPublic


class TeamCreate(BaseModel):
    """Team creation request model."""

    name: str = Field(..., min_length=1, max_length=255)


class TeamUpdate(BaseModel):
    """Team update request model."""

    name: str | None = Field(None, min_length=1, max_length=255)


class TeamMemberAdd(BaseModel):
    """Request body for adding a member to a team."""

    user_id: int


class TeamPublic(BaseModel):
    """Team public response model with its members."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    organization_id: int
    members: list[UserPublic] = Field(default_factory=list)
    created_at: WireDatetime
    updated_at: WireDatetime
