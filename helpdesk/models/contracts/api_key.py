"""
API Key contracts (API request/response schemas).
"""

from pydantic import BaseModel, ConfigDict, Field

from helpdesk.core.timestamps import WireDatetime


class ApiKeyCreate(BaseModel):
    """API key creation request model."""

    name: str = Field(
        default="default", min_length=1, max_length=255, description="Display name for the API key"
    )


class ApiKeyPublic(BaseModel):
    """API key public response model (without the key value)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    key_prefix: str
    last_used_at: WireDatetime | None
    created_at: WireDatetime


class ApiKeyCreated(ApiKeyPublic):
    """API key response model returned only on creation (includes the full key)."""

    key: str = Field(..., description="The full API key. Store it securely - it cannot be retrieved again.")
