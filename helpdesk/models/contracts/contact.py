"""
Contact contracts (API request/response schemas).

Write payloads carry identifier objects; validation of the
"at least one email or phone" rule lives in the merge service because
update payloads only know their projected state there.
"""

from pydantic import BaseModel, ConfigDict, Field

from helpdesk.core.timestamps import WireDatetime
from helpdesk.models.contracts.user import EMAIL_PATTERN

PHONE_MIN_LENGTH = 5


class ContactEmailIn(BaseModel):
    """Email identifier in a contact write payload."""

    email: str = Field(..., max_length=320, pattern=EMAIL_PATTERN)
    is_primary: bool = False


class ContactPhoneIn(BaseModel):
    """Phone identifier in a contact write payload."""

    phone: str = Field(..., min_length=PHONE_MIN_LENGTH, max_length=64)
    is_primary: bool = False


class ContactCreate(BaseModel):
    """Contact creation (smart merge) request model."""

    name: str = Field(..., min_length=1, max_length=255)
    emails: list[ContactEmailIn] = Field(default_factory=list)
    phones: list[ContactPhoneIn] = Field(default_factory=list)


class ContactUpdate(BaseModel):
    """Contact update request model. Omitted collections are left unchanged."""

    name: str | None = Field(None, min_length=1, max_length=255)
    emails: list[ContactEmailIn] | None = None
    phones: list[ContactPhoneIn] | None = None


class ContactEmailPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    contact_id: int
    email: str
    is_primary: bool


class ContactPhonePublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    contact_id: int
    phone: str
    is_primary: bool


class ContactPublic(BaseModel):
    """Contact public response model with its identifiers."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    organization_id: int
    emails: list[ContactEmailPublic] = Field(default_factory=list)
    phones: list[ContactPhonePublic] = Field(default_factory=list)
    created_at: WireDatetime
    updated_at: WireDatetime
