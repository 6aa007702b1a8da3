"""
Ticket contracts (API request/response schemas).
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from helpdesk.core.timestamps import WireDatetime, to_storage
from helpdesk.models.enums import TicketPriority, TicketStatus


class TicketCreate(BaseModel):
    """Ticket creation request model."""

    subject: str = Field(..., min_length=1, max_length=500)
    description: str | None = None
    status: TicketStatus = TicketStatus.OPEN
    priority: TicketPriority = TicketPriority.NORMAL
    assignee_id: int | None = None
    contact_id: int | None = None
    created_at: datetime | None = Field(
        default=None, description="Backdated creation time (imports); defaults to now"
    )

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, value: datetime | None) -> datetime | None:
        return to_storage(value) if value is not None else None


class TicketUpdate(BaseModel):
    """Ticket update request model."""

    subject: str | None = Field(None, min_length=1, max_length=500)
    description: str | None = None
    status: TicketStatus | None = None
    priority: TicketPriority | None = None
    assignee_id: int | None = None
    contact_id: int | None = None


class TicketPublic(BaseModel):
    """Ticket public response model."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    subject: str
    description: str | None
    status: TicketStatus
    priority: TicketPriority
    assignee_id: int | None
    contact_id: int | None
    organization_id: int
    closed_at: WireDatetime | None
    created_at: WireDatetime
    updated_at: WireDatetime
