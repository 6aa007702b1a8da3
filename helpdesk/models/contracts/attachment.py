"""
Attachment contracts (API request/response schemas).
"""

from pydantic import BaseModel, ConfigDict

from helpdesk.core.timestamps import WireDatetime


class AttachmentPublic(BaseModel):
    """Attachment metadata response model."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    file_name: str
    content_type: str
    size: int
    organization_id: int
    created_at: WireDatetime
    updated_at: WireDatetime
