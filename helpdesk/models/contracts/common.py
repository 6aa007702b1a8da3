"""
Common response models.
"""

from typing import Any

from pydantic import BaseModel

from helpdesk.core.timestamps import WireDatetime


class ErrorResponse(BaseModel):
    """Standard error response model."""

    error: str
    message: str
    details: dict[str, Any] | None = None


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str = "healthy"
    version: str = "1.0.0"


class SuccessResponse(BaseModel):
    """Acknowledgement for mutations without a resource body."""

    success: bool = True


class StatusCodeResponse(BaseModel):
    """Body of a test status code response."""

    message: str
    timestamp: WireDatetime
