"""
Enums for helpdesk models.
"""

from enum import Enum


class UserRole(str, Enum):
    """User roles for access control."""

    ADMIN = "admin"
    AGENT = "agent"

    @classmethod
    def can_manage(cls, role: "UserRole | str") -> bool:
        """Check if role can manage teams and other users' roles."""
        return role == cls.ADMIN


class TicketStatus(str, Enum):
    """Lifecycle status of a ticket."""

    OPEN = "open"
    CLOSED = "closed"


class TicketPriority(str, Enum):
    """Ticket priority levels."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


class AuthorType(str, Enum):
    """Who wrote a comment."""

    USER = "user"
    CONTACT = "contact"
