"""SQLAlchemy ORM Models for the helpdesk.

Pure database models using SQLAlchemy 2.0 declarative style.
These models define the database schema and relationships.
"""

from helpdesk.models.orm.api_key import APIKey
from helpdesk.models.orm.attachment import Attachment
from helpdesk.models.orm.base import Base
from helpdesk.models.orm.comment import Comment, CommentAttachment
from helpdesk.models.orm.contact import Contact, ContactEmail, ContactPhone
from helpdesk.models.orm.organization import Organization
from helpdesk.models.orm.rate_limit import RateLimitCounter
from helpdesk.models.orm.team import Team, TeamMember
from helpdesk.models.orm.ticket import Ticket, TicketAttachment
from helpdesk.models.orm.user import User

__all__ = [
    # Base
    "Base",
    # Tenancy
    "Organization",
    "User",
    "Team",
    "TeamMember",
    # Admission
    "APIKey",
    "RateLimitCounter",
    # Contacts
    "Contact",
    "ContactEmail",
    "ContactPhone",
    # Tickets
    "Ticket",
    "TicketAttachment",
    "Comment",
    "CommentAttachment",
    # Attachments
    "Attachment",
]
