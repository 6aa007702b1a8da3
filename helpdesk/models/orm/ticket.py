"""
Ticket ORM models.

Tickets list newest first; (organization_id, created_at, id) backs that
ordering.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from helpdesk.models.enums import TicketPriority, TicketStatus
from helpdesk.models.orm.base import Base, TimestampMixin


class Ticket(TimestampMixin, Base):
    """Ticket database table."""

    __tablename__ = "tickets"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    subject: Mapped[str] = mapped_column(String(500))
    description: Mapped[str | None] = mapped_column(Text, default=None)
    status: Mapped[TicketStatus] = mapped_column(String(20), default=TicketStatus.OPEN.value)
    priority: Mapped[TicketPriority] = mapped_column(String(20), default=TicketPriority.NORMAL.value)
    assignee_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), default=None
    )
    contact_id: Mapped[int | None] = mapped_column(
        ForeignKey("contacts.id", ondelete="SET NULL"), default=None
    )
    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
    )
    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)

    __table_args__ = (
        Index("ix_tickets_org_created", "organization_id", "created_at", "id"),
        Index("ix_tickets_assignee_id", "assignee_id"),
        Index("ix_tickets_contact_id", "contact_id"),
    )


class TicketAttachment(TimestampMixin, Base):
    """Ticket to attachment link table."""

    __tablename__ = "ticket_attachments"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    ticket_id: Mapped[int] = mapped_column(ForeignKey("tickets.id", ondelete="CASCADE"))
    attachment_id: Mapped[int] = mapped_column(
        ForeignKey("attachments.id", ondelete="CASCADE")
    )

    __table_args__ = (
        UniqueConstraint("ticket_id", "attachment_id", name="uq_ticket_attachments_pair"),
    )
