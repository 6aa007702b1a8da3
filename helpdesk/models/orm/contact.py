"""
Contact ORM models.

A contact is an external person identified by any of its emails or
phones. Identifier uniqueness is per contact, not per tenant.
"""

from sqlalchemy import Boolean, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from helpdesk.models.orm.base import Base, TimestampMixin


class Contact(TimestampMixin, Base):
    """Contact database table."""

    __tablename__ = "contacts"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255))
    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Relationships
    emails: Mapped[list["ContactEmail"]] = relationship(
        back_populates="contact",
        cascade="all, delete-orphan",
        order_by="ContactEmail.id",
        lazy="selectin",
    )
    phones: Mapped[list["ContactPhone"]] = relationship(
        back_populates="contact",
        cascade="all, delete-orphan",
        order_by="ContactPhone.id",
        lazy="selectin",
    )

    __table_args__ = (Index("ix_contacts_organization_id", "organization_id"),)


class ContactEmail(TimestampMixin, Base):
    """Contact email address table."""

    __tablename__ = "contact_emails"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    contact_id: Mapped[int] = mapped_column(ForeignKey("contacts.id", ondelete="CASCADE"))
    email: Mapped[str] = mapped_column(String(320))
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False)

    contact: Mapped["Contact"] = relationship(back_populates="emails")

    __table_args__ = (
        UniqueConstraint("email", "contact_id", name="uq_contact_emails_email_contact"),
        Index("ix_contact_emails_email", "email"),
    )


class ContactPhone(TimestampMixin, Base):
    """Contact phone number table."""

    __tablename__ = "contact_phones"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    contact_id: Mapped[int] = mapped_column(ForeignKey("contacts.id", ondelete="CASCADE"))
    phone: Mapped[str] = mapped_column(String(64))
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False)

    contact: Mapped["Contact"] = relationship(back_populates="phones")

    __table_args__ = (
        UniqueConstraint("phone", "contact_id", name="uq_contact_phones_phone_contact"),
        Index("ix_contact_phones_phone", "phone"),
    )
