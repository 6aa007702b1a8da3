"""
Contact Repository

Provides database operations for Contact and its identifier collections.
"""

from collections.abc import Sequence

from sqlalchemy import exists, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.core.pagination import Page
from helpdesk.models.orm.contact import Contact, ContactEmail, ContactPhone
from helpdesk.repositories.base import Repository


def _has_email(emails: Sequence[str], *, like: bool = False):
    condition = ContactEmail.email.ilike(f"%{emails[0]}%") if like else ContactEmail.email.in_(emails)
    return exists().where(ContactEmail.contact_id == Contact.id, condition)


def _has_phone(phones: Sequence[str], *, like: bool = False):
    condition = ContactPhone.phone.ilike(f"%{phones[0]}%") if like else ContactPhone.phone.in_(phones)
    return exists().where(ContactPhone.contact_id == Contact.id, condition)


class ContactRepository:
    """Repository for Contact model operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.records = Repository(session, Contact)

    async def get_by_id(self, id: int) -> Contact | None:
        return await self.records.get_by_id(id)

    async def get_scoped(self, id: int, organization_id: int) -> Contact | None:
        return await self.records.get_scoped(id, organization_id)

    async def find_by_identifiers(
        self, organization_id: int, emails: Sequence[str], phones: Sequence[str]
    ) -> Contact | None:
        """
        Find the tenant's contact holding any of the given emails or phones.

        Args:
            organization_id: Tenant scope
            emails: Exact email values
            phones: Exact phone values

        Returns:
            The matching contact with the lowest id, or None
        """
        matches = []
        if emails:
            matches.append(_has_email(emails))
        if phones:
            matches.append(_has_phone(phones))
        if not matches:
            return None

        result = await self.session.execute(
            select(Contact)
            .where(Contact.organization_id == organization_id, or_(*matches))
            .order_by(Contact.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_for_organization(
        self,
        organization_id: int,
        *,
        email: str | None = None,
        phone: str | None = None,
        name: str | None = None,
        cursor: str | None = None,
        limit: int | None = None,
    ) -> Page[Contact]:
        """
        List contacts of an organization.

        Args:
            organization_id: Tenant scope
            email: Substring match on any of the contact's emails
            phone: Substring match on any of the contact's phones
            name: Substring match on name
            cursor: Cursor from the previous page
            limit: Page size

        Returns:
            Page of contacts ordered by id
        """
        filters = [Contact.organization_id == organization_id]
        if name:
            filters.append(Contact.name.ilike(f"%{name}%"))
        if email:
            filters.append(_has_email([email], like=True))
        if phone:
            filters.append(_has_phone([phone], like=True))
        return await self.records.list_page(filters=filters, cursor=cursor, limit=limit)

    async def create(self, contact: Contact) -> Contact:
        return await self.records.create(contact)

    async def save(self, contact: Contact) -> Contact:
        return await self.records.update(contact)

    async def delete(self, contact: Contact) -> None:
        await self.records.delete(contact)
