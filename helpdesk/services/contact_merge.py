"""
Contact Merge Service

Resolves incoming contact payloads against existing contacts of the same
organization. A payload sharing any email or phone with an existing
contact updates that contact in place instead of creating a duplicate.

Check-and-create runs under a per-organization lock and commits before
the lock is released, so two concurrent creates for the same identifier
resolve to one contact within a process.
"""

import logging
from collections.abc import Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.core.locks import KeyedLock
from helpdesk.models.contracts.contact import ContactEmailIn, ContactPhoneIn
from helpdesk.models.orm.contact import Contact, ContactEmail, ContactPhone
from helpdesk.repositories.contact import ContactRepository

logger = logging.getLogger(__name__)

_organization_locks = KeyedLock()


class ContactValidationError(ValueError):
    """Raised when a contact would be left without any email or phone."""


def _merge_emails(contact: Contact, incoming: Sequence[ContactEmailIn]) -> list[ContactEmail]:
    # Rows whose value survives are reused so the unique (email, contact_id)
    # pair is never deleted and re-inserted in one flush.
    existing = {row.email: row for row in contact.emails}
    merged = []
    for item in incoming:
        row = existing.pop(item.email, None) or ContactEmail(email=item.email)
        row.is_primary = item.is_primary
        merged.append(row)
    return merged


def _merge_phones(contact: Contact, incoming: Sequence[ContactPhoneIn]) -> list[ContactPhone]:
    existing = {row.phone: row for row in contact.phones}
    merged = []
    for item in incoming:
        row = existing.pop(item.phone, None) or ContactPhone(phone=item.phone)
        row.is_primary = item.is_primary
        merged.append(row)
    return merged


class ContactMergeService:
    """Identity resolution and smart-merge writes for contacts."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.contacts = ContactRepository(session)

    async def find_existing(
        self, organization_id: int, emails: Sequence[str], phones: Sequence[str]
    ) -> Contact | None:
        """
        Find a contact of the organization sharing any identifier.

        Args:
            organization_id: Tenant scope
            emails: Candidate email values
            phones: Candidate phone values

        Returns:
            The lowest-id matching contact, or None (always None when both
            lists are empty)
        """
        if not emails and not phones:
            return None
        return await self.contacts.find_by_identifiers(organization_id, emails, phones)

    async def create_or_merge(
        self,
        organization_id: int,
        name: str,
        emails: Sequence[ContactEmailIn],
        phones: Sequence[ContactPhoneIn],
    ) -> tuple[Contact, bool]:
        """
        Create a contact, or merge into the existing contact it matches.

        On merge the name is replaced and each non-empty incoming collection
        replaces the stored one; an empty incoming collection leaves the
        stored one untouched.

        Args:
            organization_id: Tenant scope
            name: Display name
            emails: Incoming email identifiers
            phones: Incoming phone identifiers

        Returns:
            Tuple of (hydrated contact, whether a new contact was created)

        Raises:
            ContactValidationError: If no email and no phone is given
            IntegrityError: If the payload repeats an identifier
        """
        if not emails and not phones:
            raise ContactValidationError("At least one email or phone number is required")

        async with _organization_locks.hold(organization_id):
            try:
                contact, created = await self._resolve_and_write(
                    organization_id, name, emails, phones
                )
                await self.session.commit()
            except IntegrityError:
                await self.session.rollback()
                logger.info(
                    "Contact write conflicted, retrying as merge",
                    extra={"organization_id": organization_id},
                )
                contact, created = await self._resolve_and_write(
                    organization_id, name, emails, phones
                )
                await self.session.commit()

        await self.session.refresh(contact)
        logger.info(
            "Contact created" if created else "Contact merged",
            extra={"organization_id": organization_id, "contact_id": contact.id},
        )
        return contact, created

    async def _resolve_and_write(
        self,
        organization_id: int,
        name: str,
        emails: Sequence[ContactEmailIn],
        phones: Sequence[ContactPhoneIn],
    ) -> tuple[Contact, bool]:
        existing = await self.find_existing(
            organization_id,
            [item.email for item in emails],
            [item.phone for item in phones],
        )

        if existing is not None:
            existing.name = name
            if emails:
                existing.emails = _merge_emails(existing, emails)
            if phones:
                existing.phones = _merge_phones(existing, phones)
            return await self.contacts.save(existing), False

        contact = Contact(
            organization_id=organization_id,
            name=name,
            emails=[ContactEmail(email=e.email, is_primary=e.is_primary) for e in emails],
            phones=[ContactPhone(phone=p.phone, is_primary=p.is_primary) for p in phones],
        )
        return await self.contacts.create(contact), True

    async def update_contact(
        self,
        contact: Contact,
        name: str | None = None,
        emails: Sequence[ContactEmailIn] | None = None,
        phones: Sequence[ContactPhoneIn] | None = None,
    ) -> Contact:
        """
        Directly update a contact.

        A collection given as None is left unchanged; a list (even an empty
        one) replaces the stored collection.

        Args:
            contact: Contact to update (identifiers loaded)
            name: New name, or None to keep
            emails: Replacement emails, or None to keep
            phones: Replacement phones, or None to keep

        Returns:
            The updated contact

        Raises:
            ContactValidationError: If the result would have no email and no phone
        """
        will_have_email = bool(emails) if emails is not None else bool(contact.emails)
        will_have_phone = bool(phones) if phones is not None else bool(contact.phones)
        if not will_have_email and not will_have_phone:
            raise ContactValidationError("Contact must have at least one email or phone number")

        if name is not None:
            contact.name = name
        if emails is not None:
            contact.emails = _merge_emails(contact, emails)
        if phones is not None:
            contact.phones = _merge_phones(contact, phones)

        contact = await self.contacts.save(contact)
        logger.info(
            "Contact updated",
            extra={"organization_id": contact.organization_id, "contact_id": contact.id},
        )
        return contact
