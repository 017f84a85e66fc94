"""Contact use cases over one AddressBook: add, edit, delete, restore, tag, list and search."""

import logging
from collections.abc import Callable, Iterable

from contactbook.application.dto import (
    ContactAdded,
    ContactCardData,
    ContactDeleted,
    ContactNotFound,
    ContactRestored,
    ContactSummary,
    ContactUpdated,
    DeletedContact,
    Duplicate,
    ImportReport,
    Invalid,
    TagApplied,
    TagRemoved,
)
from contactbook.application.ports import AddressBookRepository
from contactbook.domain import AddressBook, Contact, Tag

logger = logging.getLogger(__name__)


def summarize(contact: Contact) -> ContactSummary:
    return ContactSummary(
        given_name=contact.given_name,
        family_name=contact.family_name,
        full_name=contact.full_name,
        phone_numbers=contact.phone_numbers,
        emails=contact.emails,
        tags=tuple(contact.tag_names()),
        picture=contact.picture,
    )


def _card_of(contact: Contact) -> ContactCardData:
    return ContactCardData(
        given_name=contact.given_name,
        family_name=contact.family_name,
        phone_numbers=contact.phone_numbers,
        emails=contact.emails,
        tags=tuple(contact.tag_names()),
        picture=contact.picture,
    )


class ContactService:
    """Core flow: card data in, result objects out. Expected failures are results, not exceptions."""

    def __init__(
        self,
        book: AddressBook,
        repository: AddressBookRepository | None = None,
        *,
        normalize_phone: Callable[[str], str | None] | None = None,
    ) -> None:
        self._book = book
        self._repo = repository
        self._normalize_phone = normalize_phone

    @property
    def book(self) -> AddressBook:
        return self._book

    def _build_contact(self, card: ContactCardData) -> Contact | Invalid:
        if card is None:
            return Invalid(reason="Contact data is required.")
        phones = []
        for raw in card.phone_numbers or ():
            raw = (raw or "").strip()
            if not raw:
                continue
            normalized = self._normalize_phone(raw) if self._normalize_phone else None
            phones.append(normalized or raw)
        try:
            return Contact(
                family_name=card.family_name,
                given_name=card.given_name,
                phone_numbers=tuple(phones),
                emails=tuple(card.emails or ()),
                tags={Tag(name) for name in card.tags or ()},
                picture=card.picture,
            )
        except ValueError as e:
            return Invalid(reason=str(e))

    def add_contact(self, card: ContactCardData) -> ContactAdded | Duplicate | Invalid:
        contact = self._build_contact(card)
        if isinstance(contact, Invalid):
            return contact
        if not self._book.add(contact):
            return Duplicate(name=contact.full_name)
        return ContactAdded(contact=summarize(contact))

    def update_contact(
        self, current: ContactCardData, edited: ContactCardData
    ) -> ContactUpdated | ContactNotFound | Duplicate | Invalid:
        """Replace a stored contact. If the edited card names no tags, the old tags are kept."""
        key = self._build_contact(current)
        if isinstance(key, Invalid):
            return key
        replacement = self._build_contact(edited)
        if isinstance(replacement, Invalid):
            return replacement
        stored = self._book.get(key)
        if stored is None:
            return ContactNotFound(name=key.full_name)
        if not edited.tags:
            replacement = replacement.edited(tags=set(stored.tags))
        if not self._book.replace(stored, replacement):
            return Duplicate(name=replacement.full_name)
        return ContactUpdated(contact=summarize(replacement))

    def delete_contact(self, card: ContactCardData) -> ContactDeleted | ContactNotFound | Invalid:
        key = self._build_contact(card)
        if isinstance(key, Invalid):
            return key
        stored = self._book.get(key)
        if stored is None or not self._book.delete(stored):
            return ContactNotFound(name=key.full_name)
        return ContactDeleted(
            contact=summarize(stored), deleted_on=self._book.trash.deleted_on(stored)
        )

    def restore_contact(self, card: ContactCardData) -> ContactRestored | ContactNotFound | Invalid:
        key = self._build_contact(card)
        if isinstance(key, Invalid):
            return key
        if not self._book.restore(key):
            return ContactNotFound(name=key.full_name)
        return ContactRestored(contact=summarize(self._book.get(key)))

    def tag_contact(
        self, card: ContactCardData, tag_name: str
    ) -> TagApplied | ContactNotFound | Invalid:
        key = self._build_contact(card)
        if isinstance(key, Invalid):
            return key
        try:
            tag = Tag(tag_name)
        except ValueError as e:
            return Invalid(reason=str(e))
        if not self._book.add_tag(tag, key):
            return ContactNotFound(name=key.full_name)
        return TagApplied(contact=summarize(self._book.get(key)), tag=tag.name)

    def untag_contact(
        self, card: ContactCardData, tag_name: str
    ) -> TagRemoved | ContactNotFound | Invalid:
        key = self._build_contact(card)
        if isinstance(key, Invalid):
            return key
        try:
            tag = Tag(tag_name)
        except ValueError as e:
            return Invalid(reason=str(e))
        if not self._book.remove_tag(tag, key):
            return ContactNotFound(name=key.full_name)
        return TagRemoved(contact=summarize(self._book.get(key)), tag=tag.name)

    def get_contact(self, card: ContactCardData) -> ContactSummary | None:
        key = self._build_contact(card)
        if isinstance(key, Invalid):
            return None
        stored = self._book.get(key)
        return summarize(stored) if stored is not None else None

    def list_contacts(self) -> list[ContactSummary]:
        return [summarize(c) for c in self._book.contacts()]

    def list_tags(self) -> list[str]:
        return [t.name for t in self._book.tags()]

    def list_tagged(self, tag_name: str) -> list[ContactSummary]:
        try:
            tag = Tag(tag_name)
        except ValueError:
            return []
        return [summarize(c) for c in self._book.contacts_tagged(tag)]

    def search_contacts(self, keyword: str) -> list[ContactSummary]:
        """Return contacts whose name, phone or email contains the keyword (case-insensitive)."""
        if not keyword or not keyword.strip():
            return []
        needle = keyword.strip().lower()
        out = []
        for contact in self._book.contacts():
            haystack = [contact.full_name, *contact.phone_numbers, *contact.emails]
            if any(needle in value.lower() for value in haystack):
                out.append(summarize(contact))
        return out

    def list_deleted(self) -> list[DeletedContact]:
        return [
            DeletedContact(contact=summarize(c), deleted_on=day)
            for day, c in self._book.deleted_contacts()
        ]

    def purge_expired(self) -> int:
        removed = self._book.purge_expired()
        if removed:
            logger.info("Purged %d expired contact(s) from the trash", removed)
        return removed

    def import_contacts(self, contacts: Iterable[Contact]) -> ImportReport:
        """Add imported contacts through the same phone normalization as typed input."""
        added = duplicates = 0
        names = []
        for imported in contacts:
            contact = self._build_contact(_card_of(imported))
            if isinstance(contact, Invalid):
                logger.warning("Skipping imported contact %r: %s", imported.full_name, contact.reason)
                continue
            if self._book.add(contact):
                added += 1
                names.append(contact.full_name)
            else:
                duplicates += 1
        logger.info("Imported %d contact(s), skipped %d duplicate(s)", added, duplicates)
        return ImportReport(added=added, duplicates=duplicates, names=tuple(names))

    def save(self) -> None:
        if self._repo is None:
            return
        self._repo.save(self._book)

    def checkpoint(self) -> AddressBook:
        """Copy of the current book, to hand back to rollback if a save fails."""
        return self._book.copy()

    def rollback(self, checkpoint: AddressBook) -> None:
        self._book = checkpoint
