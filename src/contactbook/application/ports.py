"""Application ports (interfaces). AddressBook satisfies the first three; infrastructure the last."""

from datetime import date
from typing import Protocol, runtime_checkable

from contactbook.domain import AddressBook, Contact, Tag


@runtime_checkable
class ContactList(Protocol):
    """Ordered set of unique contacts."""

    def contacts(self) -> list[Contact]:
        """Return all live contacts in order."""
        ...

    def add(self, contact: Contact) -> bool:
        """Store a contact. False if an equal one is already stored."""
        ...

    def delete(self, contact: Contact) -> bool:
        """Soft-delete a contact. False if not stored."""
        ...

    def get(self, contact: Contact) -> Contact | None:
        """Return the stored instance equal to contact, or None."""
        ...

    def replace(self, current: Contact, edited: Contact) -> bool:
        """Swap a stored contact for its edited version."""
        ...


@runtime_checkable
class TaggableList(Protocol):
    """Tag mutation and tag-based lookup."""

    def add_tag(self, tag: Tag, contact: Contact) -> bool: ...

    def remove_tag(self, tag: Tag, contact: Contact) -> bool: ...

    def tags(self) -> list[Tag]: ...

    def contacts_tagged(self, tag: Tag) -> list[Contact]: ...


@runtime_checkable
class TrashCan(Protocol):
    """Restorable deletes with a retention window."""

    def restore(self, contact: Contact) -> bool: ...

    def deleted_contacts(self) -> list[tuple[date, Contact]]: ...

    def purge_expired(self, today: date | None = None) -> int: ...


class AddressBookRepository(Protocol):
    """Loads and stores a whole address book."""

    def load(self) -> AddressBook:
        """Return the stored book, or an empty one if nothing usable is stored."""
        ...

    def save(self, book: AddressBook) -> None:
        """Persist the whole book, replacing what was stored."""
        ...
