"""
Contactbook core: clean-architecture layout.

- domain: entities (Contact, Tag), the AddressBook aggregate and its trash. No outer dependencies.
- application: use cases (ContactService), ports (ContactList, TaggableList, TrashCan, AddressBookRepository), DTOs.
- infrastructure: adapters (record codec, FileAddressBookRepository, vCard bridge, settings).
"""

from contactbook.application import (
    AddressBookRepository,
    ContactCardData,
    ContactService,
    ContactSummary,
    Duplicate,
    Invalid,
)
from contactbook.domain import AddressBook, Contact, RecentlyDeleted, Tag
from contactbook.infrastructure import CorruptStoreError, FileAddressBookRepository

__all__ = [
    "AddressBook",
    "AddressBookRepository",
    "Contact",
    "ContactCardData",
    "ContactService",
    "ContactSummary",
    "CorruptStoreError",
    "Duplicate",
    "FileAddressBookRepository",
    "Invalid",
    "RecentlyDeleted",
    "Tag",
]
