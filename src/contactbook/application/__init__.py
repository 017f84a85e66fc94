"""Application layer: use cases, ports, and DTOs. Depends only on domain."""

from contactbook.application.contact_service import ContactService, summarize
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
from contactbook.application.ports import (
    AddressBookRepository,
    ContactList,
    TaggableList,
    TrashCan,
)

__all__ = [
    "AddressBookRepository",
    "ContactAdded",
    "ContactCardData",
    "ContactDeleted",
    "ContactList",
    "ContactNotFound",
    "ContactRestored",
    "ContactService",
    "ContactSummary",
    "ContactUpdated",
    "DeletedContact",
    "Duplicate",
    "ImportReport",
    "Invalid",
    "TagApplied",
    "TagRemoved",
    "TaggableList",
    "TrashCan",
    "summarize",
]
