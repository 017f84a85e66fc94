"""Input DTO and result types for the contact use cases."""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class ContactCardData:
    """Contact fields as typed by a user or read from an import. Core has no UI dependency."""

    given_name: str = ""
    family_name: str = ""
    phone_numbers: tuple[str, ...] = ()
    emails: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    picture: str | None = None


@dataclass(frozen=True)
class ContactSummary:
    """One contact as returned by list, search and lookup."""

    given_name: str
    family_name: str
    full_name: str
    phone_numbers: tuple[str, ...] = ()
    emails: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    picture: str | None = None


@dataclass(frozen=True)
class DeletedContact:
    """A contact sitting in the trash and the day it was deleted."""

    contact: ContactSummary
    deleted_on: date


# --- mutation results ---


@dataclass(frozen=True)
class ContactAdded:
    contact: ContactSummary


@dataclass(frozen=True)
class ContactUpdated:
    contact: ContactSummary


@dataclass(frozen=True)
class ContactDeleted:
    contact: ContactSummary
    deleted_on: date


@dataclass(frozen=True)
class ContactRestored:
    contact: ContactSummary


@dataclass(frozen=True)
class TagApplied:
    contact: ContactSummary
    tag: str


@dataclass(frozen=True)
class TagRemoved:
    contact: ContactSummary
    tag: str


@dataclass(frozen=True)
class Duplicate:
    """An equal contact is already in the address book."""

    name: str


@dataclass(frozen=True)
class Invalid:
    """Input is invalid (e.g. missing name or empty tag)."""

    reason: str


@dataclass(frozen=True)
class ContactNotFound:
    """No matching contact where one was expected (book, trash, or tag)."""

    name: str


@dataclass(frozen=True)
class ImportReport:
    """Outcome of adding a batch of imported contacts."""

    added: int = 0
    duplicates: int = 0
    names: tuple[str, ...] = ()
