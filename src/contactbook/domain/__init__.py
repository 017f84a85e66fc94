"""Domain layer: entities and the address book aggregate. No dependencies on outer layers."""

from contactbook.domain.address_book import AddressBook
from contactbook.domain.entities import Contact, Tag
from contactbook.domain.recently_deleted import RETENTION_PERIOD_DAYS, RecentlyDeleted

__all__ = ["AddressBook", "Contact", "RETENTION_PERIOD_DAYS", "RecentlyDeleted", "Tag"]
