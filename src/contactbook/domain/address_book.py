"""AddressBook aggregate: live contacts, the tag index and the trash.

Every mutator updates the contact set and the tag index together, so after
any call:

- every contact in a tag bucket is a live contact,
- a tag is a key of the index only while its bucket is non-empty,
- a live contact sits in exactly the buckets of the tags it carries,
- no two live contacts are equal,
- a trashed contact is never live at the same time.
"""

from collections.abc import Callable, Iterable, Iterator
from datetime import date

from contactbook.domain.entities import Contact, Tag
from contactbook.domain.recently_deleted import RETENTION_PERIOD_DAYS, RecentlyDeleted


def _require(value: object, what: str) -> None:
    if value is None:
        raise ValueError(f"{what} cannot be None.")


class AddressBook:
    """Ordered set of taggable contacts with restorable deletes."""

    def __init__(
        self,
        retention_days: int = RETENTION_PERIOD_DAYS,
        *,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self._clock = clock
        # key -> stored instance, so lookups hand back the authoritative record
        self._contacts: dict[Contact, Contact] = {}
        self._tag_index: dict[Tag, set[Contact]] = {}
        self._trash = RecentlyDeleted(retention_days)

    @classmethod
    def from_snapshot(
        cls,
        contacts: Iterable[Contact],
        tag_index: dict[Tag, Iterable[Contact]],
        deleted: Iterable[tuple[date, Contact]] = (),
        retention_days: int = RETENTION_PERIOD_DAYS,
        *,
        clock: Callable[[], date] = date.today,
    ) -> "AddressBook":
        """Rebuild a book from stored parts. Raises ValueError if the parts disagree."""
        book = cls(retention_days, clock=clock)
        for contact in contacts:
            if contact in book._contacts:
                raise ValueError(f"Duplicate contact {contact.full_name!r}.")
            book._contacts[contact] = contact
        for tag, members in tag_index.items():
            bucket: set[Contact] = set()
            for member in members:
                stored = book._contacts.get(member)
                if stored is None:
                    raise ValueError(
                        f"Tag {tag.name!r} lists {member.full_name!r}, which is not a contact."
                    )
                if tag not in stored.tags:
                    raise ValueError(
                        f"Tag {tag.name!r} lists {member.full_name!r}, which does not carry it."
                    )
                bucket.add(stored)
            if not bucket:
                raise ValueError(f"Tag {tag.name!r} has no contacts.")
            book._tag_index[tag] = bucket
        for contact in book._contacts.values():
            for tag in contact.tags:
                if contact not in book._tag_index.get(tag, ()):
                    raise ValueError(
                        f"{contact.full_name!r} carries tag {tag.name!r} but is not indexed under it."
                    )
        for day, contact in deleted:
            if contact in book._contacts:
                raise ValueError(f"{contact.full_name!r} is both live and deleted.")
            book._trash.put(contact, on=day)
        return book

    def copy(self) -> "AddressBook":
        """Independent copy. Stored contacts are cloned, so tag edits on one book never reach the other."""
        clones = {c: c.edited() for c in self._contacts}
        return AddressBook.from_snapshot(
            clones.values(),
            {tag: [clones[c] for c in members] for tag, members in self._tag_index.items()},
            [(day, c.edited()) for day, c in self.deleted_contacts()],
            self._trash.retention_days,
            clock=self._clock,
        )

    # --- contact list ---

    def contacts(self) -> list[Contact]:
        return sorted(self._contacts)

    def get(self, contact: Contact) -> Contact | None:
        """Return the stored instance equal to contact, or None."""
        _require(contact, "Contact")
        return self._contacts.get(contact)

    def add(self, contact: Contact) -> bool:
        """Add contact. Returns False if an equal contact is already present."""
        _require(contact, "Contact")
        if contact in self._contacts:
            return False
        self._trash.forget(contact)
        self._contacts[contact] = contact
        self._add_to_tag_index(contact)
        return True

    def delete(self, contact: Contact) -> bool:
        """Move contact to the trash under today's date. Returns False if absent."""
        _require(contact, "Contact")
        stored = self._contacts.pop(contact, None)
        if stored is None:
            return False
        self._remove_from_tag_index(stored)
        today = self._clock()
        self._trash.put(stored, on=today)
        self._trash.purge_expired(today)
        return True

    def replace(self, current: Contact, edited: Contact) -> bool:
        """Swap a stored contact for its edited version. Returns False if current is
        absent or edited equals a different stored contact."""
        _require(current, "Contact")
        _require(edited, "Contact")
        stored = self._contacts.get(current)
        if stored is None:
            return False
        if edited != current and edited in self._contacts:
            return False
        del self._contacts[stored]
        self._remove_from_tag_index(stored)
        self._trash.forget(edited)
        self._contacts[edited] = edited
        self._add_to_tag_index(edited)
        return True

    # --- tags ---

    def tags(self) -> list[Tag]:
        return sorted(self._tag_index)

    def contacts_tagged(self, tag: Tag) -> list[Contact]:
        _require(tag, "Tag")
        return sorted(self._tag_index.get(tag, ()))

    def tag_index(self) -> dict[Tag, list[Contact]]:
        return {tag: sorted(self._tag_index[tag]) for tag in sorted(self._tag_index)}

    def add_tag(self, tag: Tag, contact: Contact) -> bool:
        """Tag a stored contact. Returns False if the contact is not in the book."""
        _require(tag, "Tag")
        _require(contact, "Contact")
        stored = self._contacts.get(contact)
        if stored is None:
            return False
        stored.tags.add(tag)
        self._tag_index.setdefault(tag, set()).add(stored)
        return True

    def remove_tag(self, tag: Tag, contact: Contact) -> bool:
        """Untag a stored contact. Returns False if absent or not carrying the tag."""
        _require(tag, "Tag")
        _require(contact, "Contact")
        stored = self._contacts.get(contact)
        if stored is None or tag not in stored.tags:
            return False
        stored.tags.discard(tag)
        self._discard_from_bucket(tag, stored)
        return True

    # --- trash ---

    @property
    def trash(self) -> RecentlyDeleted:
        return self._trash

    def deleted_contacts(self) -> list[tuple[date, Contact]]:
        return [(day, c) for day, bucket in self._trash.entries() for c in bucket]

    def restore(self, contact: Contact) -> bool:
        """Bring a trashed contact back, re-indexing its tags. Returns False if not trashed."""
        _require(contact, "Contact")
        if contact in self._contacts:
            return False
        restored = self._trash.take(contact)
        if restored is None:
            return False
        self._contacts[restored] = restored
        self._add_to_tag_index(restored)
        return True

    def purge_expired(self, today: date | None = None) -> int:
        return self._trash.purge_expired(today or self._clock())

    # --- index maintenance ---

    def _add_to_tag_index(self, contact: Contact) -> None:
        for tag in contact.tags:
            self._tag_index.setdefault(tag, set()).add(contact)

    def _remove_from_tag_index(self, contact: Contact) -> None:
        for tag in contact.tags:
            self._discard_from_bucket(tag, contact)

    def _discard_from_bucket(self, tag: Tag, contact: Contact) -> None:
        bucket = self._tag_index.get(tag)
        if bucket is None:
            return
        bucket.discard(contact)
        if not bucket:
            del self._tag_index[tag]

    def __contains__(self, contact: object) -> bool:
        return contact in self._contacts

    def __iter__(self) -> Iterator[Contact]:
        return iter(self.contacts())

    def __len__(self) -> int:
        return len(self._contacts)
