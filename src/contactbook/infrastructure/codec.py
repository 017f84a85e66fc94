"""Record stream codec for a whole AddressBook.

A stream is a sequence of records, each a one-byte kind, a 4-byte big-endian
payload length and a UTF-8 JSON payload. Kinds:

    D  deleted contact   {"deleted_on": "YYYY-MM-DD", "contact": {...}}
    C  contact           {...}
    T  tag name          "name"

Order: all D records (trash), then one C per live contact, then for each tag
a T followed by the C records of its bucket. There are no segment markers: a
tag's bucket runs until the next T or the end of the stream, which is why an
empty bucket must never be written.
"""

import json
import struct
from collections.abc import Iterator
from datetime import date
from io import BytesIO
from typing import Any, BinaryIO

from contactbook.domain import AddressBook, Contact, RETENTION_PERIOD_DAYS, Tag

RECORD_DELETED = b"D"
RECORD_CONTACT = b"C"
RECORD_TAG = b"T"

_HEADER = struct.Struct(">cI")


class CorruptStoreError(Exception):
    """The stream cannot be decoded into a consistent AddressBook."""


def contact_to_payload(contact: Contact) -> dict[str, Any]:
    return {
        "family_name": contact.family_name,
        "given_name": contact.given_name,
        "phone_numbers": list(contact.phone_numbers),
        "emails": list(contact.emails),
        "tags": contact.tag_names(),
        "picture": contact.picture,
    }


def contact_from_payload(payload: Any) -> Contact:
    if not isinstance(payload, dict):
        raise CorruptStoreError(f"Expected a contact object, got {type(payload).__name__}.")
    try:
        return Contact(
            family_name=payload.get("family_name", ""),
            given_name=payload.get("given_name", ""),
            phone_numbers=tuple(payload.get("phone_numbers") or ()),
            emails=tuple(payload.get("emails") or ()),
            tags=set(payload.get("tags") or ()),
            picture=payload.get("picture"),
        )
    except (AttributeError, TypeError, ValueError) as e:
        raise CorruptStoreError(f"Invalid contact record: {e}") from e


def write_record(stream: BinaryIO, kind: bytes, payload: Any) -> None:
    body = json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    stream.write(_HEADER.pack(kind, len(body)))
    stream.write(body)


def read_records(stream: BinaryIO) -> Iterator[tuple[bytes, Any]]:
    """Yield (kind, payload) until a clean end of stream."""
    while True:
        header = stream.read(_HEADER.size)
        if not header:
            return
        if len(header) < _HEADER.size:
            raise CorruptStoreError("Truncated record header.")
        kind, length = _HEADER.unpack(header)
        if kind not in (RECORD_DELETED, RECORD_CONTACT, RECORD_TAG):
            raise CorruptStoreError(f"Unknown record kind {kind!r}.")
        body = stream.read(length)
        if len(body) < length:
            raise CorruptStoreError("Truncated record payload.")
        try:
            payload = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError, RecursionError) as e:
            raise CorruptStoreError(f"Unreadable record payload: {e}") from e
        yield kind, payload


def dump(book: AddressBook, stream: BinaryIO) -> None:
    for day, contact in book.deleted_contacts():
        write_record(
            stream,
            RECORD_DELETED,
            {"deleted_on": day.isoformat(), "contact": contact_to_payload(contact)},
        )
    for contact in book.contacts():
        write_record(stream, RECORD_CONTACT, contact_to_payload(contact))
    for tag, members in book.tag_index().items():
        if not members:
            raise ValueError(f"Refusing to write tag {tag.name!r} without contacts.")
        write_record(stream, RECORD_TAG, tag.name)
        for contact in members:
            write_record(stream, RECORD_CONTACT, contact_to_payload(contact))


def _deleted_from_payload(payload: Any) -> tuple[date, Contact]:
    if not isinstance(payload, dict):
        raise CorruptStoreError("Expected a deleted-contact object.")
    try:
        day = date.fromisoformat(payload.get("deleted_on", ""))
    except (TypeError, ValueError) as e:
        raise CorruptStoreError(f"Invalid deletion date: {e}") from e
    return day, contact_from_payload(payload.get("contact"))


def load(
    stream: BinaryIO,
    retention_days: int = RETENTION_PERIOD_DAYS,
    **book_kwargs,
) -> AddressBook:
    """Read a whole book. An empty stream gives an empty book."""
    deleted: list[tuple[date, Contact]] = []
    contacts: list[Contact] = []
    buckets: dict[Tag, list[Contact]] = {}
    current: Tag | None = None

    for kind, payload in read_records(stream):
        if kind == RECORD_DELETED:
            if contacts or buckets:
                raise CorruptStoreError("Deleted-contact record after live contacts.")
            deleted.append(_deleted_from_payload(payload))
        elif kind == RECORD_CONTACT:
            contact = contact_from_payload(payload)
            if current is None:
                contacts.append(contact)
            else:
                buckets[current].append(contact)
        else:
            if not isinstance(payload, str):
                raise CorruptStoreError("Tag record must hold a name.")
            try:
                current = Tag(payload)
            except ValueError as e:
                raise CorruptStoreError(str(e)) from e
            if current in buckets:
                raise CorruptStoreError(f"Tag {current.name!r} appears twice.")
            buckets[current] = []

    try:
        return AddressBook.from_snapshot(
            contacts, buckets, deleted, retention_days, **book_kwargs
        )
    except ValueError as e:
        raise CorruptStoreError(str(e)) from e


def encode(book: AddressBook) -> bytes:
    buf = BytesIO()
    dump(book, buf)
    return buf.getvalue()


def decode(data: bytes, retention_days: int = RETENTION_PERIOD_DAYS, **book_kwargs) -> AddressBook:
    return load(BytesIO(data), retention_days, **book_kwargs)
