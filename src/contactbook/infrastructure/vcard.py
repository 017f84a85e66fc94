"""vCard import/export for contacts (vobject).

Mapping: N <-> family/given name, FN written from the full name, TEL and
EMAIL <-> phone numbers and emails, CATEGORIES <-> tags, PHOTO (URI) <->
picture. Other vCard properties are ignored on import.
"""

import logging
import os
from collections.abc import Iterable
from pathlib import Path

import vobject

from contactbook.domain import Contact

logger = logging.getLogger(__name__)

VCARD_EXTENSION = ".vcf"


class VCardError(ValueError):
    """Bad path or unreadable vCard content."""


def _check_path(path: str | os.PathLike | None) -> Path:
    if path is None:
        raise VCardError("Path cannot be None.")
    text = str(path).strip()
    if not text:
        raise VCardError("Path cannot be empty.")
    if not text.lower().endswith(VCARD_EXTENSION):
        raise VCardError(f"Specified path is not a {VCARD_EXTENSION} file.")
    return Path(text)


def _text(value) -> str:
    """vobject gives a str for single name parts and a list for repeated ones."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return " ".join(str(v).strip() for v in value if str(v).strip())
    return str(value).strip()


def contact_to_vcard(contact: Contact):
    card = vobject.vCard()
    card.add("n")
    card.n.value = vobject.vcard.Name(family=contact.family_name, given=contact.given_name)
    card.add("fn")
    card.fn.value = contact.full_name
    for number in contact.phone_numbers:
        tel = card.add("tel")
        tel.value = number
        tel.type_param = "VOICE"
    for address in contact.emails:
        email = card.add("email")
        email.value = address
        email.type_param = "INTERNET"
    if contact.tags:
        card.add("categories")
        card.categories.value = contact.tag_names()
    if contact.picture:
        photo = card.add("photo")
        photo.value = contact.picture
        photo.value_param = "uri"
    return card


def contact_from_vcard(card) -> Contact | None:
    """Build a Contact from a parsed vCard, or None if the card has no usable name."""
    given = family = ""
    if hasattr(card, "n"):
        given = _text(getattr(card.n.value, "given", ""))
        family = _text(getattr(card.n.value, "family", ""))
    if not given and not family and hasattr(card, "fn"):
        parts = _text(card.fn.value).split(" ", 1)
        given = parts[0]
        family = parts[1] if len(parts) == 2 else ""
    if not given and not family:
        return None

    phones = [_text(tel.value) for tel in getattr(card, "tel_list", [])]
    emails = [_text(email.value) for email in getattr(card, "email_list", [])]
    tags: set[str] = set()
    for line in getattr(card, "categories_list", []):
        values = line.value if isinstance(line.value, (list, tuple)) else str(line.value).split(",")
        tags.update(v.strip() for v in values if v and v.strip())
    picture = None
    if hasattr(card, "photo") and isinstance(card.photo.value, str):
        picture = card.photo.value.strip() or None

    return Contact(
        family_name=family,
        given_name=given,
        phone_numbers=tuple(phones),
        emails=tuple(emails),
        tags=tags,
        picture=picture,
    )


def dumps(contacts: Iterable[Contact]) -> str:
    return "".join(contact_to_vcard(c).serialize() for c in contacts)


def loads(content: str) -> list[Contact]:
    """Parse every vCard in content. Cards without a name are skipped."""
    contacts = []
    try:
        for card in vobject.readComponents(content):
            if card.name != "VCARD":
                continue
            try:
                contact = contact_from_vcard(card)
            except ValueError as e:
                logger.warning("Skipping unusable vCard: %s", e)
                continue
            if contact is None:
                logger.warning("Skipping vCard without a name")
                continue
            contacts.append(contact)
    except (vobject.base.VObjectError, ValueError) as e:
        raise VCardError(f"Failed to parse vCard content: {e}") from e
    return contacts


def export_vcard(path: str | os.PathLike, contacts: Iterable[Contact]) -> Path:
    """Write all contacts to a .vcf file, creating parent directories."""
    target = _check_path(path)
    contacts = list(contacts)
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8", newline="") as f:
        f.write(dumps(contacts))
    logger.info("Exported %d contact(s) to %s", len(contacts), target)
    return target


def import_vcard(path: str | os.PathLike) -> list[Contact]:
    source = _check_path(path)
    if not source.is_file():
        raise VCardError(f"No vCard file at {source}.")
    try:
        content = source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise VCardError(f"Failed to read vCard file {source}: {e}") from e
    contacts = loads(content)
    logger.info("Read %d contact(s) from %s", len(contacts), source)
    return contacts
