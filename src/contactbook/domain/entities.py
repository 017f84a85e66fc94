"""Domain entities: Contact and Tag."""

from dataclasses import dataclass, field

# Max length for a single name component.
NAME_MAX_LENGTH = 500


def _clean_details(values, *, lower: bool = False) -> tuple[str, ...]:
    out: list[str] = []
    for value in values or ():
        text = str(value).strip() if value is not None else ""
        if lower:
            text = text.lower()
        if text and text not in out:
            out.append(text)
    return tuple(out)


@dataclass(frozen=True, order=True)
class Tag:
    """
    A label attached to contacts. Tags are values: two tags with the same
    name are the same index key.
    """

    name: str

    def __post_init__(self):
        name = self.name.strip() if isinstance(self.name, str) else ""
        if not name:
            raise ValueError("Tag name must be non-empty.")
        object.__setattr__(self, "name", name)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, order=True)
class Contact:
    """
    A person in the address book.

    Identity (equality, hashing and ordering) is family name, then given name,
    then phone numbers and emails. Tags and picture belong to the stored
    record but not to its identity, so tagging a contact never changes its key.
    """

    family_name: str = ""
    given_name: str = ""
    phone_numbers: tuple[str, ...] = ()
    emails: tuple[str, ...] = ()
    tags: set[Tag] = field(default_factory=set, compare=False)
    picture: str | None = field(default=None, compare=False)

    def __post_init__(self):
        family = (self.family_name or "").strip()
        given = (self.given_name or "").strip()
        if not family and not given:
            raise ValueError("Contact must have a given or family name.")
        if len(family) > NAME_MAX_LENGTH or len(given) > NAME_MAX_LENGTH:
            raise ValueError(f"Contact names must be at most {NAME_MAX_LENGTH} chars.")
        object.__setattr__(self, "family_name", family)
        object.__setattr__(self, "given_name", given)
        object.__setattr__(self, "phone_numbers", _clean_details(self.phone_numbers))
        object.__setattr__(self, "emails", _clean_details(self.emails, lower=True))
        tags = {t if isinstance(t, Tag) else Tag(t) for t in self.tags or ()}
        object.__setattr__(self, "tags", tags)
        object.__setattr__(self, "picture", (self.picture or "").strip() or None)

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.given_name, self.family_name) if p)

    def tag_names(self) -> list[str]:
        return [t.name for t in sorted(self.tags)]

    def edited(self, **changes) -> "Contact":
        """Return a copy with the given fields changed. The tag set is never shared."""
        values = {
            "family_name": self.family_name,
            "given_name": self.given_name,
            "phone_numbers": self.phone_numbers,
            "emails": self.emails,
            "tags": set(self.tags),
            "picture": self.picture,
        }
        values.update(changes)
        return Contact(**values)
