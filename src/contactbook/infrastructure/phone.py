"""Phone number normalization to E.164 for storage and deduplication."""

import phonenumbers


def normalize_phone(raw: str, default_region: str | None = None) -> str | None:
    """Parse and return E.164 form of the number, or None if invalid.

    Use default_region when the input has no leading + (e.g. "06 1234 5678"
    with default_region "IT"). If the number already includes a country code,
    default_region is ignored.
    """
    if not raw or not str(raw).strip():
        return None
    raw = str(raw).strip()
    try:
        parsed = phonenumbers.parse(raw, default_region)
    except phonenumbers.NumberParseException:
        return None
    if not phonenumbers.is_valid_number(parsed):
        return None
    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)


def phone_normalizer(default_region: str | None = None):
    """Return a one-argument normalizer for ContactService.

    Valid numbers come back as E.164. Anything else (extensions, short
    internal numbers) is kept as typed with runs of whitespace collapsed, so
    the user never loses a number they entered.
    """

    def _normalize(raw: str) -> str | None:
        e164 = normalize_phone(raw, default_region)
        if e164:
            return e164
        text = " ".join((raw or "").split())
        return text or None

    return _normalize
