"""Infrastructure layer: concrete implementations of application ports."""

from contactbook.infrastructure.codec import CorruptStoreError
from contactbook.infrastructure.file_repository import FileAddressBookRepository
from contactbook.infrastructure.phone import normalize_phone, phone_normalizer
from contactbook.infrastructure.settings import Settings, ensure_directories, load_settings
from contactbook.infrastructure.vcard import VCardError, export_vcard, import_vcard

__all__ = [
    "CorruptStoreError",
    "FileAddressBookRepository",
    "Settings",
    "VCardError",
    "ensure_directories",
    "export_vcard",
    "import_vcard",
    "load_settings",
    "normalize_phone",
    "phone_normalizer",
]
