"""Settings from the environment (.env supported) and the data directory layout."""

import os
import time
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from contactbook.domain import RETENTION_PERIOD_DAYS

ADDRESS_BOOKS_DIR = "address_books"
CONTACT_PICTURES_DIR = "contact_pictures"
DEFAULT_DATA_DIR = "addressbook_data"
DEFAULT_FILE_NAME = "address_book.obj"


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    address_book_file: Path
    retention_days: int = RETENTION_PERIOD_DAYS
    default_region: str | None = None

    def __post_init__(self):
        if self.retention_days < 0:
            raise ValueError("CONTACTBOOK_RETENTION_DAYS must be zero or more.")


def load_settings(env_file: Path | None = None) -> Settings:
    """Read CONTACTBOOK_* variables, after loading env_file (or a .env in cwd) if present."""
    for path in (env_file, Path.cwd() / ".env"):
        if path is not None and path.exists():
            load_dotenv(path)
            break

    data_dir = Path(os.environ.get("CONTACTBOOK_DATA_DIR", DEFAULT_DATA_DIR).strip() or DEFAULT_DATA_DIR)
    book_file = os.environ.get("CONTACTBOOK_FILE", "").strip()
    raw_days = os.environ.get("CONTACTBOOK_RETENTION_DAYS", "").strip()
    try:
        retention_days = int(raw_days) if raw_days else RETENTION_PERIOD_DAYS
    except ValueError as e:
        raise ValueError(f"CONTACTBOOK_RETENTION_DAYS must be an integer, got {raw_days!r}.") from e
    region = os.environ.get("CONTACTBOOK_DEFAULT_REGION", "").strip().upper() or None
    return Settings(
        data_dir=data_dir,
        address_book_file=Path(book_file) if book_file else data_dir / DEFAULT_FILE_NAME,
        retention_days=retention_days,
        default_region=region,
    )


def ensure_directories(settings: Settings) -> None:
    for name in (ADDRESS_BOOKS_DIR, CONTACT_PICTURES_DIR):
        (settings.data_dir / name).mkdir(parents=True, exist_ok=True)
    settings.address_book_file.parent.mkdir(parents=True, exist_ok=True)


def _timestamp_ms() -> int:
    return int(time.time() * 1000)


def generate_address_book_path(settings: Settings) -> Path:
    """address_books/address_book_<ms>.obj under the data dir."""
    return settings.data_dir / ADDRESS_BOOKS_DIR / f"address_book_{_timestamp_ms()}.obj"


def generate_contact_picture_path(settings: Settings, extension: str) -> Path:
    """contact_pictures/contactPicture_<ms>.<ext> under the data dir."""
    ext = (extension or "").strip().lstrip(".")
    if not ext:
        raise ValueError("Picture extension must be non-empty.")
    return settings.data_dir / CONTACT_PICTURES_DIR / f"contactPicture_{_timestamp_ms()}.{ext}"
