"""Whole-file AddressBook repository on top of the record codec."""

import logging
import os
from collections.abc import Callable
from datetime import date
from pathlib import Path

from contactbook.domain import RETENTION_PERIOD_DAYS, AddressBook
from contactbook.infrastructure import codec

logger = logging.getLogger(__name__)


class FileAddressBookRepository:
    """Loads and saves one address book file.
    A missing, unreadable or corrupt file loads as an empty book; the error is logged, never raised.
    Expired trash is purged on every load.
    """

    def __init__(
        self,
        path: str | os.PathLike,
        retention_days: int = RETENTION_PERIOD_DAYS,
        *,
        clock: Callable[[], date] = date.today,
    ) -> None:
        if path is None or not str(path).strip():
            raise ValueError("Path cannot be empty.")
        self._path = Path(path)
        self._retention_days = retention_days
        self._clock = clock

    @property
    def path(self) -> Path:
        return self._path

    def _empty(self) -> AddressBook:
        return AddressBook(self._retention_days, clock=self._clock)

    def load(self) -> AddressBook:
        if not self._path.exists():
            logger.info("No address book at %s, starting empty", self._path)
            return self._empty()
        try:
            with self._path.open("rb") as stream:
                book = codec.load(stream, self._retention_days, clock=self._clock)
        except (codec.CorruptStoreError, OSError):
            logger.exception(
                "Error reading address book from %s. Created a new address book instead.",
                self._path,
            )
            return self._empty()
        purged = book.purge_expired()
        if purged:
            logger.info("Purged %d expired contact(s) from the trash on load", purged)
        logger.info("Loaded %d contact(s) from %s", len(book), self._path)
        return book

    def save(self, book: AddressBook) -> None:
        """Write to a sibling temp file, then swap it in, so a failed save leaves the old file."""
        if book is None:
            raise ValueError("AddressBook cannot be None.")
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_name(self._path.name + ".tmp")
        try:
            with tmp.open("wb") as stream:
                codec.dump(book, stream)
            os.replace(tmp, self._path)
        finally:
            if tmp.exists():
                tmp.unlink()
        logger.info("Saved %d contact(s) to %s", len(book), self._path)
