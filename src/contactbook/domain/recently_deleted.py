"""Trash for soft-deleted contacts, bucketed by deletion date."""

from datetime import date, timedelta

from contactbook.domain.entities import Contact

# Days a deleted contact stays restorable.
RETENTION_PERIOD_DAYS = 30


class RecentlyDeleted:
    """
    Deleted-but-recoverable contacts keyed by the date they were deleted.
    Buckets are never kept empty. Expired buckets are only dropped when
    purge_expired is called.
    """

    def __init__(self, retention_days: int = RETENTION_PERIOD_DAYS) -> None:
        if retention_days < 0:
            raise ValueError("Retention period must be zero or more days.")
        self._retention_days = retention_days
        self._by_date: dict[date, set[Contact]] = {}

    @property
    def retention_days(self) -> int:
        return self._retention_days

    def put(self, contact: Contact, on: date) -> None:
        """File contact under the given date, moving it out of any older bucket."""
        self._remove_everywhere(contact)
        self._by_date.setdefault(on, set()).add(contact)

    def take(self, contact: Contact) -> Contact | None:
        """Remove contact from the earliest bucket holding it and return the stored instance."""
        for day in sorted(self._by_date):
            bucket = self._by_date[day]
            if contact in bucket:
                stored = next(c for c in bucket if c == contact)
                bucket.remove(contact)
                if not bucket:
                    del self._by_date[day]
                return stored
        return None

    def forget(self, contact: Contact) -> bool:
        """Permanently discard contact. Returns False if it was not in the trash."""
        return self._remove_everywhere(contact)

    def deleted_on(self, contact: Contact) -> date | None:
        for day in sorted(self._by_date):
            if contact in self._by_date[day]:
                return day
        return None

    def purge_expired(self, today: date) -> int:
        """Drop every bucket older than the retention window. Returns contacts removed."""
        cutoff = today - timedelta(days=self._retention_days)
        expired = [day for day in self._by_date if day < cutoff]
        removed = 0
        for day in expired:
            removed += len(self._by_date.pop(day))
        return removed

    def entries(self) -> list[tuple[date, list[Contact]]]:
        return [(day, sorted(self._by_date[day])) for day in sorted(self._by_date)]

    def contacts(self) -> list[Contact]:
        return [c for _, bucket in self.entries() for c in bucket]

    def _remove_everywhere(self, contact: Contact) -> bool:
        found = False
        for day in list(self._by_date):
            bucket = self._by_date[day]
            if contact in bucket:
                bucket.remove(contact)
                found = True
                if not bucket:
                    del self._by_date[day]
        return found

    def __contains__(self, contact: object) -> bool:
        return any(contact in bucket for bucket in self._by_date.values())

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._by_date.values())
