"""
Record Store for Memvox.

Ordered, newest-first collection of MemoryRecord values. New records go to
index 0. The store is owned by the ActionExecutor; the interpreter only ever
sees snapshot() tuples.

Thread safety: all access goes through an RLock. mutation() holds the lock for
a whole read-modify-persist sequence so overlapping commands cannot interleave.
"""

from contextlib import contextmanager
from datetime import datetime, timedelta
from threading import RLock
from typing import Iterable, Iterator, List, Optional, Tuple

from memvox.memory.record import MemoryRecord


class RecordStore:
    """In-memory, newest-first list of records."""

    def __init__(self, records: Optional[Iterable[MemoryRecord]] = None):
        self._lock = RLock()
        self._records: List[MemoryRecord] = list(records or [])

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __iter__(self) -> Iterator[MemoryRecord]:
        return iter(self.snapshot())

    @contextmanager
    def mutation(self) -> Iterator["RecordStore"]:
        """Hold the store lock for a read-modify-persist sequence."""
        with self._lock:
            yield self

    # =========================================================================
    # Mutations
    # =========================================================================

    def insert_front(self, record: MemoryRecord) -> None:
        """Insert a record at index 0. A record with the same id is replaced."""
        with self._lock:
            self._records = [r for r in self._records if r.id != record.id]
            self._records.insert(0, record)

    def remove_front(self) -> Optional[MemoryRecord]:
        """Remove and return the newest record, or None if empty."""
        with self._lock:
            if not self._records:
                return None
            return self._records.pop(0)

    def clear(self) -> int:
        """Remove all records. Returns how many were removed."""
        with self._lock:
            count = len(self._records)
            self._records = []
            return count

    def replace_all(self, records: Iterable[MemoryRecord]) -> None:
        """Bulk replacement (used when loading from storage)."""
        with self._lock:
            self._records = list(records)

    def replace(self, record: MemoryRecord) -> bool:
        """
        Swap in a new value for the record with the same id, keeping its position.

        Returns:
            True if a record was replaced
        """
        with self._lock:
            for index, existing in enumerate(self._records):
                if existing.id == record.id:
                    self._records[index] = record
                    return True
            return False

    # =========================================================================
    # Queries
    # =========================================================================

    def snapshot(self) -> Tuple[MemoryRecord, ...]:
        with self._lock:
            return tuple(self._records)

    def get(self, record_id: str) -> Optional[MemoryRecord]:
        with self._lock:
            for record in self._records:
                if record.id == record_id:
                    return record
            return None

    def filter_by_category(self, name: str) -> List[MemoryRecord]:
        """Records whose category equals name (case-insensitive)."""
        return [r for r in self.snapshot() if r.is_in_category(name)]

    def filter_by_date_today(self, now: Optional[datetime] = None) -> List[MemoryRecord]:
        """Records created on the same calendar day as now."""
        today = (now or datetime.now()).date()
        return [r for r in self.snapshot() if r.timestamp.date() == today]

    def search(self, query: str) -> List[MemoryRecord]:
        """
        Case-insensitive substring search over text, category and tags.
        An empty query matches everything.
        """
        return [r for r in self.snapshot() if r.matches(query)]

    def recent(self, days: int, now: Optional[datetime] = None) -> List[MemoryRecord]:
        """Records no older than the given number of days."""
        cutoff = (now or datetime.now()) - timedelta(days=days)
        return [r for r in self.snapshot() if r.timestamp >= cutoff]

    def categories_in_use(self) -> List[str]:
        """Sorted distinct categories present in the store."""
        return sorted({r.category for r in self.snapshot()})
