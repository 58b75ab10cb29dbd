"""
Memory record model for Memvox.

A record is a single dictated note:
- id: unique string derived from a monotonically increasing millisecond clock
- text: free-form content (non-empty)
- category: one of the known categories
- timestamp: creation instant, set once
- priority: 1-5 (default 3)
- tags: ordered tuple of strings
- isArchived / reminderTime: optional extensions

Records are immutable. Changes go through copy_with(), which returns a new
value with the same id and timestamp. Two records with the same id are the
same logical entity.
"""

import threading
import time
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from memvox.memory.errors import MalformedStoredRecord


DEFAULT_PRIORITY = 3
MIN_PRIORITY = 1
MAX_PRIORITY = 5

PRIORITY_LABELS = {
    1: "Very Low",
    2: "Low",
    3: "Medium",
    4: "High",
    5: "Very High",
}

# Fields copy_with() refuses to touch
_IMMUTABLE_FIELDS = ("id", "timestamp")

_id_lock = threading.Lock()
_last_id_ms = 0


def generate_record_id() -> str:
    """
    Generate a unique record id from the current time in milliseconds.

    Ids are strictly increasing within a process: if the clock has not
    advanced (or went backwards) since the previous call, the last value
    is bumped by one.

    Returns:
        Decimal string id
    """
    global _last_id_ms
    with _id_lock:
        now_ms = int(time.time() * 1000)
        if now_ms <= _last_id_ms:
            now_ms = _last_id_ms + 1
        _last_id_ms = now_ms
        return str(now_ms)


def resolve_category(name: Optional[str], known_categories: Iterable[str]) -> Optional[str]:
    """
    Resolve a category name against the known set (case-insensitive, exact).

    Returns:
        The canonical spelling from known_categories, or None
    """
    if not name:
        return None
    wanted = name.strip().lower()
    for category in known_categories:
        if category.lower() == wanted:
            return category
    return None


def clamp_priority(value: Any) -> int:
    """Coerce a priority value into the 1-5 range (invalid -> default)."""
    try:
        priority = int(value)
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_PRIORITY
    return max(MIN_PRIORITY, min(MAX_PRIORITY, priority))


def _parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp. Aware values are converted to local naive time."""
    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        try:
            parsed = parsed.astimezone().replace(tzinfo=None)
        except (OverflowError, ValueError, OSError):
            return None
    return parsed


@dataclass(frozen=True, eq=False)
class MemoryRecord:
    """A stored memory note. Equality and hashing use the id only."""
    id: str
    text: str
    category: str
    timestamp: datetime
    priority: int = DEFAULT_PRIORITY
    tags: Tuple[str, ...] = field(default_factory=tuple)
    is_archived: bool = False
    reminder_time: Optional[datetime] = None

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, MemoryRecord):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"MemoryRecord(id={self.id!r}, text={self.preview(50)!r}, category={self.category!r})"

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def create(
        cls,
        text: str,
        category: Optional[str],
        known_categories: Iterable[str],
        default_category: str,
        priority: int = DEFAULT_PRIORITY,
        tags: Optional[Iterable[str]] = None,
        now: Optional[datetime] = None,
    ) -> "MemoryRecord":
        """
        Create a new record through the save pathway.

        Unknown categories fall back to default_category, so the category of a
        created record always belongs to the known set (plus the default).

        Args:
            text: Memory content (must be non-blank)
            category: Requested category (any casing)
            known_categories: Known category labels in declared order
            default_category: Fallback category
            priority: 1-5, clamped
            tags: Optional tags, order preserved
            now: Creation instant (defaults to datetime.now())

        Returns:
            New MemoryRecord

        Raises:
            ValueError: if text is blank
        """
        cleaned = (text or "").strip()
        if not cleaned:
            raise ValueError("memory text must not be empty")

        known = list(known_categories)
        resolved = resolve_category(category, known)
        if resolved is None:
            resolved = resolve_category(default_category, known) or default_category

        return cls(
            id=generate_record_id(),
            text=cleaned,
            category=resolved,
            timestamp=now or datetime.now(),
            priority=clamp_priority(priority),
            tags=tuple(tags or ()),
        )

    def copy_with(self, **changes: Any) -> "MemoryRecord":
        """
        Return a new record with the given fields replaced.

        Raises:
            ValueError: when trying to change id or timestamp
        """
        for name in _IMMUTABLE_FIELDS:
            if name in changes and changes[name] != getattr(self, name):
                raise ValueError(f"{name} cannot be changed after creation")
        if "tags" in changes:
            changes["tags"] = tuple(changes["tags"] or ())
        if "priority" in changes:
            changes["priority"] = clamp_priority(changes["priority"])
        return replace(self, **changes)

    def archive(self) -> "MemoryRecord":
        """Return an archived copy of this record."""
        return self.copy_with(is_archived=True)

    # =========================================================================
    # Queries
    # =========================================================================

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match against text, category or any tag."""
        needle = (query or "").lower()
        if not needle:
            return True
        if needle in self.text.lower() or needle in self.category.lower():
            return True
        return any(needle in tag.lower() for tag in self.tags)

    def is_in_category(self, name: str) -> bool:
        return self.category.lower() == (name or "").lower()

    @property
    def priority_label(self) -> str:
        return PRIORITY_LABELS.get(self.priority, "Medium")

    def preview(self, max_length: int = 100) -> str:
        """Text shortened to max_length characters with a trailing ellipsis."""
        if len(self.text) <= max_length:
            return self.text
        return f"{self.text[:max_length]}..."

    def relative_age(self, now: Optional[datetime] = None) -> str:
        """Short age label: '3d ago', '2h ago', '5m ago' or 'Just now'."""
        delta = (now or datetime.now()) - self.timestamp
        seconds = int(delta.total_seconds())
        if delta.days > 0:
            return f"{delta.days}d ago"
        if seconds >= 3600:
            return f"{seconds // 3600}h ago"
        if seconds >= 60:
            return f"{seconds // 60}m ago"
        return "Just now"

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> Dict[str, Any]:
        """Flat JSON-ready dict. Timestamps are ISO-8601 strings."""
        return {
            "id": self.id,
            "text": self.text,
            "category": self.category,
            "timestamp": self.timestamp.isoformat(),
            "priority": self.priority,
            "tags": list(self.tags),
            "isArchived": self.is_archived,
            "reminderTime": self.reminder_time.isoformat() if self.reminder_time else None,
        }

    @classmethod
    def from_dict(cls, data: Any, default_category: str = "Personal") -> "MemoryRecord":
        """
        Decode a stored entry.

        Missing optional fields take their defaults. A missing category falls
        back to default_category.

        Raises:
            MalformedStoredRecord: entry is not a dict, has no id/text, or has
                an unparseable timestamp
        """
        if not isinstance(data, dict):
            raise MalformedStoredRecord(f"expected object, got {type(data).__name__}")

        record_id = data.get("id")
        text = data.get("text")
        if not isinstance(record_id, (str, int)) or str(record_id).strip() == "":
            raise MalformedStoredRecord("missing id")
        if not isinstance(text, str) or not text.strip():
            raise MalformedStoredRecord(f"record {record_id}: missing text")

        timestamp = _parse_timestamp(data.get("timestamp"))
        if timestamp is None:
            raise MalformedStoredRecord(f"record {record_id}: bad timestamp {data.get('timestamp')!r}")

        tags = data.get("tags") or []
        if not isinstance(tags, list):
            raise MalformedStoredRecord(f"record {record_id}: tags must be a list")

        category = data.get("category")
        if not isinstance(category, str) or not category.strip():
            category = default_category

        return cls(
            id=str(record_id),
            text=text,
            category=category,
            timestamp=timestamp,
            priority=clamp_priority(data.get("priority", DEFAULT_PRIORITY)),
            tags=tuple(str(t) for t in tags),
            is_archived=bool(data.get("isArchived", False)),
            reminder_time=_parse_timestamp(data.get("reminderTime")),
        )


def records_to_dicts(records: Iterable[MemoryRecord]) -> List[Dict[str, Any]]:
    """Serialize a sequence of records, preserving order."""
    return [record.to_dict() for record in records]

