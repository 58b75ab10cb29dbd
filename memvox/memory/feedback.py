"""
Spoken feedback phrases.

Shared by the interpreter (which predicts the outcome from a snapshot) and the
executor (which reports what actually happened), so both speak the same way.
"""

from typing import Iterable, Optional, Sequence

from memvox.core.config import Config
from memvox.memory.record import MemoryRecord

PREVIEW_COUNT = Config.SUMMARY_PREVIEW_COUNT

NOTHING_SAVED = "You don't have any memories saved yet."
NOTHING_TODAY = "You haven't saved any memories today yet."
NOTHING_TO_DELETE = "No memories to delete."
NOTHING_TO_REPEAT = "There's nothing to repeat."
NOTHING_TO_ANALYZE = "You don't have any memories to analyze yet."
EXTRACTION_FAILED = "I couldn't understand what you want to save. Please try again."
NOTHING_HEARD = "I didn't catch anything to save. Please try again."
ALL_DELETED = "All memories have been deleted."
DELETE_ALL_PROMPT = (
    "Are you sure you want to delete all memories? This cannot be undone. "
    "Say yes to confirm or no to cancel."
)
DELETE_ALL_CANCELLED = "Okay, cancelled. Your memories were not deleted."
GENERIC_ERROR = "Sorry, I encountered an error processing your command."
HELP_SPOKEN = (
    "I can help you save and retrieve memories, show analytics, and export to PDF "
    "using voice commands. Check the help screen for detailed instructions."
)


def enumerate_records(prefix: str, records: Sequence[MemoryRecord], limit: int = PREVIEW_COUNT) -> str:
    """
    Prefix followed by the first `limit` texts verbatim and a remainder count.

    Example: "Here are your Work memories: 1. Call Bob. 2. Send report. And 4 more memories."
    """
    parts = [prefix]
    for index, record in enumerate(records[:limit], start=1):
        parts.append(f"{index}. {record.text.rstrip('.!?')}.")
    remaining = len(records) - limit
    if remaining > 0:
        parts.append(f"And {remaining} more memories.")
    return " ".join(parts)


def saved(category: str, text: str) -> str:
    return f"Memory saved in {category} category: {text}"


def list_all(records: Sequence[MemoryRecord]) -> str:
    if not records:
        return NOTHING_SAVED
    return enumerate_records(f"You have {len(records)} memories. Here are the latest:", records)


def list_category(category: str, records: Sequence[MemoryRecord]) -> str:
    if not records:
        return f"No memories found in {category} category."
    return enumerate_records(f"Here are your {category} memories:", records)


def list_today(records: Sequence[MemoryRecord]) -> str:
    if not records:
        return NOTHING_TODAY
    return enumerate_records(f"Today you saved {len(records)} memories:", records)


def invalid_category(known_categories: Iterable[str]) -> str:
    return f"Please specify a valid category: {', '.join(known_categories)}"


def deleted(record: MemoryRecord) -> str:
    return f"Deleted memory: {record.text}"


def category_set(category: str) -> str:
    return f"Category set to {category}"


def export_started(title: str, count: int) -> str:
    return f"Exporting {count} memories as {title} to PDF."


def nothing_to_export(category: Optional[str] = None) -> str:
    if category:
        return f"There are no {category} memories to export."
    return "There are no memories to export."


def analytics(total: int, first_insight: str = "") -> str:
    spoken = f"Here are the insights for your {total} memories."
    if first_insight:
        spoken = f"{spoken} {first_insight}"
    return spoken
