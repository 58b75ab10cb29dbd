"""
Export selection for Memvox.

The core never renders documents. It decides which records go into an export,
in what order, under what title and suggested file name, and hands an
ExportRequest to the export collaborator.
"""

from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from memvox.memory.record import MemoryRecord


@dataclass(frozen=True)
class ExportRequest:
    """What to export. Records are newest-first."""
    records: Tuple[MemoryRecord, ...]
    category_filter: Optional[str]
    title: str
    file_name: str

    def grouped_by_date(self) -> "OrderedDict[str, List[MemoryRecord]]":
        return group_by_date(self.records)


def export_title(category_filter: Optional[str]) -> str:
    return f"{category_filter} Memories" if category_filter else "All Memories"


def export_file_name(category_filter: Optional[str], now: Optional[datetime] = None) -> str:
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return f"memories_{category_filter or 'all'}_{stamp}.pdf"


def build_export_request(
    records: Iterable[MemoryRecord],
    category_filter: Optional[str] = None,
    now: Optional[datetime] = None,
) -> ExportRequest:
    """
    Select and order records for export.

    Args:
        records: All records
        category_filter: Optional category (case-insensitive)
        now: Clock used for the file name

    Returns:
        ExportRequest with newest-first records
    """
    selected = [
        r for r in records
        if category_filter is None or r.is_in_category(category_filter)
    ]
    selected.sort(key=lambda r: r.timestamp, reverse=True)
    return ExportRequest(
        records=tuple(selected),
        category_filter=category_filter,
        title=export_title(category_filter),
        file_name=export_file_name(category_filter, now),
    )


def group_by_date(records: Iterable[MemoryRecord]) -> "OrderedDict[str, List[MemoryRecord]]":
    """Group records under YYYY-MM-DD keys, keeping input order."""
    groups: "OrderedDict[str, List[MemoryRecord]]" = OrderedDict()
    for record in records:
        groups.setdefault(record.timestamp.strftime("%Y-%m-%d"), []).append(record)
    return groups

