"""
Storage collaborators for Memvox.

The on-disk format is a flat JSON list of record objects (see
MemoryRecord.to_dict). There is no schema version field.

- load() never fails: a missing file, unreadable file or non-list content
  yields an empty list, and individual malformed entries are skipped.
- save() never raises: failures are logged and reported as False.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from memvox.core.logger import get_logger
from memvox.memory.errors import MalformedStoredRecord, PersistenceFailure
from memvox.memory.record import MemoryRecord, records_to_dicts


def decode_records(entries: Any, default_category: str = "Personal") -> List[MemoryRecord]:
    """
    Decode a parsed JSON document into records, skipping malformed entries.

    Args:
        entries: Parsed JSON (expected to be a list)
        default_category: Category for entries that carry none

    Returns:
        Records in stored order
    """
    logger = get_logger()
    if not isinstance(entries, list):
        logger.warning(f"[STORAGE] Expected a list of records, got {type(entries).__name__}")
        return []

    records = []
    seen_ids = set()
    for index, entry in enumerate(entries):
        try:
            record = MemoryRecord.from_dict(entry, default_category=default_category)
        except MalformedStoredRecord as e:
            logger.warning(f"[STORAGE] Skipping malformed record #{index}: {e}")
            continue
        except Exception as e:
            logger.warning(f"[STORAGE] Skipping undecodable record #{index}: {type(e).__name__}: {e}")
            continue
        if record.id in seen_ids:
            logger.warning(f"[STORAGE] Skipping duplicate record id {record.id}")
            continue
        seen_ids.add(record.id)
        records.append(record)
    return records


class JsonFileStorage:
    """Persists the record list to a single JSON file."""

    def __init__(self, path: Union[str, Path], default_category: str = "Personal"):
        self.path = Path(path)
        self.default_category = default_category

    def load(self) -> List[MemoryRecord]:
        """
        Load records from disk.

        Returns:
            List of records (empty list if the file doesn't exist or is unreadable)
        """
        logger = get_logger()
        if not self.path.exists():
            logger.debug(f"[STORAGE] No memory file at {self.path}")
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            logger.warning(f"[STORAGE] Failed to load memories: {e}")
            return []

        records = decode_records(data, self.default_category)
        logger.info(f"[STORAGE] Loaded {len(records)} memories from {self.path}")
        return records

    def save(self, records: Sequence[MemoryRecord]) -> bool:
        """
        Save records to disk atomically (write temp file, then rename).

        Returns:
            True if save succeeded, False otherwise
        """
        logger = get_logger()
        try:
            self._write(records_to_dicts(records))
        except PersistenceFailure as e:
            logger.error(f"[STORAGE] Failed to save memories: {e}")
            return False
        logger.debug(f"[STORAGE] Saved {len(records)} memories to {self.path}")
        return True

    def _write(self, payload: List[Dict[str, Any]]) -> None:
        temp_path: Optional[str] = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_fd, temp_path = tempfile.mkstemp(
                suffix=".json",
                prefix="memories_tmp_",
                dir=str(self.path.parent),
            )
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
            os.replace(temp_path, self.path)
            temp_path = None
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceFailure(str(e)) from e
        finally:
            if temp_path is not None and os.path.exists(temp_path):
                os.unlink(temp_path)


class InMemoryStorage:
    """
    Storage that keeps the serialized payload in RAM.

    Data still goes through to_dict/from_dict, so round trips behave like the
    file storage. Set fail_saves to simulate a broken disk.
    """

    def __init__(self, entries: Optional[List[Any]] = None, default_category: str = "Personal"):
        self.entries: List[Any] = list(entries or [])
        self.default_category = default_category
        self.fail_saves = False
        self.save_count = 0

    def load(self) -> List[MemoryRecord]:
        return decode_records(json.loads(json.dumps(self.entries)), self.default_category)

    def save(self, records: Sequence[MemoryRecord]) -> bool:
        self.save_count += 1
        if self.fail_saves:
            get_logger().error("[STORAGE] Failed to save memories: simulated failure")
            return False
        self.entries = records_to_dicts(records)
        return True
