"""
Tests for the storage collaborators.

File storage uses pytest's tmp_path; nothing touches the real memory file.

Run with: python -m pytest tests/test_storage.py -v
"""

import json
import os
from datetime import datetime, timedelta
from unittest.mock import patch

import pytest

from memvox.core.assistant import MemoryAssistant
from memvox.memory.record import MemoryRecord
from memvox.memory.storage import InMemoryStorage, JsonFileStorage, decode_records


NOW = datetime(2024, 5, 10, 12, 0, 0)


@pytest.fixture
def records():
    return [
        MemoryRecord(id="3", text="Newest", category="Work", timestamp=NOW, priority=5, tags=("a", "b")),
        MemoryRecord(id="2", text="Middle", category="Health", timestamp=NOW - timedelta(hours=5)),
        MemoryRecord(
            id="1",
            text="Oldest",
            category="Ideas",
            timestamp=NOW - timedelta(days=3),
            is_archived=True,
            reminder_time=NOW + timedelta(days=1),
        ),
    ]


@pytest.fixture
def storage(tmp_path):
    return JsonFileStorage(tmp_path / "data" / "memories.json")


# ============================================================================
# JSON FILE STORAGE
# ============================================================================

class TestJsonFileStorage:
    """Round trips and failure handling for the JSON file."""

    def test_load_missing_file(self, storage):
        assert storage.load() == []

    def test_round_trip(self, storage, records):
        assert storage.save(records) is True
        loaded = storage.load()
        assert [r.to_dict() for r in loaded] == [r.to_dict() for r in records]
        assert loaded == records

    def test_file_is_flat_list(self, storage, records):
        storage.save(records)
        with open(storage.path, encoding="utf-8") as f:
            data = json.load(f)
        assert isinstance(data, list)
        assert data[0]["id"] == "3"
        assert data[0]["timestamp"] == "2024-05-10T12:00:00"
        assert set(data[0]) == {
            "id", "text", "category", "timestamp", "priority", "tags", "isArchived", "reminderTime",
        }

    def test_no_temp_files_left(self, storage, records):
        storage.save(records)
        leftovers = [p for p in os.listdir(storage.path.parent) if p.startswith("memories_tmp_")]
        assert leftovers == []

    def test_invalid_json_loads_empty(self, storage):
        storage.path.parent.mkdir(parents=True)
        storage.path.write_text("{not json", encoding="utf-8")
        assert storage.load() == []

    def test_non_list_loads_empty(self, storage):
        storage.path.parent.mkdir(parents=True)
        storage.path.write_text('{"id": "1"}', encoding="utf-8")
        assert storage.load() == []

    def test_malformed_entries_skipped(self, storage):
        storage.path.parent.mkdir(parents=True)
        payload = [
            {"id": "1", "text": "good", "category": "Work", "timestamp": "2024-01-01T10:00:00"},
            {"id": "2", "text": "bad time", "timestamp": "nope"},
            "garbage",
            {"id": "3", "text": "also good", "timestamp": "2024-01-02T10:00:00"},
        ]
        storage.path.write_text(json.dumps(payload), encoding="utf-8")
        loaded = storage.load()
        assert [r.id for r in loaded] == ["1", "3"]
        assert loaded[1].category == "Personal"

    def test_out_of_range_values_skipped_or_defaulted(self, storage):
        storage.path.parent.mkdir(parents=True)
        storage.path.write_text(
            '[{"id": "1", "text": "good", "timestamp": "2024-01-01T10:00:00"},'
            ' {"id": "2", "text": "huge priority", "timestamp": "2024-01-01T10:00:00", "priority": 1e400},'
            ' {"id": "3", "text": "infinite priority", "timestamp": "2024-01-01T10:00:00", "priority": Infinity},'
            ' {"id": "4", "text": "edge of time", "timestamp": "0001-01-01T00:00:00+14:00"}]',
            encoding="utf-8",
        )
        loaded = storage.load()
        assert [r.id for r in loaded] == ["1", "2", "3"]
        assert loaded[1].priority == 3
        assert loaded[2].priority == 3

    def test_bad_entry_does_not_wipe_file(self, storage):
        storage.path.parent.mkdir(parents=True)
        storage.path.write_text(
            '[{"id": "1", "text": "good", "timestamp": "2024-01-01T10:00:00"},'
            ' {"id": "2", "text": "edge of time", "timestamp": "0001-01-01T00:00:00+14:00"}]',
            encoding="utf-8",
        )
        assistant = MemoryAssistant(storage, categories=["Personal", "Work"], default_category="Personal")
        assert assistant.start() == 1
        assistant.handle_utterance("call mom")
        assert [r.text for r in storage.load()] == ["call mom", "good"]

    def test_save_failure_returns_false(self, storage, records):
        with patch("memvox.memory.storage.os.replace", side_effect=OSError("disk full")):
            assert storage.save(records) is False
        assert storage.load() == []
        leftovers = [p for p in os.listdir(storage.path.parent) if p.startswith("memories_tmp_")]
        assert leftovers == []

    def test_save_overwrites(self, storage, records):
        storage.save(records)
        storage.save(records[:1])
        assert [r.id for r in storage.load()] == ["3"]


# ============================================================================
# DECODING
# ============================================================================

class TestDecodeRecords:
    """Tests for decode_records."""

    def test_duplicate_ids_keep_first(self):
        payload = [
            {"id": "1", "text": "first", "timestamp": "2024-01-01T10:00:00"},
            {"id": "1", "text": "second", "timestamp": "2024-01-01T11:00:00"},
        ]
        loaded = decode_records(payload)
        assert len(loaded) == 1
        assert loaded[0].text == "first"

    def test_non_list(self):
        assert decode_records({"id": "1"}) == []
        assert decode_records(None) == []

    def test_default_category(self):
        loaded = decode_records([{"id": "1", "text": "x", "timestamp": "2024-01-01T10:00:00"}], "General")
        assert loaded[0].category == "General"


# ============================================================================
# IN-MEMORY STORAGE
# ============================================================================

class TestInMemoryStorage:
    """The RAM storage goes through the same codec."""

    def test_round_trip(self, records):
        storage = InMemoryStorage()
        assert storage.save(records) is True
        assert [r.to_dict() for r in storage.load()] == [r.to_dict() for r in records]

    def test_simulated_failure(self, records):
        storage = InMemoryStorage()
        storage.fail_saves = True
        assert storage.save(records) is False
        assert storage.load() == []
        assert storage.save_count == 1
