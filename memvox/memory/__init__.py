"""
Memvox Memory Core

Voice-command interpreter plus the record store it operates on:
1. interpret(): utterance -> (Action, spoken feedback), pure and never raising
2. ActionExecutor: applies an Action to the RecordStore and persists it
3. analyze(): keyword, mood and time-bucket aggregates for the analytics view

Records are immutable; the store is newest-first.
"""

from memvox.memory.record import MemoryRecord, generate_record_id
from memvox.memory.store import RecordStore
from memvox.memory.storage import JsonFileStorage, InMemoryStorage
from memvox.memory.interpreter import (
    Action,
    ActionType,
    PATTERN_GROUPS,
    interpret,
    extract_category,
)
from memvox.memory.executor import (
    ActionExecutor,
    DisplayDirective,
    ExecutionResult,
)
from memvox.memory.summary import MemoryInsights, analyze
from memvox.memory.export import ExportRequest, build_export_request
from memvox.memory.errors import ErrorKind

__all__ = [
    "MemoryRecord",
    "generate_record_id",
    "RecordStore",
    "JsonFileStorage",
    "InMemoryStorage",
    "Action",
    "ActionType",
    "PATTERN_GROUPS",
    "interpret",
    "extract_category",
    "ActionExecutor",
    "DisplayDirective",
    "ExecutionResult",
    "MemoryInsights",
    "analyze",
    "ExportRequest",
    "build_export_request",
    "ErrorKind",
]
