"""
Error taxonomy for the memory core.

Every kind listed here is resolved locally with a deterministic fallback and a
spoken feedback string. The exception classes are raised and caught inside the
core only (record decoding, storage writes); callers of interpret/execute never
see them.
"""

from enum import Enum


class ErrorKind(Enum):
    """Kinds of recoverable failures the core reports on a result."""
    EXTRACTION_FAILED = "extraction_failed"
    UNKNOWN_CATEGORY = "unknown_category"
    EMPTY_STORE = "empty_store"
    PERSISTENCE_FAILURE = "persistence_failure"
    MALFORMED_STORED_RECORD = "malformed_stored_record"


class MemvoxError(Exception):
    """Base class for errors raised inside the memory core."""
    kind: ErrorKind = ErrorKind.EXTRACTION_FAILED


class MalformedStoredRecord(MemvoxError):
    """A persisted entry could not be decoded into a record."""
    kind = ErrorKind.MALFORMED_STORED_RECORD


class PersistenceFailure(MemvoxError):
    """Writing the record list to storage failed."""
    kind = ErrorKind.PERSISTENCE_FAILURE
