"""
Tests for the delete-all confirmation resolver.

Tests the deterministic yes/no/cancel pattern matching and resolution
for pending confirmations.

Run with: python -m pytest tests/test_pending_confirmation.py -v
"""

import time

import pytest

from memvox.memory.interpreter import Action, ActionType
from memvox.policy.pending_confirmation import (
    CONFIRMATION_TIMEOUT_SEC,
    PendingConfirmation,
    is_no,
    is_yes,
    normalize,
    resolve_confirmation,
)


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def delete_all():
    """A delete-all action waiting for confirmation."""
    return Action(ActionType.DELETE_ALL, requires_confirmation=True, original_input="delete all")


@pytest.fixture
def pending(delete_all):
    return PendingConfirmation.start(delete_all, "Are you sure?", now_ts=1000.0, timeout_sec=45.0)


# ============================================================================
# PATTERN MATCHING TESTS
# ============================================================================

class TestNormalize:
    """Tests for text normalization."""

    def test_normalize_lowercase(self):
        """Normalizes to lowercase."""
        assert normalize("YES") == "yes"

    def test_normalize_collapses_whitespace(self):
        """Collapses and strips whitespace."""
        assert normalize("  go   ahead ") == "go ahead"

    def test_normalize_empty(self):
        """Handles empty input."""
        assert normalize("") == ""
        assert normalize(None) == ""


class TestIsYes:
    """Tests for affirmative detection."""

    @pytest.mark.parametrize("text", [
        "yes", "Yeah", "yep", "sure", "okay", "ok", "go ahead",
        "Yes, delete them", "yes.", "do it", "Absolutely!",
    ])
    def test_yes(self, text):
        assert is_yes(text)

    @pytest.mark.parametrize("text", [
        "yesterday I went running", "no", "maybe", "", "I said yes",
    ])
    def test_not_yes(self, text):
        assert not is_yes(text)


class TestIsNo:
    """Tests for negative/cancel detection."""

    @pytest.mark.parametrize("text", [
        "no", "Nope", "nah", "cancel", "stop", "don't", "dont do that",
        "never mind", "nevermind", "No, keep them", "keep them",
    ])
    def test_no(self, text):
        assert is_no(text)

    @pytest.mark.parametrize("text", ["nothing", "notes", "yes", ""])
    def test_not_no(self, text):
        assert not is_no(text)


# ============================================================================
# RESOLUTION TESTS
# ============================================================================

class TestPendingConfirmation:
    """Tests for the PendingConfirmation value."""

    def test_start_sets_expiry(self, pending):
        assert pending.expires_ts == 1045.0
        assert pending.prompt == "Are you sure?"

    def test_default_timeout(self, delete_all):
        started = PendingConfirmation.start(delete_all, "?", now_ts=0.0)
        assert started.expires_ts == CONFIRMATION_TIMEOUT_SEC

    def test_start_uses_clock(self, delete_all):
        before = time.time()
        started = PendingConfirmation.start(delete_all, "?")
        assert started.expires_ts >= before + CONFIRMATION_TIMEOUT_SEC

    def test_is_expired(self, pending):
        assert not pending.is_expired(1045.0)
        assert pending.is_expired(1045.1)


class TestResolveConfirmation:
    """Tests for resolve_confirmation."""

    def test_none_when_no_pending(self):
        assert resolve_confirmation(None, "yes", 1000.0) == "none"

    def test_confirmed(self, pending):
        assert resolve_confirmation(pending, "yes", 1010.0) == "confirmed"

    def test_cancelled(self, pending):
        assert resolve_confirmation(pending, "no", 1010.0) == "cancelled"

    def test_ignored(self, pending):
        assert resolve_confirmation(pending, "buy milk", 1010.0) == "ignored"

    def test_empty_transcript_ignored(self, pending):
        assert resolve_confirmation(pending, "", 1010.0) == "ignored"

    def test_expired_beats_yes(self, pending):
        assert resolve_confirmation(pending, "yes", 2000.0) == "expired"
