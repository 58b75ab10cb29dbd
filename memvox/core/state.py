"""
Session state for Memvox.

The command core is stateless apart from the RecordStore. Everything a screen
would otherwise keep in globals (current category, last saved text, a pending
delete confirmation) lives in a SessionContext value that the caller owns and
threads through interpret/execute. Updates return new values.
"""
from dataclasses import dataclass, replace
from typing import Optional

from memvox.policy.pending_confirmation import PendingConfirmation


@dataclass(frozen=True)
class SessionContext:
    """Per-session values threaded through each command cycle"""
    current_category: str = "Personal"
    last_text: str = ""
    pending_confirmation: Optional[PendingConfirmation] = None

    def with_category(self, category: str) -> "SessionContext":
        """Switch the default category for new memories"""
        return replace(self, current_category=category)

    def with_last_text(self, text: str) -> "SessionContext":
        """Remember the last saved memory text (for "repeat that")"""
        return replace(self, last_text=text)

    def with_pending(self, pending: Optional[PendingConfirmation]) -> "SessionContext":
        """Set or clear the pending confirmation"""
        return replace(self, pending_confirmation=pending)

    def has_pending(self) -> bool:
        return self.pending_confirmation is not None
