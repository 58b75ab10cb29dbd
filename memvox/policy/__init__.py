"""memvox.policy

Confirmation policy for destructive memory commands.

HARD RULES:
- All decisions are deterministic (regex only)
- Destructive actions never execute without an explicit "yes"
"""

from memvox.policy.pending_confirmation import (
    PendingConfirmation,
    resolve_confirmation,
    is_yes,
    is_no,
    CONFIRMATION_TIMEOUT_SEC,
)

__all__ = [
    "PendingConfirmation",
    "resolve_confirmation",
    "is_yes",
    "is_no",
    "CONFIRMATION_TIMEOUT_SEC",
]
