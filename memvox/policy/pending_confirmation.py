"""
Pending Confirmation Resolver for destructive memory commands.

"Delete all" never runs straight from the interpreter. The assistant stores a
PendingConfirmation and asks the user; the next utterance is resolved here
before any other interpretation.

HARD RULES:
- Regex/string only for yes/no/cancel
- Must confirm/cancel/expire deterministically
- The caller clears pending BEFORE executing to prevent double-run

Usage:
    from memvox.policy.pending_confirmation import resolve_confirmation

    result = resolve_confirmation(pending, transcript, now_ts)
    if result == "confirmed":
        # Execute the pending action with confirmed=True
    elif result == "cancelled":
        # User said no
    elif result == "expired":
        # Confirmation timed out, treat transcript as a new command
    elif result == "ignored":
        # User said something other than yes/no, re-ask
    elif result == "none":
        # No pending confirmation - continue normal flow
"""

import re
import time
from dataclasses import dataclass
from typing import Literal, Optional

from memvox.core.logger import get_logger

# ============================================================================
# YES/NO PATTERNS (compiled regexes)
# ============================================================================
# These patterns match if the response STARTS with a confirmation word
# to handle natural replies like "Yes, do it" or "No, don't do that"

YES_PATTERN = re.compile(
    r"^(?:yes|yeah|yep|yup|do\s+it|proceed|confirm|go\s+ahead|sure|ok|okay|absolutely|affirmative)(?:\b|$|[.,!?\s])",
    re.IGNORECASE
)

NO_PATTERN = re.compile(
    r"^(?:no|nope|nah|cancel|stop|don'?t|do\s+not|nevermind|never\s+mind|abort|negative|keep\s+them)(?:\b|$|[.,!?\s])",
    re.IGNORECASE
)

# Confirmation timeout (seconds) - used when setting new pending confirmations
CONFIRMATION_TIMEOUT_SEC = 45.0


@dataclass(frozen=True)
class PendingConfirmation:
    """A destructive action waiting for a yes/no reply."""
    action: object
    prompt: str
    expires_ts: float

    @classmethod
    def start(cls, action: object, prompt: str, now_ts: Optional[float] = None,
              timeout_sec: float = CONFIRMATION_TIMEOUT_SEC) -> "PendingConfirmation":
        now_ts = time.time() if now_ts is None else now_ts
        return cls(action=action, prompt=prompt, expires_ts=now_ts + timeout_sec)

    def is_expired(self, now_ts: Optional[float] = None) -> bool:
        now_ts = time.time() if now_ts is None else now_ts
        return now_ts > self.expires_ts


def normalize(text: str) -> str:
    """
    Normalize text for pattern matching.

    - Lowercase
    - Strip leading/trailing whitespace
    - Collapse multiple whitespace to single space

    Args:
        text: Text to normalize

    Returns:
        Normalized text
    """
    if not text:
        return ""

    normalized = text.lower().strip()
    normalized = re.sub(r"\s+", " ", normalized)
    return normalized


def is_yes(text: str) -> bool:
    """
    Check if text is an affirmative response.

    Args:
        text: User's response text

    Returns:
        True if text matches yes pattern
    """
    return bool(YES_PATTERN.match(normalize(text)))


def is_no(text: str) -> bool:
    """
    Check if text is a negative/cancel response.

    Args:
        text: User's response text

    Returns:
        True if text matches no pattern
    """
    return bool(NO_PATTERN.match(normalize(text)))


# Type alias for resolve_confirmation return values
ResolveResult = Literal["confirmed", "cancelled", "expired", "ignored", "none"]


def resolve_confirmation(
    pending: Optional[PendingConfirmation],
    transcript: str,
    now_ts: Optional[float] = None,
) -> ResolveResult:
    """
    Resolve a pending confirmation based on the user's reply.

    Behavior:
    - No pending -> "none"
    - Pending but expired -> "expired"
    - is_yes(transcript) -> "confirmed"
    - is_no(transcript) -> "cancelled"
    - Else -> "ignored"

    Args:
        pending: Current pending confirmation (or None)
        transcript: User's input text
        now_ts: Current timestamp (defaults to time.time())

    Returns:
        One of: "confirmed", "cancelled", "expired", "ignored", "none"
    """
    logger = get_logger()

    if pending is None:
        return "none"

    if pending.is_expired(now_ts):
        logger.info("[CONFIRM] expired -> cleared")
        return "expired"

    if is_yes(transcript):
        logger.info("[CONFIRM] received reply=\"yes\"")
        return "confirmed"

    if is_no(transcript):
        logger.info("[CONFIRM] received reply=\"no\" -> cancelled")
        return "cancelled"

    logger.debug(f"[CONFIRM] ignored - transcript not yes/no: '{(transcript or '')[:50]}'")
    return "ignored"
