"""
Memory assistant command cycle.

One call to handle_utterance() is one voice command:
    utterance -> pending confirmation check -> interpret -> execute
              -> speak / display / export collaborators

Speech capture, TTS, screens and PDF rendering are collaborators passed in as
callables. Their failures are logged and never interrupt the cycle.
"""
import threading
import time
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from memvox.core.config import Config
from memvox.core.logger import get_logger
from memvox.core.state import SessionContext
from memvox.memory.executor import ActionExecutor, DisplayDirective, ExecutionResult, Storage
from memvox.memory.interpreter import Action, interpret
from memvox.memory.storage import JsonFileStorage
from memvox.memory.store import RecordStore
from memvox.policy.pending_confirmation import PendingConfirmation, resolve_confirmation


SpeakFn = Callable[[str], Any]
DisplayFn = Callable[[ExecutionResult], Any]
# (records, category_filter, title) -> file path
ExportFn = Callable[[Sequence[Any], Optional[str], str], Any]

EXPORT_DONE = "PDF exported successfully."
EXPORT_FAILED = "Error exporting PDF."


class MemoryAssistant:
    """Runs command cycles against a single record store."""

    def __init__(
        self,
        storage: Storage,
        speak_fn: Optional[SpeakFn] = None,
        display_fn: Optional[DisplayFn] = None,
        export_fn: Optional[ExportFn] = None,
        categories: Optional[Sequence[str]] = None,
        default_category: Optional[str] = None,
        confirmation_timeout_sec: Optional[float] = None,
    ):
        self.categories = list(categories or Config.get_categories())
        self.default_category = default_category or Config.DEFAULT_CATEGORY
        self.confirmation_timeout_sec = (
            confirmation_timeout_sec
            if confirmation_timeout_sec is not None
            else Config.CONFIRMATION_TIMEOUT_SEC
        )
        self.store = RecordStore()
        self.executor = ActionExecutor(self.store, storage, self.categories, self.default_category)
        self.session = SessionContext(current_category=self.default_category)
        self.speak_fn = speak_fn
        self.display_fn = display_fn
        self.export_fn = export_fn
        # One utterance at a time
        self._cycle_lock = threading.Lock()

    def start(self) -> int:
        """Load saved memories. Returns how many were loaded."""
        count = self.executor.load()
        get_logger().info(f"[ASSISTANT] Ready with {count} memories, category={self.session.current_category}")
        return count

    # =========================================================================
    # Command cycle
    # =========================================================================

    def handle_utterance(
        self,
        utterance: str,
        now: Optional[datetime] = None,
        now_ts: Optional[float] = None,
    ) -> ExecutionResult:
        """
        Process one recognized utterance end to end.

        Args:
            utterance: Final transcript ("" when capture failed)
            now: Clock for record timestamps and date filters
            now_ts: Epoch clock for confirmation expiry

        Returns:
            The ExecutionResult that was delivered to the collaborators
        """
        with self._cycle_lock:
            text = utterance if isinstance(utterance, str) else ""
            now_ts = time.time() if now_ts is None else now_ts

            result = self._resolve_pending(text, now, now_ts)
            if result is None:
                action, spoken = interpret(
                    text,
                    self.session.current_category,
                    self.categories,
                    self.store.snapshot(),
                )
                get_logger().info(f"[ASSISTANT] '{text[:60]}' -> {action.action_type.value}")
                if action.requires_confirmation and len(self.store) > 0:
                    result = self._ask_confirmation(action, spoken, now_ts)
                else:
                    result = self.executor.execute(action, self.session, confirmed=False, now=now)

            self.session = result.session
            return self._deliver(result)

    def _resolve_pending(self, text: str, now: Optional[datetime], now_ts: float) -> Optional[ExecutionResult]:
        """Handle a reply to an outstanding confirmation. None means: interpret normally."""
        pending = self.session.pending_confirmation
        outcome = resolve_confirmation(pending, text, now_ts)
        if outcome == "none":
            return None

        if outcome == "ignored":
            return ExecutionResult(action=pending.action, spoken_text=pending.prompt, session=self.session)

        # Clear BEFORE executing so a retry cannot run the action twice
        self.session = self.session.with_pending(None)
        if outcome == "expired":
            return None

        return self.executor.execute(
            pending.action,
            self.session,
            confirmed=(outcome == "confirmed"),
            now=now,
        )

    def _ask_confirmation(self, action: Action, prompt: str, now_ts: float) -> ExecutionResult:
        pending = PendingConfirmation.start(action, prompt, now_ts, self.confirmation_timeout_sec)
        get_logger().info("[CONFIRM] waiting for yes/no before delete all")
        return ExecutionResult(
            action=action,
            spoken_text=prompt,
            session=self.session.with_pending(pending),
        )

    # =========================================================================
    # Collaborators
    # =========================================================================

    def _deliver(self, result: ExecutionResult) -> ExecutionResult:
        logger = get_logger()

        if result.export_request is not None and self.export_fn is not None:
            request = result.export_request
            try:
                path = self.export_fn(list(request.records), request.category_filter, request.title)
                logger.info(f"[ASSISTANT] Exported {len(request.records)} memories to {path}")
                result = replace(result, spoken_text=f"{result.spoken_text} {EXPORT_DONE}")
            except Exception as e:
                logger.error(f"[ASSISTANT] Export failed: {e}")
                result = replace(result, spoken_text=EXPORT_FAILED)

        if result.directive != DisplayDirective.NONE and self.display_fn is not None:
            try:
                self.display_fn(result)
            except Exception as e:
                logger.error(f"[ASSISTANT] Display failed: {e}")

        if self.speak_fn is not None and result.spoken_text:
            try:
                self.speak_fn(result.spoken_text)
            except Exception as e:
                logger.error(f"[ASSISTANT] Speak failed: {e}")

        return result


def build_default_assistant(**kwargs: Any) -> MemoryAssistant:
    """Assistant wired to the configured JSON memory file."""
    storage = JsonFileStorage(Config.get_memory_file_path(), default_category=Config.DEFAULT_CATEGORY)
    return MemoryAssistant(storage, **kwargs)
