"""
Action Executor for Memvox.

Applies interpreted Actions to the RecordStore. This is the only place where
records are created, removed or cleared.

Rules:
- Every mutation runs inside store.mutation(), so at most one
  read-modify-persist sequence is in flight.
- Every mutation is followed by a save through the storage collaborator.
  A failed save is logged; the in-memory store stays authoritative.
- DELETE_ALL only clears when the caller passes confirmed=True. The executor
  never prompts.
- execute() never raises. Unexpected errors become a spoken apology.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, List, Optional, Protocol, Sequence, Tuple

from memvox.core.config import Config
from memvox.core.logger import get_logger
from memvox.core.state import SessionContext
from memvox.memory import feedback
from memvox.memory.errors import ErrorKind
from memvox.memory.export import ExportRequest, build_export_request
from memvox.memory.interpreter import HELP_TEXT, Action, ActionType
from memvox.memory.record import MemoryRecord, resolve_category
from memvox.memory.store import RecordStore
from memvox.memory.summary import MemoryInsights, analyze


class Storage(Protocol):
    """Persistence collaborator."""

    def load(self) -> List[MemoryRecord]: ...

    def save(self, records: Sequence[MemoryRecord]) -> bool: ...


class DisplayDirective(Enum):
    """What the UI should show after a command."""
    SHOW_LIST = "show_list"
    SHOW_ANALYTICS = "show_analytics"
    SHOW_HELP = "show_help"
    NONE = "none"


@dataclass
class ExecutionResult:
    """Outcome of one executed action."""
    action: Action
    spoken_text: str
    session: SessionContext
    directive: DisplayDirective = DisplayDirective.NONE
    title: Optional[str] = None
    records: Tuple[MemoryRecord, ...] = field(default_factory=tuple)
    mutated: bool = False
    persisted: Optional[bool] = None  # None when nothing needed saving
    error: Optional[ErrorKind] = None
    insights: Optional[MemoryInsights] = None
    export_request: Optional[ExportRequest] = None
    help_text: Optional[str] = None


class ActionExecutor:
    """Executes Actions against a RecordStore and a storage collaborator."""

    def __init__(
        self,
        store: RecordStore,
        storage: Storage,
        known_categories: Sequence[str],
        default_category: str = "Personal",
    ):
        """
        Args:
            store: The record store (owned by this executor)
            storage: Collaborator with load()/save(records)
            known_categories: Known categories in declared order
            default_category: Fallback category for saves
        """
        self.store = store
        self.storage = storage
        self.known_categories = list(known_categories)
        self.default_category = default_category
        self._handlers: Dict[ActionType, Callable[..., ExecutionResult]] = {
            ActionType.SAVE: self._save,
            ActionType.EXTRACTION_FAILED: self._extraction_failed,
            ActionType.LIST_ALL: self._list_all,
            ActionType.LIST_BY_CATEGORY: self._list_by_category,
            ActionType.DELETE_LAST: self._delete_last,
            ActionType.DELETE_ALL: self._delete_all,
            ActionType.SHOW_TODAY: self._show_today,
            ActionType.HELP: self._help,
            ActionType.SET_CATEGORY: self._set_category,
            ActionType.REPEAT: self._repeat,
            ActionType.SHOW_ANALYTICS: self._show_analytics,
            ActionType.EXPORT: self._export,
        }

    # =========================================================================
    # Persistence
    # =========================================================================

    def load(self) -> int:
        """
        Replace the store contents with what storage holds.

        Returns:
            Number of records loaded
        """
        logger = get_logger()
        try:
            records = self.storage.load()
        except Exception as e:
            logger.error(f"[EXECUTE] Storage load failed, starting empty: {e}")
            records = []
        self.store.replace_all(records)
        return len(records)

    def _persist(self) -> bool:
        logger = get_logger()
        try:
            ok = bool(self.storage.save(self.store.snapshot()))
        except Exception as e:
            logger.error(f"[EXECUTE] Persistence failure: {e}")
            return False
        if not ok:
            logger.warning("[EXECUTE] Persistence failure; keeping in-memory state")
        return ok

    # =========================================================================
    # Entry point
    # =========================================================================

    def execute(
        self,
        action: Action,
        session: SessionContext,
        confirmed: bool = False,
        now: Optional[datetime] = None,
    ) -> ExecutionResult:
        """
        Apply an action.

        Args:
            action: Interpreted action
            session: Caller-owned session values
            confirmed: Pre-confirmed flag for actions that require confirmation
            now: Clock for record creation and date filters (defaults to now)

        Returns:
            ExecutionResult (never raises)
        """
        logger = get_logger()
        now = now or datetime.now()
        handler = self._handlers.get(action.action_type)
        if handler is None:
            logger.error(f"[EXECUTE] No handler for {action.action_type}")
            return ExecutionResult(action=action, spoken_text=feedback.GENERIC_ERROR, session=session)

        try:
            result = handler(action, session, confirmed, now)
        except Exception as e:
            logger.error(f"[EXECUTE] {action.action_type.value} failed: {e}")
            return ExecutionResult(action=action, spoken_text=feedback.GENERIC_ERROR, session=session)

        logger.debug(
            f"[EXECUTE] {action.action_type.value} mutated={result.mutated} "
            f"persisted={result.persisted} error={result.error.value if result.error else None}"
        )
        return result

    # =========================================================================
    # Mutating handlers
    # =========================================================================

    def _save(self, action, session, confirmed, now) -> ExecutionResult:
        text = (action.text or "").strip()
        if not text:
            return self._extraction_failed(action, session, confirmed, now)

        category = (
            resolve_category(action.category, self.known_categories)
            or resolve_category(session.current_category, self.known_categories)
            or self.default_category
        )
        record = MemoryRecord.create(
            text=text,
            category=category,
            known_categories=self.known_categories,
            default_category=self.default_category,
            now=now,
        )
        with self.store.mutation():
            self.store.insert_front(record)
            persisted = self._persist()

        get_logger().info(f"[EXECUTE] Saved memory {record.id} in {record.category}")
        return ExecutionResult(
            action=action,
            spoken_text=feedback.saved(record.category, record.text),
            session=session.with_last_text(record.text),
            records=(record,),
            mutated=True,
            persisted=persisted,
            error=None if persisted else ErrorKind.PERSISTENCE_FAILURE,
        )

    def _delete_last(self, action, session, confirmed, now) -> ExecutionResult:
        with self.store.mutation():
            removed = self.store.remove_front()
            if removed is None:
                return ExecutionResult(
                    action=action,
                    spoken_text=feedback.NOTHING_TO_DELETE,
                    session=session,
                    error=ErrorKind.EMPTY_STORE,
                )
            persisted = self._persist()

        return ExecutionResult(
            action=action,
            spoken_text=feedback.deleted(removed),
            session=session,
            records=(removed,),
            mutated=True,
            persisted=persisted,
            error=None if persisted else ErrorKind.PERSISTENCE_FAILURE,
        )

    def _delete_all(self, action, session, confirmed, now) -> ExecutionResult:
        with self.store.mutation():
            if len(self.store) == 0:
                return ExecutionResult(
                    action=action,
                    spoken_text=feedback.NOTHING_TO_DELETE,
                    session=session,
                    error=ErrorKind.EMPTY_STORE,
                )
            if not confirmed:
                get_logger().info("[EXECUTE] Delete all not confirmed; store unchanged")
                return ExecutionResult(
                    action=action,
                    spoken_text=feedback.DELETE_ALL_CANCELLED,
                    session=session,
                )
            removed = self.store.clear()
            persisted = self._persist()

        get_logger().info(f"[EXECUTE] Deleted all {removed} memories")
        return ExecutionResult(
            action=action,
            spoken_text=feedback.ALL_DELETED,
            session=session,
            mutated=True,
            persisted=persisted,
            error=None if persisted else ErrorKind.PERSISTENCE_FAILURE,
        )

    # =========================================================================
    # Read-only handlers
    # =========================================================================

    def _extraction_failed(self, action, session, confirmed, now) -> ExecutionResult:
        return ExecutionResult(
            action=action,
            spoken_text=feedback.EXTRACTION_FAILED,
            session=session,
            error=ErrorKind.EXTRACTION_FAILED,
        )

    def _list_result(self, action, session, records, spoken, title) -> ExecutionResult:
        if not records:
            return ExecutionResult(
                action=action,
                spoken_text=spoken,
                session=session,
                error=ErrorKind.EMPTY_STORE,
            )
        return ExecutionResult(
            action=action,
            spoken_text=spoken,
            session=session,
            directive=DisplayDirective.SHOW_LIST,
            title=title,
            records=tuple(records),
        )

    def _list_all(self, action, session, confirmed, now) -> ExecutionResult:
        records = self.store.snapshot()
        return self._list_result(action, session, records, feedback.list_all(records), "All Memories")

    def _list_by_category(self, action, session, confirmed, now) -> ExecutionResult:
        category = resolve_category(action.category, self.known_categories)
        if category is None:
            return ExecutionResult(
                action=action,
                spoken_text=feedback.invalid_category(self.known_categories),
                session=session,
                error=ErrorKind.UNKNOWN_CATEGORY,
            )
        records = self.store.filter_by_category(category)
        return self._list_result(
            action, session, records,
            feedback.list_category(category, records),
            f"{category} Memories",
        )

    def _show_today(self, action, session, confirmed, now) -> ExecutionResult:
        records = self.store.filter_by_date_today(now)
        return self._list_result(action, session, records, feedback.list_today(records), "Today's Memories")

    def _help(self, action, session, confirmed, now) -> ExecutionResult:
        return ExecutionResult(
            action=action,
            spoken_text=feedback.HELP_SPOKEN,
            session=session,
            directive=DisplayDirective.SHOW_HELP,
            title="Voice Commands Help",
            help_text=f"{HELP_TEXT}\n\nAvailable categories: {', '.join(self.known_categories)}",
        )

    def _set_category(self, action, session, confirmed, now) -> ExecutionResult:
        category = resolve_category(action.category, self.known_categories)
        if category is None:
            return ExecutionResult(
                action=action,
                spoken_text=feedback.invalid_category(self.known_categories),
                session=session,
                error=ErrorKind.UNKNOWN_CATEGORY,
            )
        return ExecutionResult(
            action=action,
            spoken_text=feedback.category_set(category),
            session=session.with_category(category),
        )

    def _repeat(self, action, session, confirmed, now) -> ExecutionResult:
        spoken = session.last_text or feedback.NOTHING_TO_REPEAT
        return ExecutionResult(action=action, spoken_text=spoken, session=session)

    def _show_analytics(self, action, session, confirmed, now) -> ExecutionResult:
        records = self.store.snapshot()
        insights = analyze(records, now=now, keyword_limit=Config.TOP_KEYWORDS_LIMIT)
        if not records:
            return ExecutionResult(
                action=action,
                spoken_text=feedback.NOTHING_TO_ANALYZE,
                session=session,
                insights=insights,
                error=ErrorKind.EMPTY_STORE,
            )
        first = insights.insights[0] if insights.insights else ""
        return ExecutionResult(
            action=action,
            spoken_text=feedback.analytics(insights.total_count, first),
            session=session,
            directive=DisplayDirective.SHOW_ANALYTICS,
            title="Memory Insights",
            insights=insights,
        )

    def _export(self, action, session, confirmed, now) -> ExecutionResult:
        category = resolve_category(action.category, self.known_categories)
        request = build_export_request(self.store.snapshot(), category, now=now)
        if not request.records:
            return ExecutionResult(
                action=action,
                spoken_text=feedback.nothing_to_export(category),
                session=session,
                error=ErrorKind.EMPTY_STORE,
            )
        return ExecutionResult(
            action=action,
            spoken_text=feedback.export_started(request.title, len(request.records)),
            session=session,
            title=request.title,
            records=request.records,
            export_request=request,
        )
