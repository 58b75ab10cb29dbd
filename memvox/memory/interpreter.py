"""
Voice Command Interpreter for Memvox.

Maps a recognized utterance to exactly one Action plus a spoken feedback line:
- "X save this as shopping" / "save as work X"    -> SAVE with category
- "show memories" / "list memories"                -> LIST_ALL
- "show my work memories"                          -> LIST_BY_CATEGORY
- "delete last" / "remove last"                    -> DELETE_LAST
- "delete all" / "clear all"                       -> DELETE_ALL (needs confirmation)
- "what did I do today" / "daily summary"          -> SHOW_TODAY
- "help" / "what can you do"                       -> HELP
- "set category to work"                           -> SET_CATEGORY
- "repeat that"                                    -> REPEAT
- "show analytics" / "show insights"               -> SHOW_ANALYTICS
- "export to pdf" / "export work pdf"              -> EXPORT
- anything else                                    -> SAVE (whole utterance, default category)

IMPORTANT:
- Matching is case-insensitive substring matching over PATTERN_GROUPS,
  evaluated top to bottom. The first matching group wins; there is no scoring.
- interpret() never raises. Any input, including "" and whitespace, yields an
  Action. Unexpected internal errors fall back to a plain SAVE.
- The interpreter only reads the store snapshot. It never mutates anything.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Optional, Sequence, Tuple

from memvox.core.logger import get_logger
from memvox.memory import feedback
from memvox.memory.errors import ErrorKind
from memvox.memory.record import MemoryRecord, resolve_category
from memvox.memory.summary import analyze
from memvox.memory.export import build_export_request


class ActionType(Enum):
    """Types of actions the interpreter can produce."""
    SAVE = "save"
    LIST_ALL = "list_all"
    LIST_BY_CATEGORY = "list_by_category"
    DELETE_LAST = "delete_last"
    DELETE_ALL = "delete_all"
    SHOW_TODAY = "show_today"
    HELP = "help"
    SET_CATEGORY = "set_category"
    REPEAT = "repeat"
    SHOW_ANALYTICS = "show_analytics"
    EXPORT = "export"
    EXTRACTION_FAILED = "extraction_failed"  # clarification only, never mutates


@dataclass(frozen=True)
class Action:
    """Interpreted command."""
    action_type: ActionType
    text: str = ""  # Memory text for SAVE, empty otherwise
    category: Optional[str] = None  # Target/filter category, None when absent or unresolved
    requires_confirmation: bool = False
    original_input: str = ""
    error: Optional[ErrorKind] = None


@dataclass(frozen=True)
class PatternGroup:
    """
    One row of the precedence table.

    rule="any": at least one phrase must appear.
    rule="all": every phrase must appear.
    """
    name: str
    action_type: ActionType
    phrases: Tuple[str, ...]
    rule: str = "any"

    def matches(self, text_lower: str) -> bool:
        if self.rule == "all":
            return all(phrase in text_lower for phrase in self.phrases)
        return any(phrase in text_lower for phrase in self.phrases)


# Precedence order, highest first. The first matching row wins.
PATTERN_GROUPS: Tuple[PatternGroup, ...] = (
    PatternGroup("save_with_category", ActionType.SAVE, ("save this as", "save as")),
    PatternGroup("list_all", ActionType.LIST_ALL, ("show memories", "list memories", "show memory")),
    PatternGroup("list_by_category", ActionType.LIST_BY_CATEGORY, ("show my", "memories"), rule="all"),
    PatternGroup("delete_last", ActionType.DELETE_LAST, ("delete last", "remove last")),
    PatternGroup("delete_all", ActionType.DELETE_ALL, ("delete all", "clear all")),
    PatternGroup("show_today", ActionType.SHOW_TODAY, ("what did i do today", "today's memories", "daily summary")),
    PatternGroup("help", ActionType.HELP, ("help", "what can you do")),
    PatternGroup("set_category", ActionType.SET_CATEGORY, ("set category",)),
    PatternGroup("repeat", ActionType.REPEAT, ("repeat that", "repeat")),
    PatternGroup("show_analytics", ActionType.SHOW_ANALYTICS, ("show analytics", "show insights", "show summary")),
    PatternGroup("export", ActionType.EXPORT, ("export to pdf", "export pdf", "generate pdf")),
    PatternGroup("export_words", ActionType.EXPORT, ("export", "pdf"), rule="all"),
)

# "save this as" is checked first: "save as" is not a substring of it
SAVE_AS_TRIGGERS: Tuple[str, ...] = ("save this as", "save as")

# Residual trigger (plus the category word after it) to strip when nothing precedes the trigger
SAVE_AS_RESIDUE_RE = re.compile(r"save\s+(?:this\s+)?as(?:\s+\w+)?", re.IGNORECASE)

CATEGORY_QUERY_RE = re.compile(r"show my (.+?) memories", re.IGNORECASE)

HELP_TEXT = """Here's what I can help you with:

To save memories, just speak naturally or say:
  - "Buy milk, save this as shopping"
  - "Save as work" followed by your memory

To retrieve memories:
  - "Show memories" for all memories
  - "Show my work memories" for a specific category
  - "What did I do today?" for today's memories

Analytics & Export:
  - "Show analytics" to see memory insights
  - "Export to PDF" to generate a PDF report
  - "Export work PDF" for a category-specific export

Other commands:
  - "Delete last" to remove the latest memory
  - "Delete all" to remove everything (asks for confirmation)
  - "Set category to work" to change the default category
  - "Repeat that" to hear the last memory again
  - "Help" for this guide"""


def match_pattern_group(text: str) -> Optional[PatternGroup]:
    """
    Find the highest-precedence pattern group matching the text.

    Args:
        text: Utterance (any casing)

    Returns:
        The winning PatternGroup, or None for the save fallback
    """
    text_lower = (text or "").lower()
    for group in PATTERN_GROUPS:
        if group.matches(text_lower):
            return group
    return None


def extract_category(text: str, known_categories: Sequence[str]) -> Optional[str]:
    """
    First known category (declared order) whose lowercase form appears in text.

    Returns:
        Category or None. Never raises.
    """
    text_lower = (text or "").lower()
    for category in known_categories:
        if category and category.lower() in text_lower:
            return category
    return None


def _split_on_trigger(utterance: str) -> Optional[Tuple[str, str]]:
    """Split on the first case-insensitive save-as trigger -> (before, after)."""
    lower = utterance.lower()
    for trigger in SAVE_AS_TRIGGERS:
        index = lower.find(trigger)
        if index != -1:
            return utterance[:index], utterance[index + len(trigger):]
    return None


def extract_save_as(
    utterance: str,
    default_category: str,
    known_categories: Sequence[str],
) -> Tuple[Optional[str], str]:
    """
    Pull memory text and category out of a "save (this) as" utterance.

    Category resolution order:
    1. exact match of the words after the trigger ("... save as Work")
    2. first known category mentioned after the trigger ("save as work notes")
    3. first known category mentioned anywhere in the utterance
    4. default_category

    Memory text is the part before the trigger. When that is empty, the
    trigger and the word following it are stripped from the full utterance
    and the rest is used ("save as work call the bank" -> "call the bank").

    Returns:
        (memory_text or None when nothing is left, category)
    """
    split = _split_on_trigger(utterance)
    if split is None:
        return None, default_category
    before, after = split

    after_clean = after.strip().rstrip(".!?,;")
    category = (
        resolve_category(after_clean, known_categories)
        or extract_category(after, known_categories)
        or extract_category(utterance, known_categories)
        or default_category
    )

    memory_text = before.strip()
    if not memory_text:
        memory_text = SAVE_AS_RESIDUE_RE.sub("", utterance, count=1).strip()
        memory_text = re.sub(r"\s+", " ", memory_text)

    return (memory_text or None), category


def extract_category_query(utterance: str, known_categories: Sequence[str]) -> Optional[str]:
    """Resolve the token in "show my <token> memories" by exact match."""
    match = CATEGORY_QUERY_RE.search(utterance or "")
    if not match:
        return None
    return resolve_category(match.group(1), known_categories)


# ============================================================================
# GROUP HANDLERS
# ============================================================================
# Each handler: (utterance, default_category, known_categories, snapshot) -> (Action, feedback)

Handler = Callable[[str, str, Sequence[str], Sequence[MemoryRecord]], Tuple[Action, str]]


def _save_fallback(utterance, default_category, known_categories, snapshot):
    action = Action(
        action_type=ActionType.SAVE,
        text=utterance,
        category=default_category,
        original_input=utterance,
    )
    if not utterance.strip():
        return action, feedback.NOTHING_HEARD
    return action, feedback.saved(default_category, utterance.strip())


def _save_with_category(utterance, default_category, known_categories, snapshot):
    memory_text, category = extract_save_as(utterance, default_category, known_categories)
    if memory_text is None:
        return Action(
            action_type=ActionType.EXTRACTION_FAILED,
            original_input=utterance,
            error=ErrorKind.EXTRACTION_FAILED,
        ), feedback.EXTRACTION_FAILED
    return Action(
        action_type=ActionType.SAVE,
        text=memory_text,
        category=category,
        original_input=utterance,
    ), feedback.saved(category, memory_text)


def _list_all(utterance, default_category, known_categories, snapshot):
    error = ErrorKind.EMPTY_STORE if not snapshot else None
    return Action(ActionType.LIST_ALL, original_input=utterance, error=error), feedback.list_all(snapshot)


def _list_by_category(utterance, default_category, known_categories, snapshot):
    category = extract_category_query(utterance, known_categories)
    if category is None:
        return Action(
            ActionType.LIST_BY_CATEGORY,
            original_input=utterance,
            error=ErrorKind.UNKNOWN_CATEGORY,
        ), feedback.invalid_category(known_categories)
    matching = [r for r in snapshot if r.is_in_category(category)]
    error = ErrorKind.EMPTY_STORE if not matching else None
    return Action(
        ActionType.LIST_BY_CATEGORY,
        category=category,
        original_input=utterance,
        error=error,
    ), feedback.list_category(category, matching)


def _delete_last(utterance, default_category, known_categories, snapshot):
    if not snapshot:
        return Action(ActionType.DELETE_LAST, original_input=utterance,
                      error=ErrorKind.EMPTY_STORE), feedback.NOTHING_TO_DELETE
    return Action(ActionType.DELETE_LAST, original_input=utterance), feedback.deleted(snapshot[0])


def _delete_all(utterance, default_category, known_categories, snapshot):
    action = Action(
        ActionType.DELETE_ALL,
        requires_confirmation=True,
        original_input=utterance,
        error=ErrorKind.EMPTY_STORE if not snapshot else None,
    )
    if not snapshot:
        return action, feedback.NOTHING_TO_DELETE
    return action, feedback.DELETE_ALL_PROMPT


def _show_today(utterance, default_category, known_categories, snapshot):
    # The executor redoes this filter with its own clock
    today = datetime.now().date()
    todays = [r for r in snapshot if r.timestamp.date() == today]
    error = ErrorKind.EMPTY_STORE if not todays else None
    return Action(ActionType.SHOW_TODAY, original_input=utterance, error=error), feedback.list_today(todays)


def _help(utterance, default_category, known_categories, snapshot):
    return Action(ActionType.HELP, original_input=utterance), feedback.HELP_SPOKEN


def _set_category(utterance, default_category, known_categories, snapshot):
    lower = utterance.lower()
    tail = utterance[lower.find("set category") + len("set category"):]
    category = extract_category(tail, known_categories) or extract_category(utterance, known_categories)
    if category is None:
        return Action(
            ActionType.SET_CATEGORY,
            original_input=utterance,
            error=ErrorKind.UNKNOWN_CATEGORY,
        ), feedback.invalid_category(known_categories)
    return Action(ActionType.SET_CATEGORY, category=category, original_input=utterance), feedback.category_set(category)


def _repeat(utterance, default_category, known_categories, snapshot):
    # The last memory text lives in the caller's session; the executor fills it in
    return Action(ActionType.REPEAT, original_input=utterance), feedback.NOTHING_TO_REPEAT


def _show_analytics(utterance, default_category, known_categories, snapshot):
    if not snapshot:
        return Action(ActionType.SHOW_ANALYTICS, original_input=utterance,
                      error=ErrorKind.EMPTY_STORE), feedback.NOTHING_TO_ANALYZE
    insights = analyze(snapshot)
    first = insights.insights[0] if insights.insights else ""
    return Action(ActionType.SHOW_ANALYTICS, original_input=utterance), feedback.analytics(insights.total_count, first)


def _export(utterance, default_category, known_categories, snapshot):
    category = extract_category(utterance, known_categories)
    request = build_export_request(snapshot, category)
    action = Action(
        ActionType.EXPORT,
        category=category,
        original_input=utterance,
        error=ErrorKind.EMPTY_STORE if not request.records else None,
    )
    if not request.records:
        return action, feedback.nothing_to_export(category)
    return action, feedback.export_started(request.title, len(request.records))


_HANDLERS: Dict[str, Handler] = {
    "save_with_category": _save_with_category,
    "list_all": _list_all,
    "list_by_category": _list_by_category,
    "delete_last": _delete_last,
    "delete_all": _delete_all,
    "show_today": _show_today,
    "help": _help,
    "set_category": _set_category,
    "repeat": _repeat,
    "show_analytics": _show_analytics,
    "export": _export,
    "export_words": _export,
}


def interpret(
    utterance: str,
    default_category: str,
    known_categories: Sequence[str],
    store_snapshot: Sequence[MemoryRecord] = (),
) -> Tuple[Action, str]:
    """
    Decide what a recognized utterance asks for.

    Args:
        utterance: Final recognized text (may be empty)
        default_category: Category used for plain saves and as a fallback
        known_categories: Known categories in declared order
        store_snapshot: Current records, newest first (read only)

    Returns:
        (Action, spoken feedback). Never raises.
    """
    logger = get_logger()
    text = utterance if isinstance(utterance, str) else ""
    categories = tuple(known_categories or ())
    snapshot = tuple(store_snapshot or ())

    try:
        group = match_pattern_group(text)
        if group is None:
            logger.debug(f"[INTERPRET] no pattern -> save fallback: '{text[:50]}'")
            return _save_fallback(text, default_category, categories, snapshot)

        logger.debug(f"[INTERPRET] matched group={group.name} action={group.action_type.value}")
        return _HANDLERS[group.name](text, default_category, categories, snapshot)
    except Exception as e:
        logger.error(f"[INTERPRET] failed on '{text[:50]}': {e}")
        return _save_fallback(text, default_category, categories, snapshot)
