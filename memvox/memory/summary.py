"""
Keyword/Mood Analyzer for Memvox.

Pure functions that turn a collection of records into aggregate statistics for
the analytics view and spoken summaries:
- category breakdown (first-seen order)
- top keywords (stop words and short tokens removed)
- mood tally (positive / negative / neutral)
- time-bucketed counts (Today, Yesterday, This Week, Last Week, This Month, Older)
- template insight sentences in a fixed order

Nothing here touches the store or storage.
"""

import math
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

from memvox.memory.record import MemoryRecord


STOP_WORDS = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "is", "was", "are", "were", "be", "been", "being",
    "have", "has", "had", "do", "does", "did", "will", "would", "could",
    "should", "may", "might", "must", "can", "i", "you", "he", "she", "it",
    "we", "they", "me", "him", "her", "us", "them", "my", "your", "his",
    "its", "our", "their", "this", "that", "these", "those",
})

POSITIVE_WORDS = (
    "happy", "joy", "excited", "good", "great", "amazing", "wonderful", "love",
    "success", "achieved", "accomplished", "proud", "grateful", "blessed",
)
NEGATIVE_WORDS = (
    "sad", "angry", "frustrated", "bad", "terrible", "awful", "hate", "failed",
    "disappointed", "worried", "stressed", "anxious", "upset",
)

MOODS = ("positive", "negative", "neutral")

# (label, max age in days) checked in order; anything beyond is "Older"
TREND_BUCKETS = (
    ("Today", 0),
    ("Yesterday", 1),
    ("This Week", 7),
    ("Last Week", 14),
    ("This Month", 30),
)
OLDER_BUCKET = "Older"

DEFAULT_KEYWORD_LIMIT = 10
INSIGHT_KEYWORD_LIMIT = 5
RECENT_DAYS = 7

_NON_WORD_RE = re.compile(r"[^\w\s]")


@dataclass
class MemoryInsights:
    """Aggregates produced by analyze()."""
    total_count: int = 0
    category_breakdown: Dict[str, int] = field(default_factory=dict)
    top_keywords: List[str] = field(default_factory=list)
    mood_breakdown: Dict[str, int] = field(default_factory=dict)
    weekly_trend: Dict[str, int] = field(default_factory=dict)
    insights: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalCount": self.total_count,
            "categoryBreakdown": dict(self.category_breakdown),
            "topKeywords": list(self.top_keywords),
            "moodBreakdown": dict(self.mood_breakdown),
            "weeklyTrend": dict(self.weekly_trend),
            "insights": list(self.insights),
        }


def _tokenize(text: str) -> List[str]:
    cleaned = _NON_WORD_RE.sub("", text.lower())
    return [w for w in cleaned.split() if len(w) > 2 and w not in STOP_WORDS]


def extract_top_keywords(records: Iterable[MemoryRecord], limit: int = DEFAULT_KEYWORD_LIMIT) -> List[str]:
    """
    Most frequent content words across all record texts.

    Ties keep first-seen order (dict insertion order plus a stable sort).
    """
    counts: Dict[str, int] = {}
    for record in records:
        for word in _tokenize(record.text):
            counts[word] = counts.get(word, 0) + 1
    ranked = sorted(counts.items(), key=lambda item: -item[1])
    return [word for word, _ in ranked[:limit]]


def category_breakdown(records: Iterable[MemoryRecord]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for record in records:
        counts[record.category] = counts.get(record.category, 0) + 1
    return counts


def classify_mood(text: str) -> str:
    """
    Classify a text as positive, negative or neutral.

    Positive needs at least one positive keyword and no negative one, and
    vice versa. Both or neither -> neutral.
    """
    lowered = (text or "").lower()
    has_positive = any(word in lowered for word in POSITIVE_WORDS)
    has_negative = any(word in lowered for word in NEGATIVE_WORDS)
    if has_positive and not has_negative:
        return "positive"
    if has_negative and not has_positive:
        return "negative"
    return "neutral"


def mood_breakdown(records: Sequence[MemoryRecord]) -> Dict[str, int]:
    if not records:
        return {}
    counts = {mood: 0 for mood in MOODS}
    for record in records:
        counts[classify_mood(record.text)] += 1
    return counts


def age_in_days(timestamp: datetime, now: datetime) -> int:
    """Whole days elapsed (truncated). Future timestamps count as 0."""
    seconds = (now - timestamp).total_seconds()
    return max(0, int(seconds / 86400))


def trend_bucket(timestamp: datetime, now: Optional[datetime] = None) -> str:
    """First matching bucket for a record's age."""
    days = age_in_days(timestamp, now or datetime.now())
    for label, max_days in TREND_BUCKETS:
        if days <= max_days:
            return label
    return OLDER_BUCKET


def weekly_trend(records: Iterable[MemoryRecord], now: Optional[datetime] = None) -> Dict[str, int]:
    now = now or datetime.now()
    counts: Dict[str, int] = {}
    for record in records:
        bucket = trend_bucket(record.timestamp, now)
        counts[bucket] = counts.get(bucket, 0) + 1
    return counts


def _first_max(counts: Dict[str, int]) -> Optional[tuple]:
    """(key, value) with the highest value; earliest key wins ties."""
    best = None
    for key, value in counts.items():
        if best is None or value > best[1]:
            best = (key, value)
    return best


def generate_insights(records: Sequence[MemoryRecord], now: Optional[datetime] = None) -> List[str]:
    """Template sentences, always in the same order."""
    now = now or datetime.now()
    insights: List[str] = []
    categories = category_breakdown(records)
    moods = mood_breakdown(records)
    keywords = extract_top_keywords(records, limit=INSIGHT_KEYWORD_LIMIT)

    top_category = _first_max(categories)
    if top_category:
        insights.append(
            f'Your most active category is "{top_category[0]}" with {top_category[1]} memories.'
        )

    total_moods = sum(moods.values())
    if total_moods > 0:
        mood, count = _first_max(moods)
        percentage = math.floor(count * 100 / total_moods + 0.5)
        insights.append(f"{percentage}% of your memories have a {mood} tone.")

    if keywords:
        insights.append(
            f"Your most frequently mentioned topics include: {', '.join(keywords[:3])}."
        )

    recent_count = sum(1 for r in records if age_in_days(r.timestamp, now) <= RECENT_DAYS)
    if recent_count > 0:
        insights.append(f"You've saved {recent_count} memories in the past week.")

    if len(categories) > 1:
        insights.append(
            f"You're actively using {len(categories)} different categories to organize your memories."
        )

    return insights


def analyze(
    records: Iterable[MemoryRecord],
    now: Optional[datetime] = None,
    keyword_limit: int = DEFAULT_KEYWORD_LIMIT,
) -> MemoryInsights:
    """
    Compute all aggregates for a collection of records.

    Args:
        records: Records to analyze (any order)
        now: Reference instant for age buckets (defaults to datetime.now())
        keyword_limit: Maximum number of top keywords

    Returns:
        MemoryInsights (all empty with total_count 0 for no records)
    """
    items = list(records)
    if not items:
        return MemoryInsights()

    now = now or datetime.now()
    return MemoryInsights(
        total_count=len(items),
        category_breakdown=category_breakdown(items),
        top_keywords=extract_top_keywords(items, limit=keyword_limit),
        mood_breakdown=mood_breakdown(items),
        weekly_trend=weekly_trend(items, now),
        insights=generate_insights(items, now),
    )
