"""
Tests for the keyword/mood analyzer.

Pure functions over fixed records and a fixed clock.

Run with: python -m pytest tests/test_summary.py -v
"""

from datetime import datetime, timedelta

import pytest

from memvox.memory.record import MemoryRecord
from memvox.memory.summary import (
    MemoryInsights,
    age_in_days,
    analyze,
    category_breakdown,
    classify_mood,
    extract_top_keywords,
    generate_insights,
    mood_breakdown,
    trend_bucket,
    weekly_trend,
)


NOW = datetime(2024, 5, 10, 18, 0, 0)


def make_record(record_id, text, category="Personal", days_ago=0.0):
    return MemoryRecord(
        id=str(record_id),
        text=text,
        category=category,
        timestamp=NOW - timedelta(days=days_ago),
    )


@pytest.fixture
def records():
    return [
        make_record(1, "Had a great day at the beach", "Personal", 0),
        make_record(2, "Stressed about the project deadline", "Work", 1),
        make_record(3, "Project meeting went fine", "Work", 3),
        make_record(4, "Great project launch, feeling proud", "Work", 10),
        make_record(5, "Dentist appointment", "Health", 40),
    ]


# ============================================================================
# KEYWORDS & CATEGORIES
# ============================================================================

class TestKeywords:
    """Tests for extract_top_keywords."""

    def test_ranked_by_frequency_then_first_seen(self, records):
        assert extract_top_keywords(records, limit=5) == ["project", "great", "day", "beach", "stressed"]

    def test_stop_words_and_short_tokens_removed(self):
        keywords = extract_top_keywords([make_record(1, "I am at the zoo with my dog")])
        assert keywords == ["zoo", "dog"]

    def test_punctuation_stripped(self):
        assert extract_top_keywords([make_record(1, "Milk! Milk? milk.")]) == ["milk"]

    def test_limit(self, records):
        assert len(extract_top_keywords(records, limit=3)) == 3

    def test_empty(self):
        assert extract_top_keywords([]) == []


class TestCategoryBreakdown:
    """Tests for category_breakdown."""

    def test_counts_in_first_seen_order(self, records):
        breakdown = category_breakdown(records)
        assert breakdown == {"Personal": 1, "Work": 3, "Health": 1}
        assert list(breakdown) == ["Personal", "Work", "Health"]


# ============================================================================
# MOOD
# ============================================================================

class TestMood:
    """Tests for classify_mood / mood_breakdown."""

    @pytest.mark.parametrize("text,expected", [
        ("I love this", "positive"),
        ("Feeling grateful today", "positive"),
        ("I hate traffic", "negative"),
        ("So worried about tomorrow", "negative"),
        ("Good news and bad news", "neutral"),
        ("Buy eggs", "neutral"),
        ("Just a normal day", "neutral"),
        ("Fine, but a bit sad", "negative"),
        ("", "neutral"),
    ])
    def test_classify(self, text, expected):
        assert classify_mood(text) == expected

    def test_substring_matching(self):
        # "badge" contains "bad"
        assert classify_mood("Pick up my badge") == "negative"

    def test_case_insensitive(self):
        assert classify_mood("AMAZING concert") == "positive"

    def test_breakdown(self, records):
        assert mood_breakdown(records) == {"positive": 2, "negative": 1, "neutral": 2}

    def test_breakdown_empty(self):
        assert mood_breakdown([]) == {}


# ============================================================================
# TREND
# ============================================================================

class TestTrend:
    """Tests for age buckets."""

    def test_age_truncates(self):
        assert age_in_days(NOW - timedelta(days=1, hours=23), NOW) == 1

    def test_future_clamped(self):
        assert age_in_days(NOW + timedelta(days=3), NOW) == 0

    @pytest.mark.parametrize("days,bucket", [
        (0, "Today"),
        (1, "Yesterday"),
        (2, "This Week"),
        (7, "This Week"),
        (8, "Last Week"),
        (14, "Last Week"),
        (15, "This Month"),
        (30, "This Month"),
        (31, "Older"),
    ])
    def test_buckets(self, days, bucket):
        assert trend_bucket(NOW - timedelta(days=days), NOW) == bucket

    def test_weekly_trend(self, records):
        assert weekly_trend(records, NOW) == {
            "Today": 1,
            "Yesterday": 1,
            "This Week": 1,
            "Last Week": 1,
            "Older": 1,
        }


# ============================================================================
# INSIGHTS
# ============================================================================

class TestInsights:
    """Tests for generate_insights / analyze."""

    def test_insight_sentences_in_order(self, records):
        assert generate_insights(records, NOW) == [
            'Your most active category is "Work" with 3 memories.',
            "40% of your memories have a positive tone.",
            "Your most frequently mentioned topics include: project, great, day.",
            "You've saved 3 memories in the past week.",
            "You're actively using 3 different categories to organize your memories.",
        ]

    def test_category_tie_keeps_first_seen(self):
        insights = generate_insights([
            make_record(1, "Fix the printer", "Work"),
            make_record(2, "Water plants", "Personal"),
        ], NOW)
        assert insights[0] == 'Your most active category is "Work" with 1 memories.'

    def test_percentage_rounds_half_up(self):
        records = [make_record(i, "Great run") for i in range(5)]
        records += [make_record(i + 5, "Buy eggs") for i in range(3)]
        insights = generate_insights(records, NOW)
        assert "63% of your memories have a positive tone." in insights

    def test_single_category_has_no_usage_sentence(self):
        insights = generate_insights([make_record(1, "Buy eggs", "Shopping")], NOW)
        assert not any("different categories" in line for line in insights)

    def test_old_records_have_no_weekly_sentence(self):
        insights = generate_insights([make_record(1, "Buy eggs", days_ago=30)], NOW)
        assert not any("past week" in line for line in insights)

    def test_analyze(self, records):
        result = analyze(records, now=NOW, keyword_limit=3)
        assert result.total_count == 5
        assert result.top_keywords == ["project", "great", "day"]
        assert result.mood_breakdown["positive"] == 2
        assert len(result.insights) == 5

    def test_analyze_empty(self):
        result = analyze([], now=NOW)
        assert result == MemoryInsights()
        assert result.total_count == 0
        assert result.insights == []

    def test_to_dict(self, records):
        data = analyze(records, now=NOW).to_dict()
        assert set(data) == {
            "totalCount", "categoryBreakdown", "topKeywords",
            "moodBreakdown", "weeklyTrend", "insights",
        }
        assert data["totalCount"] == 5
