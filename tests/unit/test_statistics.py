"""
Unit tests for review statistics.
"""

from datetime import date, datetime, time, timedelta, timezone

from src.srs.cards import CardState
from src.srs.statistics import (
    ReviewSessionRecord,
    average_interval,
    recent_activity,
    reviews_by_date,
    streak_days,
    summarize,
)

TODAY = date(2026, 1, 15)


def session(day: date, reviewed: int = 10, correct: int = 8, sid: str | None = None) -> ReviewSessionRecord:
    return ReviewSessionRecord(
        id=sid or f"s-{day.isoformat()}-{reviewed}",
        date=day,
        cards_reviewed=reviewed,
        cards_correct=correct,
        duration_seconds=300,
        timestamp=datetime.combine(day, time(9), tzinfo=timezone.utc),
    )


def days_ago(n: int) -> date:
    return TODAY - timedelta(days=n)


class TestStreak:
    def test_no_sessions(self):
        assert streak_days([], TODAY) == 0

    def test_reviewed_today(self):
        sessions = [session(days_ago(0)), session(days_ago(1)), session(days_ago(2))]
        assert streak_days(sessions, TODAY) == 3

    def test_streak_survives_until_day_missed(self):
        sessions = [session(days_ago(1)), session(days_ago(2))]
        assert streak_days(sessions, TODAY) == 2

    def test_broken_streak(self):
        assert streak_days([session(days_ago(2))], TODAY) == 0

    def test_gap_ends_count(self):
        sessions = [session(days_ago(0)), session(days_ago(2)), session(days_ago(3))]
        assert streak_days(sessions, TODAY) == 1

    def test_multiple_sessions_same_day(self):
        sessions = [session(TODAY, sid="a"), session(TODAY, sid="b")]
        assert streak_days(sessions, TODAY) == 1


def test_reviews_by_date_sums_sessions():
    sessions = [session(TODAY, 5), session(TODAY, 7), session(days_ago(1), 3)]
    assert reviews_by_date(sessions) == {TODAY: 12, days_ago(1): 3}


def test_recent_activity_zero_filled_oldest_first():
    activity = recent_activity([session(days_ago(1), 4)], TODAY, days=3)
    assert activity == [(days_ago(2), 0), (days_ago(1), 4), (TODAY, 0)]


def test_average_interval_ignores_unscheduled_cards(make_card):
    cards = [
        make_card("a", CardState.REVIEW, interval=4),
        make_card("b", CardState.RELEARNING, interval=1),
        make_card("c", CardState.REVIEW, interval=2),
        make_card("d", CardState.NEW),
        make_card("e", CardState.LEARNING),
    ]
    assert average_interval(cards) == 2.3


def test_average_interval_empty():
    assert average_interval([]) == 0.0


class TestSummarize:
    def test_totals(self, make_card):
        sessions = [session(TODAY, 10, 8), session(days_ago(1), 5, 2)]
        cards = [make_card("a", CardState.REVIEW, interval=6), make_card("b")]

        stats = summarize(sessions, cards, TODAY)

        assert stats.total_cards == 2
        assert stats.total_reviews == 15
        assert stats.total_review_sessions == 2
        assert stats.streak_days == 2
        assert stats.accuracy_rate == 66.7
        assert stats.average_interval == 6.0

    def test_empty(self):
        stats = summarize([], [], TODAY)

        assert stats.total_reviews == 0
        assert stats.accuracy_rate == 0.0
        assert stats.reviews_by_date == {}


def test_session_accuracy():
    assert session(TODAY, 4, 3).accuracy == 0.75
    assert session(TODAY, 0, 0).accuracy == 0.0
