"""
Review statistics.

Aggregates recorded review sessions into the numbers shown on the stats
screen: totals, accuracy, current streak and per-day activity.

Streak rules:
- No sessions, or latest session more than one day before today: streak is 0
- Otherwise count consecutive review days walking back from the latest one,
  so a streak stays alive until a whole day is missed
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from .cards import Card, CardState

# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class ReviewSessionRecord:
    """Summary of one completed review session."""

    id: str
    date: date
    cards_reviewed: int
    cards_correct: int
    duration_seconds: int
    timestamp: datetime

    @property
    def accuracy(self) -> float:
        if self.cards_reviewed == 0:
            return 0.0
        return self.cards_correct / self.cards_reviewed


@dataclass
class Statistics:
    """Overall learning statistics."""

    total_cards: int = 0
    total_reviews: int = 0
    total_review_sessions: int = 0
    streak_days: int = 0
    reviews_by_date: dict[date, int] = field(default_factory=dict)
    accuracy_rate: float = 0.0  # Percent, one decimal
    average_interval: float = 0.0  # Days, one decimal


# =============================================================================
# Aggregations
# =============================================================================


def reviews_by_date(sessions: Iterable[ReviewSessionRecord]) -> dict[date, int]:
    """Total cards reviewed per calendar day."""
    totals: dict[date, int] = {}
    for session in sessions:
        totals[session.date] = totals.get(session.date, 0) + session.cards_reviewed
    return totals


def streak_days(sessions: Iterable[ReviewSessionRecord], today: date) -> int:
    """
    Count consecutive review days ending today or yesterday.

    Args:
        sessions: Recorded sessions
        today: Reference day

    Returns:
        Streak length in days
    """
    days = set(reviews_by_date(sessions))
    if not days:
        return 0

    latest = max(days)
    if (today - latest).days > 1:
        return 0

    streak = 0
    check = latest
    while check in days:
        streak += 1
        check -= timedelta(days=1)
    return streak


def recent_activity(
    sessions: Iterable[ReviewSessionRecord],
    today: date,
    days: int = 30,
) -> list[tuple[date, int]]:
    """Reviews per day for the last `days` days, oldest first, zero-filled."""
    totals = reviews_by_date(sessions)
    return [
        (day, totals.get(day, 0))
        for day in (today - timedelta(days=offset) for offset in range(days - 1, -1, -1))
    ]


def average_interval(cards: Iterable[Card]) -> float:
    """Mean interval in days of scheduled (REVIEW/RELEARNING) cards."""
    intervals = [
        card.interval
        for card in cards
        if card.state in (CardState.REVIEW, CardState.RELEARNING)
    ]
    if not intervals:
        return 0.0
    return round(sum(intervals) / len(intervals), 1)


def summarize(
    sessions: Iterable[ReviewSessionRecord],
    cards: Iterable[Card],
    today: date,
) -> Statistics:
    """
    Build overall statistics from sessions and the current card collection.

    Args:
        sessions: Recorded review sessions
        cards: Current card collection
        today: Reference day for the streak

    Returns:
        Statistics
    """
    sessions = list(sessions)
    cards = list(cards)

    total_reviews = sum(s.cards_reviewed for s in sessions)
    total_correct = sum(s.cards_correct for s in sessions)
    accuracy = (total_correct / total_reviews) * 100 if total_reviews > 0 else 0.0

    return Statistics(
        total_cards=len(cards),
        total_reviews=total_reviews,
        total_review_sessions=len(sessions),
        streak_days=streak_days(sessions, today),
        reviews_by_date=reviews_by_date(sessions),
        accuracy_rate=round(accuracy, 1),
        average_interval=average_interval(cards),
    )
