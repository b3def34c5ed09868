"""
Due-Set Selector.

Builds the ordered list of cards to study right now:

1. Learning bucket: LEARNING/RELEARNING cards that are due
2. Review bucket: REVIEW cards that are due
3. New bucket: NEW cards (always eligible), capped at the daily limit

Buckets are concatenated in that order and each keeps the relative order of
the input (a stable partition, never re-sorted). In-progress cards come first
because they are the most time-sensitive.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from loguru import logger

from .cards import Card, CardState, utcnow

LEARNING_STATES = frozenset({CardState.LEARNING, CardState.RELEARNING})


@dataclass(frozen=True)
class DueCounts:
    """Bucket sizes for dashboard display."""

    new: int = 0
    learning: int = 0
    review: int = 0

    @property
    def total(self) -> int:
        return self.new + self.learning + self.review


def _partition(
    cards: Iterable[Card],
    now: datetime,
) -> tuple[list[Card], list[Card], list[Card]]:
    learning: list[Card] = []
    review: list[Card] = []
    new: list[Card] = []

    for card in cards:
        if card.state is CardState.NEW:
            new.append(card)
        elif card.state in LEARNING_STATES:
            if card.is_due(now):
                learning.append(card)
        elif card.state is CardState.REVIEW:
            if card.is_due(now):
                review.append(card)

    return learning, review, new


def select_due(
    cards: Iterable[Card],
    max_new_cards: int,
    *,
    now: datetime | None = None,
) -> list[Card]:
    """
    Select the cards eligible for study, in presentation order.

    Args:
        cards: Full collection or a deck subset
        max_new_cards: Daily cap on NEW cards (0 suppresses new cards)
        now: Reference time (defaults to current UTC time)

    Returns:
        Learning bucket + review bucket + first `max_new_cards` NEW cards

    Raises:
        ValueError: max_new_cards is negative
    """
    if max_new_cards < 0:
        raise ValueError(f"max_new_cards must be non-negative, got {max_new_cards}")

    learning, review, new = _partition(cards, now or utcnow())
    selected_new = new[:max_new_cards]

    logger.debug(
        f"Selected {len(learning)} learning + {len(review)} review + "
        f"{len(selected_new)}/{len(new)} new cards"
    )

    return learning + review + selected_new


def count_by_state(
    cards: Iterable[Card],
    *,
    now: datetime | None = None,
    max_new_cards: int | None = None,
) -> DueCounts:
    """
    Count cards per bucket using the same due-ness rules as select_due.

    Args:
        cards: Cards to count
        now: Reference time (defaults to current UTC time)
        max_new_cards: Optional cap applied to the new count

    Returns:
        DueCounts with new, learning and review sizes
    """
    learning, review, new = _partition(cards, now or utcnow())
    new_count = len(new) if max_new_cards is None else min(len(new), max_new_cards)
    return DueCounts(new=new_count, learning=len(learning), review=len(review))
