"""
Review Session Controller.

Drives one sitting of study:
1. Build the queue from the store via the due-set selector
2. Apply each rating through the scheduler and persist the result
3. On finish, record a session summary and today's new-card progress

The new-card cap is shared across the day: cards introduced earlier today
(tracked in daily progress) and earlier in this session count against it.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime

from loguru import logger

from .card_store import CardStore
from .cards import Card, Rating
from .filters import CardFilter
from .progress import DailyProgressTracker
from .scheduler import Scheduler, validate_rating
from .selector import DueCounts, count_by_state, select_due
from .statistics import ReviewSessionRecord

ALL_DECKS = "all"


@dataclass
class SessionSummary:
    """Running totals for the current session."""

    reviewed: int = 0
    correct: int = 0
    new_introduced: int = 0
    ratings: dict[Rating, int] = field(default_factory=lambda: {r: 0 for r in Rating})

    @property
    def accuracy(self) -> float:
        if self.reviewed == 0:
            return 0.0
        return self.correct / self.reviewed


class ReviewSession:
    """
    A review session over the whole collection or one deck.

    Good and Easy ratings count as correct answers.
    """

    def __init__(
        self,
        store: CardStore,
        max_new_cards: int,
        scheduler: Scheduler | None = None,
        deck_id: str | None = None,
        card_filter: CardFilter | None = None,
    ):
        """
        Initialize the session.

        Args:
            store: Card store to read from and save to
            max_new_cards: Daily cap on new cards
            scheduler: Scheduler (creates default if None)
            deck_id: Restrict to one deck (all decks if None)
            card_filter: Optional tag/search filter
        """
        self.store = store
        self.max_new_cards = max_new_cards
        self.scheduler = scheduler or Scheduler()
        self.deck_id = deck_id
        self.card_filter = card_filter or CardFilter()
        self.progress = DailyProgressTracker(store, max_new_cards, clock=self.scheduler.clock)

        self.summary = SessionSummary()
        self.started_at: datetime = self.scheduler.clock()

    @property
    def progress_key(self) -> str:
        return self.deck_id or ALL_DECKS

    def remaining_new_cards(self) -> int:
        """New cards still allowed today."""
        today = self.progress.get(self.progress_key)
        introduced_before = today.reviewed_count if today else 0
        return max(0, self.max_new_cards - introduced_before - self.summary.new_introduced)

    def _candidate_cards(self) -> list[Card]:
        if self.deck_id:
            cards = self.store.get_cards_by_deck(self.deck_id)
        else:
            cards = self.store.get_cards()
        return self.card_filter.apply(cards)

    def build_queue(self) -> list[Card]:
        """
        Build the ordered list of cards to study now.

        Rebuilding after each pass picks up learning cards whose short steps
        have elapsed.
        """
        queue = select_due(
            self._candidate_cards(),
            self.remaining_new_cards(),
            now=self.scheduler.clock(),
        )
        logger.debug(f"Session queue built: {len(queue)} cards")
        return queue

    def due_counts(self) -> DueCounts:
        """Bucket sizes of the queue build_queue() would return now."""
        return count_by_state(
            self._candidate_cards(),
            now=self.scheduler.clock(),
            max_new_cards=self.remaining_new_cards(),
        )

    def record_review(self, card: Card, quality: int) -> Card:
        """
        Apply a rating, persist the updated card and update session totals.

        Args:
            card: Card as presented
            quality: Rating 1-4

        Returns:
            Updated Card

        Raises:
            InvalidRatingError: quality outside 1-4 (nothing is saved)
        """
        rating = validate_rating(quality)
        updated = self.scheduler.schedule(card, rating)
        self.store.update_card(updated)

        self.summary.reviewed += 1
        self.summary.ratings[rating] += 1
        if rating >= Rating.GOOD:
            self.summary.correct += 1
        if card.is_new:
            self.summary.new_introduced += 1

        logger.debug(
            f"Recorded review for {card.id}: rating={rating.name}, "
            f"state={updated.state.value}, due={updated.due_at.isoformat()}"
        )
        return updated

    def finish(self) -> ReviewSessionRecord:
        """
        Close the session: store a summary record and today's progress.

        Returns:
            The recorded session summary
        """
        now = self.scheduler.clock()
        record = ReviewSessionRecord(
            id=f"session-{uuid.uuid4().hex[:12]}",
            date=now.date(),
            cards_reviewed=self.summary.reviewed,
            cards_correct=self.summary.correct,
            duration_seconds=int((now - self.started_at).total_seconds()),
            timestamp=now,
        )
        self.store.record_session(record)

        today = self.progress.get(self.progress_key)
        introduced = (today.reviewed_count if today else 0) + self.summary.new_introduced
        self.progress.update(self.progress_key, introduced)

        logger.info(
            f"Session finished: {record.cards_reviewed} reviewed, "
            f"{record.cards_correct} correct in {record.duration_seconds}s"
        )
        return record
