"""
Daily new-card progress per deck.
"""

from __future__ import annotations

from .card_store import CardStore, DailyProgress
from .cards import Clock, utcnow


class DailyProgressTracker:
    """
    Tracks how many cards were studied today in each deck against the daily
    new-card limit. Only today's entries are kept.
    """

    def __init__(self, store: CardStore, daily_limit: int, clock: Clock = utcnow):
        self.store = store
        self.daily_limit = daily_limit
        self.clock = clock

    def get(self, deck_id: str) -> DailyProgress | None:
        """Today's progress for a deck, or None if nothing was studied yet."""
        return self.store.get_daily_progress(deck_id, self.clock().date())

    def update(self, deck_id: str, reviewed_count: int) -> DailyProgress:
        """Record today's reviewed count; the target is the current daily limit."""
        progress = DailyProgress(
            deck_id=deck_id,
            date=self.clock().date(),
            reviewed_count=reviewed_count,
            target_count=self.daily_limit,
        )
        self.store.save_daily_progress(progress)
        return progress

    def is_goal_completed(self, deck_id: str) -> bool:
        progress = self.get(deck_id)
        return progress is not None and progress.is_completed
