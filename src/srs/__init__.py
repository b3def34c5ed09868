"""
Recall: spaced-repetition flashcards.

Components:
- Card / initialize: card model and zero-state construction
- Scheduler / schedule: Anki-style SM-2 state machine
- select_due / count_by_state: due-set selection with a daily new-card cap
- CardFilter: tag and search filtering
- Statistics: session history aggregation
- CardStore: SQLite persistence for the terminal front-end
- ReviewSession: review session controller
"""

from .card_store import DEFAULT_DECK_ID, CardStore, DailyProgress, Deck
from .cards import Card, CardState, Rating, initialize, utcnow
from .errors import InvalidRatingError, MalformedCardError, SchedulingError
from .filters import CardFilter, all_tags, search_cards
from .progress import DailyProgressTracker
from .scheduler import DEFAULT_CONFIG, Scheduler, SchedulerConfig, schedule
from .selector import DueCounts, count_by_state, select_due
from .session import ReviewSession
from .statistics import ReviewSessionRecord, Statistics, summarize

__all__ = [
    # Cards
    "Card",
    "CardState",
    "Rating",
    "initialize",
    "utcnow",
    # Scheduling
    "Scheduler",
    "SchedulerConfig",
    "DEFAULT_CONFIG",
    "schedule",
    # Selection
    "select_due",
    "count_by_state",
    "DueCounts",
    # Errors
    "SchedulingError",
    "InvalidRatingError",
    "MalformedCardError",
    # Filtering
    "CardFilter",
    "all_tags",
    "search_cards",
    # Statistics
    "ReviewSessionRecord",
    "Statistics",
    "summarize",
    # Persistence
    "CardStore",
    "Deck",
    "DailyProgress",
    "DailyProgressTracker",
    "DEFAULT_DECK_ID",
    # Sessions
    "ReviewSession",
]
