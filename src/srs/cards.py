"""
Card model and initializer.

A Card is the unit of scheduling. Cards are immutable values: the scheduler
never edits one in place, it returns a new Card built with dataclasses.replace
so callers can diff old against new for undo or auditing.

Card states:
- NEW: never rated, always eligible for study
- LEARNING: working through the minute-scale learning steps
- REVIEW: graduated, scheduled in whole days
- RELEARNING: lapsed from REVIEW, working through the relearning steps
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, IntEnum

from .errors import MalformedCardError

# =============================================================================
# Enums
# =============================================================================


class CardState(str, Enum):
    """Scheduling state of a card."""

    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    RELEARNING = "relearning"


class Rating(IntEnum):
    """User rating of a recall attempt."""

    AGAIN = 1  # Forgot
    HARD = 2   # Recalled with effort (only meaningful in REVIEW)
    GOOD = 3   # Recalled normally
    EASY = 4   # Recalled fluently


STARTING_EASE = 2.5

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Default clock: timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


# =============================================================================
# Card Data Class
# =============================================================================


@dataclass(frozen=True)
class Card:
    """
    A flashcard with its scheduling history.

    `interval` is the number of days that produced the current due date for
    REVIEW and RELEARNING cards. `learning_step` indexes the learning (or
    relearning) step sequence.
    """

    id: str
    front: str = ""
    back: str = ""
    tags: frozenset[str] = field(default_factory=frozenset)
    deck_id: str = ""
    created_at: datetime = field(default_factory=utcnow)

    state: CardState = CardState.NEW
    interval: int = 0
    ease: float = STARTING_EASE
    reps: int = 0
    lapses: int = 0
    learning_step: int = 0
    due_at: datetime = field(default_factory=utcnow)
    last_review: datetime | None = None

    def __post_init__(self) -> None:
        try:
            state = CardState(self.state)
        except ValueError:
            raise MalformedCardError(self.id, self.state) from None
        object.__setattr__(self, "state", state)
        object.__setattr__(self, "tags", frozenset(self.tags))
        object.__setattr__(self, "created_at", _as_utc(self.created_at))
        object.__setattr__(self, "due_at", _as_utc(self.due_at))
        if self.last_review is not None:
            object.__setattr__(self, "last_review", _as_utc(self.last_review))

    @property
    def is_new(self) -> bool:
        return self.state is CardState.NEW

    def is_due(self, now: datetime) -> bool:
        """A card is due once its due timestamp has been reached."""
        return self.due_at <= _as_utc(now)

    def to_dict(self) -> dict:
        """Serialize to plain JSON-compatible values."""
        return {
            "id": self.id,
            "front": self.front,
            "back": self.back,
            "tags": sorted(self.tags),
            "deck_id": self.deck_id,
            "created_at": self.created_at.isoformat(),
            "state": self.state.value,
            "interval": self.interval,
            "ease": self.ease,
            "reps": self.reps,
            "lapses": self.lapses,
            "learning_step": self.learning_step,
            "due_at": self.due_at.isoformat(),
            "last_review": self.last_review.isoformat() if self.last_review else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Card:
        """
        Create a Card from a dictionary produced by to_dict.

        Args:
            data: Dictionary with card fields

        Returns:
            Card instance
        """
        last_review = data.get("last_review")
        return cls(
            id=data["id"],
            front=data.get("front", ""),
            back=data.get("back", ""),
            tags=frozenset(data.get("tags") or []),
            deck_id=data.get("deck_id", ""),
            created_at=_parse_timestamp(data["created_at"]),
            state=data.get("state", CardState.NEW.value),
            interval=int(data.get("interval", 0)),
            ease=float(data.get("ease", STARTING_EASE)),
            reps=int(data.get("reps", 0)),
            lapses=int(data.get("lapses", 0)),
            learning_step=int(data.get("learning_step", 0)),
            due_at=_parse_timestamp(data["due_at"]),
            last_review=_parse_timestamp(last_review) if last_review else None,
        )


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are taken as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _parse_timestamp(value: str | datetime) -> datetime:
    if isinstance(value, datetime):
        return _as_utc(value)
    return _as_utc(datetime.fromisoformat(value))


# =============================================================================
# Initializer
# =============================================================================


def initialize(
    *,
    id: str | None = None,
    front: str = "",
    back: str = "",
    tags: Iterable[str] | None = None,
    deck_id: str = "",
    created_at: datetime | None = None,
    due_at: datetime | None = None,
    clock: Clock = utcnow,
) -> Card:
    """
    Build the zero state of a freshly created card.

    The card starts NEW with the starting ease and is due immediately: when
    no due timestamp is given it is set to the creation time. Pure
    construction, nothing is read from or written to a store.

    Args:
        id: Card identifier (a fresh uuid4 when omitted)
        front: Prompt text
        back: Answer text
        tags: Tag names, order irrelevant
        deck_id: Owning deck reference
        created_at: Creation timestamp (defaults to the clock)
        due_at: First due timestamp (defaults to created_at)
        clock: Time source used when created_at is omitted

    Returns:
        A NEW Card
    """
    created = created_at or clock()
    return Card(
        id=id or str(uuid.uuid4()),
        front=front,
        back=back,
        tags=frozenset(tags or ()),
        deck_id=deck_id,
        created_at=created,
        state=CardState.NEW,
        interval=0,
        ease=STARTING_EASE,
        reps=0,
        lapses=0,
        learning_step=0,
        due_at=due_at or created,
        last_review=None,
    )
