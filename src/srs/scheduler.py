"""
Anki-style SM-2 Scheduler.

Implements the state machine that moves a card between NEW, LEARNING, REVIEW
and RELEARNING after each rating, and computes its next interval, ease and
due timestamp.

Rating Scale:
1 - Again: forgot
2 - Hard: recalled with effort (REVIEW only; treated as Good while learning)
3 - Good: recalled normally
4 - Easy: recalled fluently

Unlike textbook SM-2, the Hard path uses a fixed interval multiplier and a
fixed ease penalty instead of scaling by ease, and a lapse resets the interval
to the minimum rather than a fraction of the old one.

Day intervals are anchored at the moment of rating, not at the previous due
date, so early or late reviews do not compound.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta

from loguru import logger

from .cards import Card, CardState, Clock, Rating, STARTING_EASE, utcnow
from .errors import InvalidRatingError, MalformedCardError

# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True)
class SchedulerConfig:
    """Tunable scheduling constants."""

    learning_steps: tuple[timedelta, ...] = (
        timedelta(minutes=1),
        timedelta(minutes=10),
    )
    relearning_steps: tuple[timedelta, ...] = (timedelta(minutes=10),)
    graduating_interval: int = 1  # Days after the last learning step
    easy_interval: int = 4  # Days when a learning card is rated Easy
    minimum_interval: int = 1  # Days, floor after a lapse
    lapse_multiplier: float = 0.0  # Lapse resets to the minimum interval
    starting_ease: float = STARTING_EASE
    minimum_ease: float = 1.3
    easy_bonus: float = 1.3
    hard_multiplier: float = 1.2
    hard_ease_penalty: float = 0.15
    lapse_ease_penalty: float = 0.2
    easy_ease_bonus: float = 0.15

    def __post_init__(self) -> None:
        if not self.learning_steps:
            raise ValueError("learning_steps must contain at least one step")
        if not self.relearning_steps:
            raise ValueError("relearning_steps must contain at least one step")


DEFAULT_CONFIG = SchedulerConfig()


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    if value < 0:
        return -math.floor(-value + 0.5)
    return math.floor(value + 0.5)


def validate_rating(quality: object) -> Rating:
    """
    Check a quality value against the closed rating set.

    Raises:
        InvalidRatingError: quality is not an integer in 1-4
    """
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidRatingError(quality)
    if not Rating.AGAIN <= quality <= Rating.EASY:
        raise InvalidRatingError(quality)
    return Rating(quality)


# =============================================================================
# Scheduler
# =============================================================================


@dataclass
class Scheduler:
    """
    Computes a card's next scheduling state from a rating.

    The scheduler holds no per-card state; it only carries configuration and
    a clock, so a single instance can serve any number of callers.
    """

    config: SchedulerConfig = field(default_factory=SchedulerConfig)
    clock: Clock = utcnow

    def schedule(self, card: Card, quality: int, now: datetime | None = None) -> Card:
        """
        Apply a rating to a card.

        Args:
            card: Current card (never modified)
            quality: Rating 1-4
            now: Timestamp of the rating (sampled from the clock if None)

        Returns:
            New Card with updated state, interval, ease, counters and due_at

        Raises:
            InvalidRatingError: quality outside 1-4
            MalformedCardError: card state is not recognized
        """
        rating = validate_rating(quality)
        if now is None:
            now = self.clock()

        if card.state in (CardState.NEW, CardState.LEARNING):
            updated = self._rate_learning(card, rating, now)
        elif card.state is CardState.RELEARNING:
            updated = self._rate_relearning(card, rating, now)
        elif card.state is CardState.REVIEW:
            updated = self._rate_review(card, rating, now)
        else:
            raise MalformedCardError(card.id, card.state)

        logger.debug(
            f"Scheduled {card.id}: {card.state.value} -> {updated.state.value}, "
            f"rating={rating.name}, interval={updated.interval}d, "
            f"ease={updated.ease:.2f}, due={updated.due_at.isoformat()}"
        )
        return updated

    def preview(self, card: Card, now: datetime | None = None) -> dict[Rating, timedelta]:
        """
        Delay until the next review for each possible rating.

        Returns:
            Mapping of rating to the time between now and the resulting due_at
        """
        if now is None:
            now = self.clock()
        return {
            rating: self.schedule(card, rating, now=now).due_at - now
            for rating in Rating
        }

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def _rate_learning(self, card: Card, rating: Rating, now: datetime) -> Card:
        steps = self.config.learning_steps

        if rating is Rating.AGAIN:
            return replace(
                card,
                state=CardState.LEARNING,
                learning_step=0,
                due_at=now + steps[0],
                last_review=now,
            )

        if rating is Rating.EASY:
            return self._graduate(
                card,
                interval=self.config.easy_interval,
                ease=self.config.starting_ease,
                reps=1,
                now=now,
            )

        # Hard has no meaning while learning and advances like Good
        step = card.learning_step + 1
        if step >= len(steps):
            return self._graduate(
                card,
                interval=self.config.graduating_interval,
                ease=self.config.starting_ease,
                reps=1,
                now=now,
            )

        return replace(
            card,
            state=CardState.LEARNING,
            learning_step=step,
            due_at=now + steps[step],
            last_review=now,
        )

    def _rate_relearning(self, card: Card, rating: Rating, now: datetime) -> Card:
        steps = self.config.relearning_steps
        minimum = self.config.minimum_interval

        if rating is Rating.AGAIN:
            return replace(
                card,
                state=CardState.RELEARNING,
                learning_step=0,
                due_at=now + steps[0],
                last_review=now,
            )

        if rating is Rating.EASY:
            interval = max(minimum, round_half_up(card.interval * self.config.easy_bonus))
            return self._graduate(card, interval=interval, ease=card.ease, reps=card.reps + 1, now=now)

        step = card.learning_step + 1
        if step >= len(steps):
            # The interval kept from the lapse is never shrunk further here
            interval = max(minimum, card.interval)
            return self._graduate(card, interval=interval, ease=card.ease, reps=card.reps + 1, now=now)

        return replace(
            card,
            state=CardState.RELEARNING,
            learning_step=step,
            due_at=now + steps[step],
            last_review=now,
        )

    def _rate_review(self, card: Card, rating: Rating, now: datetime) -> Card:
        config = self.config

        if rating is Rating.AGAIN:
            interval = max(
                config.minimum_interval,
                round_half_up(card.interval * config.lapse_multiplier),
            )
            return replace(
                card,
                state=CardState.RELEARNING,
                learning_step=0,
                lapses=card.lapses + 1,
                ease=max(config.minimum_ease, card.ease - config.lapse_ease_penalty),
                interval=interval,
                due_at=now + config.relearning_steps[0],
                last_review=now,
            )

        if rating is Rating.HARD:
            ease = max(config.minimum_ease, card.ease - config.hard_ease_penalty)
            interval = round_half_up(card.interval * config.hard_multiplier)
        elif rating is Rating.GOOD:
            ease = card.ease
            interval = round_half_up(card.interval * card.ease)
        else:
            ease = card.ease + config.easy_ease_bonus
            interval = round_half_up(card.interval * card.ease * config.easy_bonus)

        return self._graduate(card, interval=interval, ease=ease, reps=card.reps + 1, now=now)

    def _graduate(
        self,
        card: Card,
        *,
        interval: int,
        ease: float,
        reps: int,
        now: datetime,
    ) -> Card:
        """Place a card in REVIEW, due `interval` whole days from now."""
        interval = max(self.config.minimum_interval, interval)
        return replace(
            card,
            state=CardState.REVIEW,
            learning_step=0,
            interval=interval,
            ease=max(self.config.minimum_ease, ease),
            reps=reps,
            due_at=now + timedelta(days=interval),
            last_review=now,
        )


# =============================================================================
# Module-level API
# =============================================================================

_default_scheduler = Scheduler()


def schedule(card: Card, quality: int, *, now: datetime | None = None) -> Card:
    """Apply a rating with the default configuration."""
    return _default_scheduler.schedule(card, quality, now=now)
