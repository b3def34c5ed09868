"""
Scheduling errors.

All errors raised by the scheduling core derive from SchedulingError so the
CLI can report them at a single boundary.
"""

from __future__ import annotations


class SchedulingError(ValueError):
    """Base class for precondition violations in the scheduling core."""


class InvalidRatingError(SchedulingError):
    """Quality rating outside the closed set 1-4."""

    def __init__(self, quality: object):
        self.quality = quality
        super().__init__(f"Quality must be an integer between 1 and 4, got {quality!r}")


class MalformedCardError(SchedulingError):
    """Card carries a state the scheduler does not recognize."""

    def __init__(self, card_id: str, state: object):
        self.card_id = card_id
        self.state = state
        super().__init__(f"Card {card_id!r} has unrecognized state {state!r}")
