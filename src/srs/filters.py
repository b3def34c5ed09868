"""
Card filtering by tag and free-text search.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .cards import Card


def matches_query(card: Card, query: str) -> bool:
    """Case-insensitive match against front, back or any tag."""
    needle = query.lower()
    return (
        needle in card.front.lower()
        or needle in card.back.lower()
        or any(needle in tag.lower() for tag in card.tags)
    )


def search_cards(cards: Iterable[Card], query: str) -> list[Card]:
    """Cards whose front, back or tags contain the query."""
    return [card for card in cards if matches_query(card, query)]


def all_tags(cards: Iterable[Card]) -> list[str]:
    """Sorted unique tags across the given cards."""
    tags: set[str] = set()
    for card in cards:
        tags.update(card.tags)
    return sorted(tags)


@dataclass
class CardFilter:
    """
    Active tag filter and search query.

    Both criteria are optional; when both are set a card must satisfy both.
    """

    tag: str | None = None
    query: str | None = None

    @property
    def has_active_filters(self) -> bool:
        return self.tag is not None or self.query is not None

    def apply(self, cards: Iterable[Card]) -> list[Card]:
        """Filter cards, preserving input order."""
        result = list(cards)
        if self.tag is not None:
            result = [card for card in result if self.tag in card.tags]
        if self.query is not None:
            result = search_cards(result, self.query)
        return result

    def describe(self) -> str:
        """Human-readable summary, e.g. "Tag: python | Search: loop"."""
        parts = []
        if self.tag:
            parts.append(f"Tag: {self.tag}")
        if self.query:
            parts.append(f"Search: {self.query}")
        return " | ".join(parts) if parts else "No filters"
