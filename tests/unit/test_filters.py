"""
Unit tests for tag and search filtering.
"""

import pytest

from src.srs.filters import CardFilter, all_tags, search_cards


@pytest.fixture
def cards(make_card):
    return [
        make_card("1", front="What is a closure?", back="A function with state", tags={"python"}),
        make_card("2", front="Capital of France", back="Paris", tags={"geo"}, deck_id="world"),
        make_card("3", front="List comprehension", back="[x for x in y]", tags={"python", "syntax"}),
    ]


def ids(result):
    return [card.id for card in result]


class TestSearch:
    def test_matches_front_case_insensitive(self, cards):
        assert ids(search_cards(cards, "CLOSURE")) == ["1"]

    def test_matches_back(self, cards):
        assert ids(search_cards(cards, "paris")) == ["2"]

    def test_matches_tag(self, cards):
        assert ids(search_cards(cards, "synt")) == ["3"]

    def test_no_match(self, cards):
        assert search_cards(cards, "haskell") == []


def test_all_tags_sorted_unique(cards):
    assert all_tags(cards) == ["geo", "python", "syntax"]


class TestCardFilter:
    def test_no_filters(self, cards):
        card_filter = CardFilter()

        assert not card_filter.has_active_filters
        assert card_filter.apply(cards) == cards
        assert card_filter.describe() == "No filters"

    def test_tag_filter(self, cards):
        assert ids(CardFilter(tag="python").apply(cards)) == ["1", "3"]

    def test_tag_and_query_combine(self, cards):
        card_filter = CardFilter(tag="python", query="list")

        assert ids(card_filter.apply(cards)) == ["3"]
        assert card_filter.describe() == "Tag: python | Search: list"

