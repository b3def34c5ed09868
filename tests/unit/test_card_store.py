"""
Unit tests for the SQLite card store.
"""

from dataclasses import replace
from datetime import date, datetime, timedelta, timezone

import pytest

from src.srs.card_store import DEFAULT_DECK_ID, CardStore, DailyProgress
from src.srs.cards import CardState, initialize
from src.srs.statistics import ReviewSessionRecord

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def new_card():
    def _make(card_id: str, **fields):
        fields.setdefault("deck_id", DEFAULT_DECK_ID)
        return initialize(id=card_id, created_at=NOW, **fields)

    return _make


class TestDecks:
    def test_default_deck_exists(self, store):
        deck = store.get_deck(DEFAULT_DECK_ID)

        assert deck is not None
        assert deck.name == "Default"
        assert [d.id for d in store.get_decks()] == [DEFAULT_DECK_ID]

    def test_create_deck(self, store):
        deck = store.create_deck("Spanish")

        assert store.get_deck(deck.id).name == "Spanish"
        assert len(store.get_decks()) == 2

    def test_default_deck_cannot_be_deleted(self, store):
        with pytest.raises(ValueError, match="Cannot delete default deck"):
            store.delete_deck(DEFAULT_DECK_ID)

    def test_delete_deck_removes_its_cards(self, store, new_card):
        deck = store.create_deck("Temp")
        store.add_card(new_card("t1", deck_id=deck.id))
        store.add_card(new_card("k1"))

        store.delete_deck(deck.id)

        assert store.get_deck(deck.id) is None
        assert [c.id for c in store.get_cards()] == ["k1"]


class TestCards:
    def test_add_and_get(self, store, new_card):
        card = new_card("c1", front="Q", back="A", tags=["x", "y"])
        store.add_card(card)

        assert store.get_card("c1") == card

    def test_add_to_missing_deck(self, store, new_card):
        with pytest.raises(KeyError):
            store.add_card(new_card("c1", deck_id="nope"))

    def test_get_missing_card(self, store):
        assert store.get_card("missing") is None

    def test_insertion_order_preserved(self, store, new_card):
        for card_id in ["z", "a", "m"]:
            store.add_card(new_card(card_id))

        assert [c.id for c in store.get_cards()] == ["z", "a", "m"]

    def test_update_persists_scheduling_state(self, store, new_card):
        card = store.add_card(new_card("c1"))
        reviewed = replace(
            card,
            state=CardState.REVIEW,
            interval=3,
            ease=2.35,
            reps=2,
            due_at=NOW + timedelta(days=3),
            last_review=NOW,
        )

        store.update_card(reviewed)

        assert store.get_card("c1") == reviewed

    def test_update_missing_card(self, store, new_card):
        with pytest.raises(KeyError):
            store.update_card(new_card("ghost"))

    def test_delete_card(self, store, new_card):
        store.add_card(new_card("c1"))
        store.delete_card("c1")

        assert store.get_cards() == []

    def test_cards_by_deck(self, store, new_card):
        deck = store.create_deck("Other")
        store.add_card(new_card("a"))
        store.add_card(new_card("b", deck_id=deck.id))

        assert [c.id for c in store.get_cards_by_deck(deck.id)] == ["b"]

    def test_search_and_tags(self, store, new_card):
        store.add_card(new_card("a", front="Photosynthesis", tags=["bio"]))
        store.add_card(new_card("b", front="Mitosis", tags=["bio", "cells"]))

        assert [c.id for c in store.search_cards("photo")] == ["a"]
        assert store.get_all_tags() == ["bio", "cells"]

    def test_tags_with_commas_round_trip(self, store, new_card):
        card = store.add_card(new_card("c1", tags=["c,c++", "lang"]))

        assert store.get_card("c1") == card
        assert store.get_all_tags() == ["c,c++", "lang"]


class TestSessionsAndProgress:
    def test_record_session(self, store):
        record = ReviewSessionRecord(
            id="s1",
            date=NOW.date(),
            cards_reviewed=5,
            cards_correct=4,
            duration_seconds=120,
            timestamp=NOW,
        )
        store.record_session(record)

        assert store.get_sessions() == [record]

    def test_daily_progress_upsert(self, store):
        day = date(2026, 1, 15)
        store.save_daily_progress(DailyProgress("default", day, 3, 30))
        store.save_daily_progress(DailyProgress("default", day, 7, 30))

        progress = store.get_daily_progress("default", day)

        assert progress.reviewed_count == 7
        assert not progress.is_completed

    def test_daily_progress_drops_old_days(self, store):
        store.save_daily_progress(DailyProgress("default", date(2026, 1, 14), 30, 30))
        store.save_daily_progress(DailyProgress("default", date(2026, 1, 15), 1, 30))

        assert store.get_daily_progress("default", date(2026, 1, 14)) is None


def test_file_backed_store_persists(tmp_path):
    db_path = tmp_path / "nested" / "cards.db"
    first = CardStore(db_path)
    first.add_card(initialize(id="c1", deck_id=DEFAULT_DECK_ID, created_at=NOW))
    first.close()

    second = CardStore(db_path)
    try:
        assert second.get_card("c1") is not None
        assert len(second.get_decks()) == 1
    finally:
        second.close()
