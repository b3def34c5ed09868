"""
SQLite Card Store.

Provides local persistence for the terminal front-end:
- Cards with their scheduling state
- Decks (a "default" deck always exists)
- Review session history for statistics
- Daily new-card progress per deck

Database location: ~/.recall/cards.db
"""

from __future__ import annotations

import json
import sqlite3
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path

from loguru import logger

from .cards import Card, utcnow
from .filters import all_tags, matches_query
from .statistics import ReviewSessionRecord

DEFAULT_DECK_ID = "default"

# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class Deck:
    """A named grouping of cards."""

    id: str
    name: str
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class DailyProgress:
    """New-card progress for one deck on one day."""

    deck_id: str
    date: date
    reviewed_count: int
    target_count: int

    @property
    def is_completed(self) -> bool:
        return self.reviewed_count >= self.target_count


# =============================================================================
# Card Store
# =============================================================================


class CardStore:
    """
    SQLite-backed storage for cards, decks, sessions and daily progress.

    Cards are stored as whole rows; the store never interprets scheduling
    fields, it only saves what the scheduler returned.
    """

    DEFAULT_DB_PATH = Path.home() / ".recall" / "cards.db"

    def __init__(self, db_path: Path | str | None = None):
        """
        Initialize the card store.

        Args:
            db_path: Custom database path (defaults to ~/.recall/cards.db),
                or ":memory:" for a throwaway store
        """
        if db_path == ":memory:":
            self.db_path: Path | str = db_path
        else:
            self.db_path = Path(db_path) if db_path else self.DEFAULT_DB_PATH
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn: sqlite3.Connection | None = None
        self._init_schema()
        self._ensure_default_deck()

        logger.info(f"CardStore initialized at {self.db_path}")

    @property
    def conn(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            self._conn = sqlite3.connect(str(self.db_path))
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def _init_schema(self) -> None:
        """Initialize database schema."""
        cursor = self.conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS decks (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                created_at TEXT NOT NULL
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS cards (
                id TEXT PRIMARY KEY,
                deck_id TEXT NOT NULL,
                front TEXT NOT NULL DEFAULT '',
                back TEXT NOT NULL DEFAULT '',
                tags TEXT NOT NULL DEFAULT '[]',  -- JSON array
                created_at TEXT NOT NULL,
                state TEXT NOT NULL DEFAULT 'new',
                interval INTEGER NOT NULL DEFAULT 0,
                ease REAL NOT NULL DEFAULT 2.5,
                reps INTEGER NOT NULL DEFAULT 0,
                lapses INTEGER NOT NULL DEFAULT 0,
                learning_step INTEGER NOT NULL DEFAULT 0,
                due_at TEXT NOT NULL,
                last_review TEXT,
                FOREIGN KEY (deck_id) REFERENCES decks(id)
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS review_sessions (
                id TEXT PRIMARY KEY,
                date TEXT NOT NULL,
                cards_reviewed INTEGER NOT NULL DEFAULT 0,
                cards_correct INTEGER NOT NULL DEFAULT 0,
                duration_seconds INTEGER NOT NULL DEFAULT 0,
                timestamp TEXT NOT NULL
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS daily_progress (
                deck_id TEXT NOT NULL,
                date TEXT NOT NULL,
                reviewed_count INTEGER NOT NULL DEFAULT 0,
                target_count INTEGER NOT NULL DEFAULT 0,
                PRIMARY KEY (deck_id, date)
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_cards_deck
            ON cards(deck_id)
        """)

        self.conn.commit()

    def _ensure_default_deck(self) -> None:
        if self.get_deck(DEFAULT_DECK_ID) is None:
            self.add_deck(Deck(id=DEFAULT_DECK_ID, name="Default"))

    # =========================================================================
    # Card Operations
    # =========================================================================

    @staticmethod
    def _row_to_card(row: sqlite3.Row) -> Card:
        data = dict(row)
        data["tags"] = json.loads(data["tags"] or "[]")
        return Card.from_dict(data)

    def add_card(self, card: Card) -> Card:
        """
        Insert a new card.

        Args:
            card: Card to store (its deck must exist)

        Returns:
            The stored card

        Raises:
            KeyError: the card's deck does not exist
        """
        if self.get_deck(card.deck_id) is None:
            raise KeyError(f"Deck not found: {card.deck_id}")
        self._write_card(card, insert=True)
        logger.debug(f"Added card {card.id} to deck {card.deck_id}")
        return card

    def update_card(self, card: Card) -> None:
        """
        Save the current state of an existing card.

        Raises:
            KeyError: no card with this id is stored
        """
        if self.get_card(card.id) is None:
            raise KeyError(f"Card not found: {card.id}")
        self._write_card(card, insert=False)

    def _write_card(self, card: Card, insert: bool) -> None:
        data = card.to_dict()
        data["tags"] = json.dumps(data["tags"])
        if insert:
            sql = """
                INSERT INTO cards (
                    id, deck_id, front, back, tags, created_at, state, interval,
                    ease, reps, lapses, learning_step, due_at, last_review
                ) VALUES (
                    :id, :deck_id, :front, :back, :tags, :created_at, :state, :interval,
                    :ease, :reps, :lapses, :learning_step, :due_at, :last_review
                )
            """
        else:
            sql = """
                UPDATE cards SET
                    deck_id = :deck_id, front = :front, back = :back, tags = :tags,
                    state = :state, interval = :interval, ease = :ease, reps = :reps,
                    lapses = :lapses, learning_step = :learning_step,
                    due_at = :due_at, last_review = :last_review
                WHERE id = :id
            """
        self.conn.execute(sql, data)
        self.conn.commit()

    def get_card(self, card_id: str) -> Card | None:
        cursor = self.conn.execute("SELECT * FROM cards WHERE id = ?", (card_id,))
        row = cursor.fetchone()
        return self._row_to_card(row) if row else None

    def get_cards(self) -> list[Card]:
        """All cards in insertion order."""
        cursor = self.conn.execute("SELECT * FROM cards ORDER BY rowid")
        return [self._row_to_card(row) for row in cursor.fetchall()]

    def get_cards_by_deck(self, deck_id: str) -> list[Card]:
        cursor = self.conn.execute(
            "SELECT * FROM cards WHERE deck_id = ? ORDER BY rowid", (deck_id,)
        )
        return [self._row_to_card(row) for row in cursor.fetchall()]

    def delete_card(self, card_id: str) -> None:
        self.conn.execute("DELETE FROM cards WHERE id = ?", (card_id,))
        self.conn.commit()

    def search_cards(self, query: str) -> list[Card]:
        """Cards whose front, back or tags contain the query (case-insensitive)."""
        return [card for card in self.get_cards() if matches_query(card, query)]

    def get_all_tags(self) -> list[str]:
        return all_tags(self.get_cards())

    # =========================================================================
    # Deck Operations
    # =========================================================================

    def add_deck(self, deck: Deck) -> Deck:
        self.conn.execute(
            "INSERT INTO decks (id, name, created_at) VALUES (?, ?, ?)",
            (deck.id, deck.name, deck.created_at.isoformat()),
        )
        self.conn.commit()
        return deck

    def create_deck(self, name: str) -> Deck:
        """Create a deck with a generated id."""
        return self.add_deck(Deck(id=str(uuid.uuid4()), name=name))

    def get_deck(self, deck_id: str) -> Deck | None:
        cursor = self.conn.execute("SELECT * FROM decks WHERE id = ?", (deck_id,))
        row = cursor.fetchone()
        if row is None:
            return None
        return Deck(
            id=row["id"],
            name=row["name"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def get_decks(self) -> list[Deck]:
        cursor = self.conn.execute("SELECT id FROM decks ORDER BY rowid")
        return [self.get_deck(row["id"]) for row in cursor.fetchall()]

    def delete_deck(self, deck_id: str) -> None:
        """
        Delete a deck and all its cards.

        Raises:
            ValueError: attempt to delete the default deck
        """
        if deck_id == DEFAULT_DECK_ID:
            raise ValueError("Cannot delete default deck")

        self.conn.execute("DELETE FROM cards WHERE deck_id = ?", (deck_id,))
        self.conn.execute("DELETE FROM decks WHERE id = ?", (deck_id,))
        self.conn.commit()
        logger.info(f"Deleted deck {deck_id}")

    # =========================================================================
    # Session Operations
    # =========================================================================

    def record_session(self, record: ReviewSessionRecord) -> None:
        self.conn.execute(
            """
            INSERT INTO review_sessions (
                id, date, cards_reviewed, cards_correct, duration_seconds, timestamp
            ) VALUES (?, ?, ?, ?, ?, ?)
        """,
            (
                record.id,
                record.date.isoformat(),
                record.cards_reviewed,
                record.cards_correct,
                record.duration_seconds,
                record.timestamp.isoformat(),
            ),
        )
        self.conn.commit()

    def get_sessions(self) -> list[ReviewSessionRecord]:
        cursor = self.conn.execute("SELECT * FROM review_sessions ORDER BY timestamp")
        return [
            ReviewSessionRecord(
                id=row["id"],
                date=date.fromisoformat(row["date"]),
                cards_reviewed=row["cards_reviewed"],
                cards_correct=row["cards_correct"],
                duration_seconds=row["duration_seconds"],
                timestamp=datetime.fromisoformat(row["timestamp"]),
            )
            for row in cursor.fetchall()
        ]

    # =========================================================================
    # Daily Progress Operations
    # =========================================================================

    def get_daily_progress(self, deck_id: str, day: date) -> DailyProgress | None:
        cursor = self.conn.execute(
            "SELECT * FROM daily_progress WHERE deck_id = ? AND date = ?",
            (deck_id, day.isoformat()),
        )
        row = cursor.fetchone()
        if row is None:
            return None
        return DailyProgress(
            deck_id=row["deck_id"],
            date=date.fromisoformat(row["date"]),
            reviewed_count=row["reviewed_count"],
            target_count=row["target_count"],
        )

    def save_daily_progress(self, progress: DailyProgress) -> None:
        """Upsert today's progress and drop entries from earlier days."""
        self.conn.execute(
            "DELETE FROM daily_progress WHERE date < ?", (progress.date.isoformat(),)
        )
        self.conn.execute(
            """
            INSERT INTO daily_progress (deck_id, date, reviewed_count, target_count)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(deck_id, date) DO UPDATE SET
                reviewed_count = excluded.reviewed_count,
                target_count = excluded.target_count
        """,
            (
                progress.deck_id,
                progress.date.isoformat(),
                progress.reviewed_count,
                progress.target_count,
            ),
        )
        self.conn.commit()
