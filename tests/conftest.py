"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.srs.card_store import CardStore  # noqa: E402
from src.srs.cards import Card, CardState  # noqa: E402

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


class FakeClock:
    """Controllable clock for deterministic scheduling."""

    def __init__(self, start: datetime = NOW):
        self.now = start
        self.calls = 0

    def __call__(self) -> datetime:
        self.calls += 1
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_card():
    """Factory for cards in any state, due at NOW unless overridden."""

    def _make(card_id: str = "card-1", state: CardState = CardState.NEW, **fields) -> Card:
        fields.setdefault("created_at", NOW - timedelta(days=30))
        fields.setdefault("due_at", NOW)
        return Card(id=card_id, state=state, **fields)

    return _make


@pytest.fixture
def store():
    """In-memory card store."""
    card_store = CardStore(":memory:")
    yield card_store
    card_store.close()
