"""Shared pytest fixtures for FilmFess tests.

Provides a scriptable in-memory movie catalog, a temporary SQLite record
store, and sample movies/confessions used across the controller, store and
TUI test modules.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from filmfess.models import MovieCandidate, NewConfession
from filmfess.store.sqlite import SqliteConfessionStore

# Short quiet period so debounce tests finish quickly
FAST_DEBOUNCE = 0.02


class FakeOracle:
    """In-memory movie catalog with per-query gating and failure injection.

    ``hold(query)`` returns an asyncio.Event; a search for that query blocks
    until the event is set, which lets tests control response order.
    """

    def __init__(self, catalog: dict[str, list[MovieCandidate]] | None = None) -> None:
        self.catalog = catalog or {}
        self.calls: list[str] = []
        self.failing: set[str] = set()
        self._gates: dict[str, asyncio.Event] = {}

    def hold(self, query: str) -> asyncio.Event:
        gate = asyncio.Event()
        self._gates[query] = gate
        return gate

    async def search(self, query: str) -> list[MovieCandidate]:
        self.calls.append(query)
        gate = self._gates.get(query)
        if gate is not None:
            await gate.wait()
        if query in self.failing:
            raise RuntimeError("catalog unavailable")
        return list(self.catalog.get(query, []))


@pytest.fixture
def fight_club() -> MovieCandidate:
    return MovieCandidate(id=550, title="Fight Club", poster_path="/fc.jpg", release_year="1999")


@pytest.fixture
def before_sunrise() -> MovieCandidate:
    return MovieCandidate(id=76, title="Before Sunrise", poster_path="/bs.jpg", release_year="1995")


@pytest.fixture
def oracle(fight_club: MovieCandidate, before_sunrise: MovieCandidate) -> FakeOracle:
    """Catalog that knows a handful of titles by exact query text."""
    return FakeOracle(
        {
            "fight": [fight_club],
            "fight club": [fight_club],
            "before": [before_sunrise],
            "before sunrise": [before_sunrise],
            "many": [
                MovieCandidate(id=1000 + i, title=f"Movie {i}", release_year=str(2000 + i))
                for i in range(15)
            ],
        }
    )


@pytest.fixture
async def store(tmp_path: Path) -> SqliteConfessionStore:
    """Connected SQLite store on a temporary file."""
    async with SqliteConfessionStore(str(tmp_path / "filmfess.db")) as s:
        yield s


@pytest.fixture
async def seeded_store(
    store: SqliteConfessionStore,
    fight_club: MovieCandidate,
    before_sunrise: MovieCandidate,
) -> SqliteConfessionStore:
    """Store holding four confessions, inserted oldest first.

    Recipients: Samantha (Fight Club), sam (Before Sunrise),
    Osama (Fight Club), Tom (Before Sunrise).
    """
    for message, recipient, movie in [
        ("You changed everything.", "Samantha", fight_club),
        ("Still thinking about that night.", "sam", before_sunrise),
        ("I never said thank you.", "Osama", fight_club),
        ("Sorry about the car.", "Tom", before_sunrise),
    ]:
        await store.insert_confession(NewConfession.create(message, recipient, movie))
    return store
