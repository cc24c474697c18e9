"""Record store contract shared by the SQLite and REST back ends."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from filmfess.models import ConfessionQuery, ConfessionRecord, NewConfession


@runtime_checkable
class ConfessionStore(Protocol):
    """Filtered list + single insert over the confessions collection.

    Implementations raise :class:`~filmfess.exceptions.StoreError` for every
    failure and never create a record when an insert fails.
    """

    async def list_confessions(self, query: ConfessionQuery) -> list[ConfessionRecord]:
        """Return matching confessions, newest first."""
        ...

    async def insert_confession(self, confession: NewConfession) -> ConfessionRecord:
        """Insert one confession; the store assigns ``id`` and ``created_at``."""
        ...
