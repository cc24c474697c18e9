"""Confession record store back ends."""

from __future__ import annotations

from typing import TYPE_CHECKING

from filmfess.store.base import ConfessionStore
from filmfess.store.rest import RestConfessionStore
from filmfess.store.sqlite import SqliteConfessionStore

if TYPE_CHECKING:
    from filmfess.config import FilmfessConfig

__all__ = [
    "ConfessionStore",
    "RestConfessionStore",
    "SqliteConfessionStore",
    "open_store",
]


def open_store(config: FilmfessConfig) -> SqliteConfessionStore | RestConfessionStore:
    """Build the store back end selected by ``config.store_backend``.

    The result is an async context manager; enter it before use.
    """
    if config.store_backend == "rest":
        from filmfess.config import get_store_api_key

        return RestConfessionStore(config.rest_url or "", api_key=get_store_api_key())
    return SqliteConfessionStore(str(config.db_path))
