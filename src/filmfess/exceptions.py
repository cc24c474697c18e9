"""Exception hierarchy for FilmFess.

Oracle failures never surface as exceptions (search degrades to no
results), so there is no oracle error type here.
"""

from __future__ import annotations


class FilmfessError(Exception):
    """Base class for all FilmFess errors."""


class StoreError(FilmfessError):
    """A record store list or insert call failed.

    Inserts are atomic: when this is raised from ``insert_confession`` no
    record was created.
    """

    def __init__(self, operation: str, detail: str) -> None:
        self.operation = operation
        self.detail = detail
        super().__init__(f"store {operation} failed: {detail}")


class DraftValidationError(FilmfessError):
    """A confession draft broke a submission rule.

    The message is user-facing and is shown as-is.
    """


class ConfigError(FilmfessError):
    """Required configuration (usually an API key) is missing or invalid."""
