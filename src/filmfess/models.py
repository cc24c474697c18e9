"""Data models and enums for FilmFess."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping

from filmfess.constants import POSTER_SIZE_CARD, TMDB_IMAGE_BASE_URL


class FeedMode(str, Enum):
    """How the confession feed is being filtered."""

    BY_RECIPIENT = "recipient"
    BY_MOVIE = "movie"


class FeedStatus(str, Enum):
    """What the feed is currently able to show."""

    LOADING = "loading"
    READY = "ready"
    EMPTY = "empty"
    SELECT_MOVIE = "select_movie"


class ActiveView(str, Enum):
    """Top-level screen of the board."""

    BROWSE = "browse"
    CREATE = "create"


def poster_url(poster_path: str | None, size: str = POSTER_SIZE_CARD) -> str | None:
    """Build a full catalog image URL from a poster path fragment."""
    if not poster_path:
        return None
    return f"{TMDB_IMAGE_BASE_URL}/{size}{poster_path}"


@dataclass(frozen=True, slots=True)
class MovieRef:
    """The part of a movie persisted onto a confession."""

    id: int
    title: str
    poster_path: str | None = None


@dataclass(frozen=True, slots=True)
class MovieCandidate:
    """A movie offered by the catalog for the current lookup query."""

    id: int
    title: str
    poster_path: str | None = None
    release_year: str | None = None

    def to_ref(self) -> MovieRef:
        """Drop the transient fields, keeping what a confession stores."""
        return MovieRef(id=self.id, title=self.title, poster_path=self.poster_path)

    @property
    def display_year(self) -> str:
        return self.release_year or "N/A"


@dataclass(frozen=True, slots=True)
class NewConfession:
    """Insert payload for a confession.

    Build with :meth:`create` so that ``recipient_normalized`` is always
    derived from the trimmed recipient; name search relies on it.
    """

    message: str
    recipient: str
    recipient_normalized: str
    movie: MovieRef

    @classmethod
    def create(cls, message: str, recipient: str, movie: MovieRef | MovieCandidate) -> NewConfession:
        if isinstance(movie, MovieCandidate):
            movie = movie.to_ref()
        recipient = recipient.strip()
        return cls(
            message=message.strip(),
            recipient=recipient,
            recipient_normalized=recipient.lower(),
            movie=movie,
        )

    def to_row(self) -> dict[str, Any]:
        """Flatten into store column names."""
        return {
            "message": self.message,
            "recipient": self.recipient,
            "recipient_lower": self.recipient_normalized,
            "movie_id": self.movie.id,
            "movie_title": self.movie.title,
            "movie_poster_path": self.movie.poster_path,
        }


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value)
        # PostgREST emits a trailing "Z" on some deployments
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True, slots=True)
class ConfessionRecord:
    """A published confession as returned by the record store."""

    id: str
    message: str
    recipient: str
    recipient_normalized: str
    movie: MovieRef
    created_at: datetime

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> ConfessionRecord:
        """Build from a store row using the flat column names."""
        return cls(
            id=str(row["id"]),
            message=row["message"],
            recipient=row["recipient"],
            recipient_normalized=row["recipient_lower"],
            movie=MovieRef(
                id=int(row["movie_id"]),
                title=row["movie_title"],
                poster_path=row["movie_poster_path"],
            ),
            created_at=_parse_timestamp(row["created_at"]),
        )

    @property
    def display_date(self) -> str:
        """Creation date as e.g. ``"March 4, 2025"``."""
        return f"{self.created_at:%B} {self.created_at.day}, {self.created_at.year}"

    @property
    def poster_url(self) -> str | None:
        return poster_url(self.movie.poster_path)


@dataclass(frozen=True, slots=True)
class ConfessionQuery:
    """Filter for listing confessions.

    At most one of ``recipient_contains`` / ``movie_id`` is expected. The
    recipient term is matched as an unanchored substring of the normalized
    recipient and must already be lowercased. ``limit=None`` means uncapped.
    Results are always newest first.
    """

    recipient_contains: str | None = None
    movie_id: int | None = None
    limit: int | None = None
