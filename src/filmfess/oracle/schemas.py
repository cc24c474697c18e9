"""Pydantic models for the movie catalog search response.

Only the fields FilmFess uses are declared; everything else in the payload
is ignored.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from filmfess.models import MovieCandidate


class TmdbMovie(BaseModel):
    """One entry of ``/search/movie`` ``results``."""

    model_config = ConfigDict(extra="ignore")

    id: int
    title: str
    poster_path: str | None = None
    release_date: str | None = None

    def release_year(self) -> str | None:
        """Year part of ``release_date`` ("1999-10-15" -> "1999")."""
        if not self.release_date:
            return None
        year = self.release_date.split("-")[0]
        return year or None

    def to_candidate(self) -> MovieCandidate:
        return MovieCandidate(
            id=self.id,
            title=self.title,
            poster_path=self.poster_path or None,
            release_year=self.release_year(),
        )


class TmdbSearchResponse(BaseModel):
    """Body of ``GET /search/movie``; results are in catalog relevance order."""

    model_config = ConfigDict(extra="ignore")

    page: int = 1
    results: list[TmdbMovie] = Field(default_factory=list)
    total_results: int = 0
