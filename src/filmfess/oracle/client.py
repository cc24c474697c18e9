"""Movie catalog (TMDB) search client.

Provides an async client for ``GET /search/movie``. Search is an enhancement,
not a required path: every transport, status or parse failure is logged and
turned into an empty result list.
"""

from __future__ import annotations

import logging

import httpx

from filmfess.constants import MAX_CANDIDATES, TMDB_BASE_URL, TMDB_DEFAULT_LANGUAGE
from filmfess.models import MovieCandidate
from filmfess.oracle.schemas import TmdbSearchResponse

logger = logging.getLogger(__name__)


class TmdbSearchClient:
    """Client for the TMDB movie search endpoint.

    Usage::

        async with TmdbSearchClient(api_key="...") as oracle:
            candidates = await oracle.search("fight club")

    An ``http_client`` may be injected (tests pass one built on
    ``httpx.MockTransport``); the client then does not own it and
    ``aclose()`` leaves it open.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = TMDB_BASE_URL,
        language: str = TMDB_DEFAULT_LANGUAGE,
        max_results: int = MAX_CANDIDATES,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._language = language
        self._max_results = max_results
        self._owns_client = http_client is None
        # No request timeout; a slow call keeps its busy indicator on.
        self._http = (
            http_client if http_client is not None else httpx.AsyncClient(timeout=None)
        )

    async def search(self, query: str) -> list[MovieCandidate]:
        """Search the catalog for movies matching ``query``.

        Args:
            query: Free text as typed. Blank input short-circuits without a
                network call.

        Returns:
            Up to ``max_results`` candidates in the catalog's relevance order;
            empty on any failure.
        """
        if not query.strip():
            return []

        try:
            response = await self._http.get(
                f"{self._base_url}/search/movie",
                params={
                    "api_key": self._api_key,
                    "query": query,
                    "language": self._language,
                },
            )
            response.raise_for_status()
            payload = TmdbSearchResponse.model_validate(response.json())
        except httpx.HTTPError as exc:
            logger.warning("Movie search request failed for %r: %s", query, exc)
            return []
        except ValueError as exc:
            # Covers JSON decode errors and pydantic ValidationError
            logger.warning("Movie search response unreadable for %r: %s", query, exc)
            return []

        candidates = [movie.to_candidate() for movie in payload.results[: self._max_results]]
        logger.debug("Movie search %r -> %d candidates", query, len(candidates))
        return candidates

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> TmdbSearchClient:
        return self

    async def __aexit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.aclose()
