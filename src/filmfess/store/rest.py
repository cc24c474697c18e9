"""Hosted record store client speaking the PostgREST (Supabase) dialect.

Maps the list/insert contract onto ``/rest/v1/confessions`` query strings:
``recipient_lower=ilike.*term*`` for name search, ``movie_id=eq.N`` for movie
search, ``order=created_at.desc`` and an optional ``limit``.
"""

from __future__ import annotations

import logging

import httpx

from filmfess.constants import CONFESSIONS_TABLE
from filmfess.exceptions import StoreError
from filmfess.models import ConfessionQuery, ConfessionRecord, NewConfession

logger = logging.getLogger(__name__)


def _escape_like(term: str) -> str:
    """Make LIKE metacharacters in a typed name match literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class RestConfessionStore:
    """Confession store on a hosted PostgREST endpoint.

    Usage::

        async with RestConfessionStore("https://xyz.supabase.co", api_key="...") as store:
            latest = await store.list_confessions(ConfessionQuery(limit=50))
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        *,
        table: str = CONFESSIONS_TABLE,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._endpoint = f"{base_url.rstrip('/')}/rest/v1/{table}"
        headers = {"Accept": "application/json"}
        if api_key:
            headers["apikey"] = api_key
            headers["Authorization"] = f"Bearer {api_key}"
        self._headers = headers
        self._owns_client = http_client is None
        # No request timeout; a slow call keeps its busy indicator on.
        self._http = (
            http_client if http_client is not None else httpx.AsyncClient(timeout=None)
        )

    async def close(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> RestConfessionStore:
        return self

    async def __aexit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.close()

    @staticmethod
    def build_params(query: ConfessionQuery) -> dict[str, str]:
        """Translate a ConfessionQuery into PostgREST query parameters."""
        params = {"select": "*", "order": "created_at.desc"}
        if query.recipient_contains:
            params["recipient_lower"] = f"ilike.*{_escape_like(query.recipient_contains)}*"
        if query.movie_id is not None:
            params["movie_id"] = f"eq.{query.movie_id}"
        if query.limit is not None:
            params["limit"] = str(query.limit)
        return params

    async def list_confessions(self, query: ConfessionQuery) -> list[ConfessionRecord]:
        try:
            response = await self._http.get(
                self._endpoint,
                params=self.build_params(query),
                headers=self._headers,
            )
            response.raise_for_status()
            rows = response.json()
            return [ConfessionRecord.from_row(row) for row in rows]
        except httpx.HTTPError as exc:
            raise StoreError("list", str(exc)) from exc
        except (ValueError, KeyError, TypeError) as exc:
            raise StoreError("list", f"unexpected response: {exc}") from exc

    async def insert_confession(self, confession: NewConfession) -> ConfessionRecord:
        headers = {**self._headers, "Prefer": "return=representation"}
        try:
            response = await self._http.post(
                self._endpoint,
                json=[confession.to_row()],
                headers=headers,
            )
            response.raise_for_status()
            rows = response.json()
            record = ConfessionRecord.from_row(rows[0])
        except httpx.HTTPError as exc:
            raise StoreError("insert", str(exc)) from exc
        except (ValueError, KeyError, TypeError, IndexError) as exc:
            raise StoreError("insert", f"unexpected response: {exc}") from exc

        logger.info("Stored confession %s for movie %s", record.id, record.movie.id)
        return record
