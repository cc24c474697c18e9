"""Confession feed: browse published confessions by recipient or by movie."""

from __future__ import annotations

from dataclasses import dataclass

import reactivex as rx
from reactivex import operators as ops
from reactivex.subject import BehaviorSubject

from filmfess.constants import RECIPIENT_FEED_LIMIT
from filmfess.controllers.lookup import LookupController
from filmfess.models import ConfessionQuery, ConfessionRecord, FeedMode, FeedStatus, MovieCandidate
from filmfess.store.base import ConfessionStore
from filmfess.telemetry import Telemetry, get_telemetry


@dataclass(frozen=True)
class FeedSnapshot:
    """Read-only view of the feed for the presentation layer."""

    mode: FeedMode = FeedMode.BY_RECIPIENT
    recipient_filter: str = ""
    movie: MovieCandidate | None = None
    confessions: tuple[ConfessionRecord, ...] = ()
    status: FeedStatus = FeedStatus.LOADING

    @property
    def is_loading(self) -> bool:
        return self.status is FeedStatus.LOADING

    @property
    def count(self) -> int:
        return len(self.confessions)

    @property
    def has_filter(self) -> bool:
        if self.mode is FeedMode.BY_MOVIE:
            return self.movie is not None
        return bool(self.recipient_filter)

    @property
    def summary(self) -> str:
        """``"Found N confession(s)"`` line shown under an active filter."""
        noun = "confession" if self.count == 1 else "confessions"
        return f"Found {self.count} {noun}"

    @property
    def empty_hint(self) -> str:
        if self.has_filter:
            return "Try a different search term"
        return "Be the first to share your story"


class FeedController:
    """Owns retrieval and filtering of published confessions.

    Every store query carries a sequence token; when a newer query (filter
    edit, mode switch, refresh) has been issued since, the older response is
    dropped instead of overwriting the list. Store failures degrade to an
    empty feed and are logged, never raised.

    Args:
        store: Record store client.
        movie_lookup: Lookup session behind the browse-by-movie filter.
        recipient_limit: Cap for browse-by-name results.
        telemetry: Optional Telemetry; defaults to the active instance.
    """

    def __init__(
        self,
        store: ConfessionStore,
        movie_lookup: LookupController,
        *,
        recipient_limit: int = RECIPIENT_FEED_LIMIT,
        telemetry: Telemetry | None = None,
    ) -> None:
        self._store = store
        self.movie_lookup = movie_lookup
        self._recipient_limit = recipient_limit
        self._telemetry = telemetry

        self._mode = FeedMode.BY_RECIPIENT
        self._recipient_filter = ""
        self._movie: MovieCandidate | None = None
        self._confessions: tuple[ConfessionRecord, ...] = ()
        self._status = FeedStatus.LOADING
        self._seq = 0

        self._states = BehaviorSubject(self.snapshot)

    @property
    def tel(self) -> Telemetry:
        return self._telemetry if self._telemetry is not None else get_telemetry()

    @property
    def snapshot(self) -> FeedSnapshot:
        return FeedSnapshot(
            mode=self._mode,
            recipient_filter=self._recipient_filter,
            movie=self._movie,
            confessions=self._confessions,
            status=self._status,
        )

    def observe(self) -> rx.Observable:
        """Stream of snapshots, starting with the current one."""
        return self._states.pipe(ops.distinct_until_changed())

    def _publish(self) -> None:
        self._states.on_next(self.snapshot)

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    async def list(
        self,
        mode: FeedMode,
        filter_value: str | MovieCandidate | None = None,
    ) -> tuple[ConfessionRecord, ...]:
        """Load the feed for ``mode`` filtered by ``filter_value``.

        ``BY_RECIPIENT`` takes free text (substring of the lowercased
        recipient, newest 50; blank means unfiltered). ``BY_MOVIE`` takes a
        MovieCandidate, which also becomes the movie picker's confirmed
        selection (all confessions for it, newest first); without one the
        feed is empty with status ``SELECT_MOVIE``.

        Returns:
            The confessions now displayed, or ``()`` if this response was
            superseded before it arrived.
        """
        if mode is not self._mode:
            self._switch_mode(mode)

        self._seq += 1
        token = self._seq

        if mode is FeedMode.BY_MOVIE:
            if not isinstance(filter_value, MovieCandidate):
                self._movie = None
                self._confessions = ()
                self._status = FeedStatus.SELECT_MOVIE
                self._publish()
                return ()
            if self.movie_lookup.snapshot.selection != filter_value:
                self.movie_lookup.on_select(filter_value)
            self._movie = filter_value
            query = ConfessionQuery(movie_id=filter_value.id)
        else:
            text = filter_value if isinstance(filter_value, str) else ""
            self._recipient_filter = text
            query = ConfessionQuery(
                recipient_contains=text.lower() or None,
                limit=self._recipient_limit,
            )

        self._status = FeedStatus.LOADING
        self._publish()

        with self.tel.span("feed.list", mode=mode.value, token=token) as span:
            try:
                records = await self._store.list_confessions(query)
            except Exception as exc:
                records = []
                span.fail(exc)
                self.tel.log.error(f"feed query failed mode={mode.value} error={exc!r}")

            if token != self._seq:
                span.set(stale=True)
                self.tel.log.debug(
                    f"stale feed response discarded token={token} latest={self._seq}"
                )
                return ()

            span.set(stale=False, result_count=len(records))
            self._confessions = tuple(records)
            self._status = FeedStatus.READY if records else FeedStatus.EMPTY
            self._publish()
            return self._confessions

    async def refresh(self) -> tuple[ConfessionRecord, ...]:
        """Re-run the current mode's query."""
        if self._mode is FeedMode.BY_MOVIE:
            return await self.list(FeedMode.BY_MOVIE, self._movie)
        return await self.list(FeedMode.BY_RECIPIENT, self._recipient_filter)

    async def set_mode(self, mode: FeedMode) -> tuple[ConfessionRecord, ...]:
        """Switch browse mode, dropping the other mode's filter and results."""
        if mode is self._mode:
            return self._confessions
        self._switch_mode(mode)
        return await self.refresh()

    # ------------------------------------------------------------------
    # Filter inputs
    # ------------------------------------------------------------------

    async def set_recipient_filter(self, text: str) -> tuple[ConfessionRecord, ...]:
        return await self.list(FeedMode.BY_RECIPIENT, text)

    def on_movie_query_change(self, text: str) -> None:
        """Forward a movie filter edit; any confirmed movie is dropped with the list."""
        if self._mode is not FeedMode.BY_MOVIE:
            self._switch_mode(FeedMode.BY_MOVIE)
        self.movie_lookup.on_query_change(text)
        self._seq += 1
        self._movie = None
        self._confessions = ()
        self._status = FeedStatus.SELECT_MOVIE
        self._publish()

    async def select_movie(self, candidate: MovieCandidate) -> tuple[ConfessionRecord, ...]:
        return await self.list(FeedMode.BY_MOVIE, candidate)

    async def clear_movie(self) -> tuple[ConfessionRecord, ...]:
        """Drop the movie filter but keep its text in the input for re-editing."""
        self.movie_lookup.on_clear_selection(clear_query=False)
        return await self.list(FeedMode.BY_MOVIE, None)

    def close(self) -> None:
        self.movie_lookup.close()
        self._states.on_completed()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _switch_mode(self, mode: FeedMode) -> None:
        self._seq += 1
        self._mode = mode
        self._confessions = ()
        if mode is FeedMode.BY_RECIPIENT:
            self.movie_lookup.reset()
            self._movie = None
            self._status = FeedStatus.LOADING
        else:
            self._recipient_filter = ""
            self._status = FeedStatus.SELECT_MOVIE
        self.tel.log.info(f"feed mode switched mode={mode.value}")
        self._publish()
