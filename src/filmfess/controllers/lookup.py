"""Type-ahead movie lookup: debounced catalog search with staleness handling.

One LookupController owns one lookup session (the browse filter and the
compose form each have their own). Keystrokes arrive through
``on_query_change``; only the last edit of a burst reaches the oracle, after
a quiet period. Responses are tagged with a sequence token when dispatched
and checked against the session when they arrive: a response whose token is
no longer the latest, whose query text has since been edited, or that lands
after a selection was confirmed is dropped. In-flight requests are never
aborted, only ignored.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Protocol, Sequence

import reactivex as rx
from reactivex import operators as ops
from reactivex.subject import BehaviorSubject

from filmfess.constants import LOOKUP_DEBOUNCE_SECONDS, MAX_CANDIDATES
from filmfess.controllers.timer import CancellableTimer
from filmfess.models import MovieCandidate
from filmfess.telemetry import Telemetry, get_telemetry


class MovieOracle(Protocol):
    """Anything that can turn free text into ranked movie candidates."""

    async def search(self, query: str) -> Sequence[MovieCandidate]: ...


@dataclass(frozen=True)
class LookupSnapshot:
    """Read-only view of a lookup session for the presentation layer."""

    query_text: str = ""
    candidates: tuple[MovieCandidate, ...] = ()
    selection: MovieCandidate | None = None
    is_searching: bool = False

    @property
    def has_selection(self) -> bool:
        return self.selection is not None


class LookupController:
    """Owns the debounced search workflow for a single input field.

    Args:
        oracle: Catalog search client.
        name: Session label used in logs and spans (e.g. ``"compose"``).
        debounce_seconds: Quiet period before a lookup is sent.
        max_candidates: Cap on the candidates kept from one response.
        telemetry: Optional Telemetry; defaults to the active instance.
    """

    def __init__(
        self,
        oracle: MovieOracle,
        *,
        name: str = "lookup",
        debounce_seconds: float = LOOKUP_DEBOUNCE_SECONDS,
        max_candidates: int = MAX_CANDIDATES,
        telemetry: Telemetry | None = None,
    ) -> None:
        self.name = name
        self._oracle = oracle
        self._max_candidates = max_candidates
        self._telemetry = telemetry
        self._timer = CancellableTimer(debounce_seconds)

        self._query_text = ""
        self._candidates: tuple[MovieCandidate, ...] = ()
        self._selection: MovieCandidate | None = None

        self._latest_token = 0
        self._searching_token: int | None = None
        self._tasks: set[asyncio.Task] = set()

        self._states = BehaviorSubject(self.snapshot)

    # ------------------------------------------------------------------
    # State exposure
    # ------------------------------------------------------------------

    @property
    def tel(self) -> Telemetry:
        return self._telemetry if self._telemetry is not None else get_telemetry()

    @property
    def snapshot(self) -> LookupSnapshot:
        return LookupSnapshot(
            query_text=self._query_text,
            candidates=self._candidates,
            selection=self._selection,
            is_searching=self._searching_token is not None,
        )

    def observe(self) -> rx.Observable:
        """Stream of snapshots, starting with the current one."""
        return self._states.pipe(ops.distinct_until_changed())

    @property
    def lookup_pending(self) -> bool:
        """True while a debounced lookup is scheduled but has not fired."""
        return self._timer.pending

    def _publish(self) -> None:
        self._states.on_next(self.snapshot)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def on_query_change(self, text: str) -> None:
        """Record an edit of the query text and (re)schedule a lookup.

        Editing always clears a confirmed selection. Blank text cancels any
        scheduled lookup and clears the candidates immediately.
        """
        self._query_text = text
        self._selection = None

        if not text.strip():
            self._timer.cancel()
            self._candidates = ()
            self._searching_token = None
            self._publish()
            return

        self._timer.arm(self._on_timer, text)
        self._publish()

    def _on_timer(self, text: str) -> None:
        task = asyncio.ensure_future(self.on_lookup_fire(text))
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self.tel.log.error(
                f"scheduled lookup crashed session={self.name} error={exc!r}",
                exc_info=exc,
            )

    async def on_lookup_fire(self, text: str) -> bool:
        """Send ``text`` to the oracle and apply the response unless stale.

        Returns:
            True if the response was applied to the session.
        """
        if not text.strip() or self._selection is not None:
            return False

        self._latest_token += 1
        token = self._latest_token
        self._searching_token = token
        self._publish()

        with self.tel.span(
            "lookup.fire", session=self.name, token=token, query_length=len(text)
        ) as span:
            try:
                results = list(await self._oracle.search(text))
            except Exception as exc:
                results = []
                span.fail(exc)
                self.tel.log.warning(
                    f"movie lookup failed session={self.name} query={text!r} error={exc!r}"
                )
            else:
                span.set(failed=False)

            if self._searching_token == token:
                self._searching_token = None

            if self._is_stale(token, text):
                span.set(stale=True)
                self.tel.log.debug(
                    f"stale lookup discarded session={self.name} query={text!r} "
                    f"token={token} latest={self._latest_token}"
                )
                self._publish()
                return False

            self._candidates = tuple(results[: self._max_candidates])
            span.set(stale=False, result_count=len(self._candidates))
            self.tel.log.info(
                f"lookup applied session={self.name} query={text!r} "
                f"result_count={len(self._candidates)}"
            )
            self._publish()
            return True

    async def search_now(self, text: str) -> bool:
        """Record ``text`` and look it up immediately, bypassing the debounce."""
        self._timer.cancel()
        self._query_text = text
        self._selection = None
        if not text.strip():
            self._candidates = ()
            self._searching_token = None
            self._publish()
            return False
        return await self.on_lookup_fire(text)

    def on_select(self, candidate: MovieCandidate) -> None:
        """Confirm ``candidate``: the input shows its title and candidates close."""
        self._timer.cancel()
        self._selection = candidate
        self._query_text = candidate.title
        self._candidates = ()
        self._searching_token = None
        self.tel.log.info(
            f"movie selected session={self.name} id={candidate.id} title={candidate.title!r}"
        )
        self._publish()

    def on_clear_selection(self, *, clear_query: bool) -> None:
        """Drop the confirmed selection.

        Args:
            clear_query: True empties the query text (compose form); False
                keeps it for re-editing (browse filter). No lookup is
                scheduled either way and earlier candidates are not restored.
        """
        self._timer.cancel()
        self._selection = None
        self._candidates = ()
        self._searching_token = None
        if clear_query:
            self._query_text = ""
        self._publish()

    def reset(self) -> None:
        """Return to an empty session; responses still in flight are ignored."""
        self._timer.cancel()
        self._latest_token += 1
        self._query_text = ""
        self._candidates = ()
        self._selection = None
        self._searching_token = None
        self._publish()

    async def drain(self) -> None:
        """Wait for every lookup already sent to the oracle to settle."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def close(self) -> None:
        """Cancel the pending timer and complete the snapshot stream."""
        self._timer.cancel()
        self._states.on_completed()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _is_stale(self, token: int, text: str) -> bool:
        return (
            token != self._latest_token
            or text != self._query_text
            or self._selection is not None
        )
