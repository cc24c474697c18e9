"""Top-level board: view switching and the wiring between controllers."""

from __future__ import annotations

import reactivex as rx
from reactivex import operators as ops
from reactivex.subject import BehaviorSubject

from filmfess.constants import LOOKUP_DEBOUNCE_SECONDS
from filmfess.controllers.composer import CompositionController
from filmfess.controllers.feed import FeedController
from filmfess.controllers.lookup import LookupController, MovieOracle
from filmfess.models import ActiveView, ConfessionRecord
from filmfess.store.base import ConfessionStore
from filmfess.telemetry import Telemetry, get_telemetry


class Board:
    """Owns the browse feed, the compose form and which of them is shown.

    The feed and the form each get their own lookup session over the same
    oracle, so their searches never interfere. A successful submission
    switches to the feed and refreshes it so the new confession is visible.

    Usage::

        board = Board(store, oracle)
        await board.start()
        board.switch_view(ActiveView.CREATE)
    """

    def __init__(
        self,
        store: ConfessionStore,
        oracle: MovieOracle,
        *,
        debounce_seconds: float = LOOKUP_DEBOUNCE_SECONDS,
        telemetry: Telemetry | None = None,
    ) -> None:
        self._telemetry = telemetry
        self.feed = FeedController(
            store,
            LookupController(
                oracle, name="browse", debounce_seconds=debounce_seconds, telemetry=telemetry
            ),
            telemetry=telemetry,
        )
        self.composer = CompositionController(
            store,
            LookupController(
                oracle, name="compose", debounce_seconds=debounce_seconds, telemetry=telemetry
            ),
            on_submitted=self._on_submitted,
            telemetry=telemetry,
        )
        self._active_view = ActiveView.BROWSE
        self._views = BehaviorSubject(self._active_view)

    @property
    def tel(self) -> Telemetry:
        return self._telemetry if self._telemetry is not None else get_telemetry()

    @property
    def active_view(self) -> ActiveView:
        return self._active_view

    def observe_view(self) -> rx.Observable:
        return self._views.pipe(ops.distinct_until_changed())

    def switch_view(self, view: ActiveView) -> None:
        if view is self._active_view:
            return
        self._active_view = view
        self.tel.log.info(f"view switched view={view.value}")
        self._views.on_next(view)

    async def start(self) -> None:
        """Load the initial feed (latest confessions, unfiltered)."""
        await self.feed.refresh()

    async def _on_submitted(self, record: ConfessionRecord) -> None:
        self.switch_view(ActiveView.BROWSE)
        await self.feed.refresh()

    def close(self) -> None:
        self.feed.close()
        self.composer.close()
        self._views.on_completed()
