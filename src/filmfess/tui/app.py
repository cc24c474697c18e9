"""FilmFess TUI application.

Textual App with a browse screen and a compose screen. The App subscribes to
the Board's controller streams and re-renders widgets from their snapshots;
widget messages are forwarded to the controllers. The browse-by-name input
is debounced through an RxPY pipeline before it reaches the feed.
"""

from __future__ import annotations

import asyncio

from reactivex import operators as ops
from reactivex.scheduler.eventloop import AsyncIOScheduler
from reactivex.subject import Subject
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, ContentSwitcher, Footer, Header, Input, Static

from filmfess.constants import RECIPIENT_FILTER_DEBOUNCE_SECONDS
from filmfess.controllers.board import Board
from filmfess.controllers.feed import FeedSnapshot
from filmfess.models import ActiveView, FeedMode
from filmfess.telemetry import Telemetry, set_telemetry
from filmfess.tui.messages import (
    DraftEdited,
    MovieChosen,
    MovieCleared,
    MovieQueryEdited,
    SubmitRequested,
)
from filmfess.tui.providers import FilmfessCommands
from filmfess.tui.widgets import COMPOSE_PICKER_ID, ComposeForm, FeedList, MoviePicker

BROWSE_PICKER_ID = "browse-picker"


class FilmfessApp(App):
    """FilmFess interactive terminal board."""

    TITLE = "FilmFess"
    SUB_TITLE = "Anonymous confessions paired with the movies that capture how we feel"
    COMMANDS = App.COMMANDS | {FilmfessCommands}

    CSS = """
    #nav {
        height: 3;
        padding: 0 1;
    }

    #browse-controls {
        height: auto;
        padding: 0 1;
        border-bottom: solid $primary;
    }

    #mode-bar {
        height: 3;
    }

    #feed-summary {
        color: $text-muted;
        height: auto;
    }

    #status-bar {
        dock: bottom;
        height: 1;
        background: $primary-background;
        color: $text;
        padding: 0 1;
    }
    """

    BINDINGS = [
        ("ctrl+p", "command_palette", "Commands"),
        ("f1", "show_browse", "Browse"),
        ("f2", "show_create", "Share"),
        ("ctrl+r", "refresh_feed", "Refresh"),
        ("escape", "clear_filter", "Clear"),
    ]

    def __init__(self, board: Board, telemetry: Telemetry | None = None) -> None:
        """Initialize the app around an already-built Board.

        Args:
            board: Controllers for feed, compose form and view switching.
            telemetry: OTel tracing facade. Defaults to no-op if not provided.
        """
        super().__init__()
        self.board = board
        self.telemetry = telemetry if telemetry is not None else Telemetry.noop()
        set_telemetry(self.telemetry)
        self._recipient_subject: Subject = Subject()
        self._subscriptions: list = []

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="nav"):
            yield Button("Browse Confessions", id="nav-browse", variant="primary")
            yield Button("Share Yours", id="nav-create")
        with ContentSwitcher(initial="browse", id="views"):
            with Vertical(id="browse"):
                with Vertical(id="browse-controls"):
                    with Horizontal(id="mode-bar"):
                        yield Button("Search by Name", id="mode-recipient", variant="primary")
                        yield Button("Search by Movie", id="mode-movie")
                    yield Input(placeholder="Search for a name...", id="recipient-filter")
                    yield MoviePicker(id=BROWSE_PICKER_ID)
                    yield Static("", id="feed-summary")
                yield FeedList()
            yield ComposeForm()
        yield Static("Ready | Ctrl+P: Commands", id="status-bar")
        yield Footer()

    async def on_mount(self) -> None:
        """Wire controller streams to widgets and load the first page of the feed."""
        board = self.board
        self._subscriptions = [
            board.feed.observe().subscribe(on_next=self._render_feed),
            board.feed.movie_lookup.observe().subscribe(
                on_next=lambda snap: self.query_one(f"#{BROWSE_PICKER_ID}", MoviePicker).render_snapshot(snap)
            ),
            board.composer.observe().subscribe(
                on_next=lambda snap: self.query_one(ComposeForm).render_snapshot(snap)
            ),
            board.observe_view().subscribe(on_next=self._render_view),
        ]

        # Typing in the name filter: debounce, then query the feed
        scheduler = AsyncIOScheduler(asyncio.get_running_loop())
        self._subscriptions.append(
            self._recipient_subject.pipe(
                ops.debounce(RECIPIENT_FILTER_DEBOUNCE_SECONDS, scheduler=scheduler),
            ).subscribe(on_next=self._apply_recipient_filter)
        )

        self.telemetry.log.info("app mounted")
        self.run_worker(board.start(), group="feed")

    def on_unmount(self) -> None:
        """Dispose RxPY subscriptions on app shutdown."""
        for subscription in self._subscriptions:
            subscription.dispose()
        self._subscriptions = []

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _render_feed(self, snapshot: FeedSnapshot) -> None:
        by_movie = snapshot.mode is FeedMode.BY_MOVIE
        recipient_box = self.query_one("#recipient-filter", Input)
        recipient_box.display = not by_movie
        if by_movie and recipient_box.value:
            recipient_box.value = ""
        self.query_one(f"#{BROWSE_PICKER_ID}", MoviePicker).display = by_movie

        self.query_one("#mode-recipient", Button).variant = "default" if by_movie else "primary"
        self.query_one("#mode-movie", Button).variant = "primary" if by_movie else "default"

        summary = ""
        if snapshot.has_filter and not snapshot.is_loading:
            summary = snapshot.summary
        self.query_one("#feed-summary", Static).update(summary)

        self.query_one(FeedList).render_snapshot(snapshot)

        if snapshot.is_loading:
            status = "Loading..."
        else:
            status = f"{snapshot.count} confessions"
        self.query_one("#status-bar", Static).update(f"{status} | Ctrl+P: Commands")

    def _render_view(self, view: ActiveView) -> None:
        self.query_one("#views", ContentSwitcher).current = view.value
        browsing = view is ActiveView.BROWSE
        self.query_one("#nav-browse", Button).variant = "primary" if browsing else "default"
        self.query_one("#nav-create", Button).variant = "default" if browsing else "primary"

    # ------------------------------------------------------------------
    # Widget events
    # ------------------------------------------------------------------

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id != "recipient-filter":
            return
        # Cleared programmatically when entering movie mode; not a user filter
        if self.board.feed.snapshot.mode is not FeedMode.BY_RECIPIENT:
            return
        self._recipient_subject.on_next(event.value)

    def _apply_recipient_filter(self, text: str) -> None:
        if self.board.feed.snapshot.mode is not FeedMode.BY_RECIPIENT:
            return
        self.run_worker(self.board.feed.set_recipient_filter(text), group="feed")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id
        if button_id == "nav-browse":
            self.action_show_browse()
        elif button_id == "nav-create":
            self.action_show_create()
        elif button_id == "mode-recipient":
            self.action_mode_recipient()
        elif button_id == "mode-movie":
            self.action_mode_movie()

    def on_movie_query_edited(self, event: MovieQueryEdited) -> None:
        if event.picker_id == BROWSE_PICKER_ID:
            self.board.feed.on_movie_query_change(event.text)
        elif event.picker_id == COMPOSE_PICKER_ID:
            self.board.composer.on_movie_query_change(event.text)

    def on_movie_chosen(self, event: MovieChosen) -> None:
        self.telemetry.log.info(
            f"movie chosen picker={event.picker_id} id={event.candidate.id}"
        )
        if event.picker_id == BROWSE_PICKER_ID:
            self.run_worker(self.board.feed.select_movie(event.candidate), group="feed")
        elif event.picker_id == COMPOSE_PICKER_ID:
            self.board.composer.select_movie(event.candidate)

    def on_movie_cleared(self, event: MovieCleared) -> None:
        if event.picker_id == BROWSE_PICKER_ID:
            self.run_worker(self.board.feed.clear_movie(), group="feed")
        elif event.picker_id == COMPOSE_PICKER_ID:
            self.board.composer.clear_movie()

    def on_draft_edited(self, event: DraftEdited) -> None:
        if event.field == "message":
            self.board.composer.set_message(event.value)
        elif event.field == "recipient":
            self.board.composer.set_recipient(event.value)

    def on_submit_requested(self, event: SubmitRequested) -> None:
        self.action_submit()

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def action_show_browse(self) -> None:
        self.board.switch_view(ActiveView.BROWSE)

    def action_show_create(self) -> None:
        self.board.switch_view(ActiveView.CREATE)

    def action_mode_recipient(self) -> None:
        self.board.switch_view(ActiveView.BROWSE)
        self.run_worker(self.board.feed.set_mode(FeedMode.BY_RECIPIENT), group="feed")

    def action_mode_movie(self) -> None:
        self.board.switch_view(ActiveView.BROWSE)
        self.run_worker(self.board.feed.set_mode(FeedMode.BY_MOVIE), group="feed")

    def action_refresh_feed(self) -> None:
        self.run_worker(self.board.feed.refresh(), group="feed")

    def action_clear_filter(self) -> None:
        """Clear the active browse filter (name text or chosen movie)."""
        feed = self.board.feed
        if feed.snapshot.mode is FeedMode.BY_MOVIE:
            feed.on_movie_query_change("")
        else:
            self.query_one("#recipient-filter", Input).value = ""

    def action_submit(self) -> None:
        self.run_worker(self._submit(), group="submit")

    async def _submit(self) -> None:
        composer = self.board.composer
        with self.telemetry.span("submit.request", view=self.board.active_view.value) as span:
            record = await composer.submit()
            span.set(ok=record is not None)
        snapshot = composer.snapshot
        if record is not None:
            self.notify(snapshot.notice or "Shared")
        elif snapshot.submit_error:
            self.notify(snapshot.submit_error, severity="error")
        elif snapshot.validation_error:
            self.notify(snapshot.validation_error, severity="warning")
