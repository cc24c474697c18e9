"""Feed widgets: confession cards and the scrollable list that holds them."""

from __future__ import annotations

from rich.text import Text
from textual.containers import VerticalScroll
from textual.widgets import Static

from filmfess.controllers.feed import FeedSnapshot
from filmfess.models import ConfessionRecord, FeedStatus

SELECT_MOVIE_TEXT = "Select a movie to see its confessions"
NO_CONFESSIONS_TEXT = "No confessions yet"
LOADING_TEXT = "Loading confessions..."


class ConfessionCard(Static):
    """One published confession: recipient, movie, message and date."""

    DEFAULT_CSS = """
    ConfessionCard {
        padding: 1 2;
        margin: 0 0 1 0;
        background: $surface;
        border: solid $primary-background;
        height: auto;
    }
    ConfessionCard:hover {
        border: solid $accent;
    }
    """

    def __init__(self, confession: ConfessionRecord) -> None:
        self.confession = confession

        display = Text()
        display.append(f"To {confession.recipient}", style="bold")
        display.append("\n")
        display.append(confession.movie.title, style="italic cyan")
        display.append("\n\n")
        display.append(confession.message)
        display.append("\n\n")
        display.append(confession.display_date, style="dim")

        super().__init__(display)


class FeedList(VerticalScroll):
    """Scrollable list of confession cards with its empty and loading states.

    "Select a movie" and "No confessions yet" are different states and keep
    different texts.
    """

    DEFAULT_CSS = """
    FeedList {
        width: 100%;
        height: 1fr;
    }
    FeedList .feed-empty {
        text-align: center;
        color: $text-muted;
        padding: 2 1;
    }
    """

    def __init__(self) -> None:
        super().__init__(id="feed-list")
        self.feed_status: FeedStatus | None = None

    def render_snapshot(self, snapshot: FeedSnapshot) -> None:
        self.feed_status = snapshot.status
        self.remove_children()
        if snapshot.status is FeedStatus.LOADING:
            self.mount(Static(LOADING_TEXT, classes="feed-empty"))
        elif snapshot.status is FeedStatus.SELECT_MOVIE:
            self.mount(Static(SELECT_MOVIE_TEXT, classes="feed-empty feed-select-movie"))
        elif snapshot.status is FeedStatus.EMPTY:
            self.mount(
                Static(
                    f"{NO_CONFESSIONS_TEXT}\n{snapshot.empty_hint}",
                    classes="feed-empty feed-no-confessions",
                )
            )
        else:
            for confession in snapshot.confessions:
                self.mount(ConfessionCard(confession))
