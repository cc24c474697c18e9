"""TUI widget modules for the FilmFess board."""

from .compose_form import COMPOSE_PICKER_ID, ComposeForm
from .feed_list import ConfessionCard, FeedList
from .movie_picker import MoviePicker

__all__ = [
    "COMPOSE_PICKER_ID",
    "ComposeForm",
    "ConfessionCard",
    "FeedList",
    "MoviePicker",
]
