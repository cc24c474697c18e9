"""FilmFess: anonymous confessions paired with the movies that capture them."""

__version__ = "0.1.0"

from filmfess.models import (
    ActiveView,
    ConfessionRecord,
    FeedMode,
    FeedStatus,
    MovieCandidate,
    MovieRef,
    NewConfession,
)

__all__ = [
    "ActiveView",
    "ConfessionRecord",
    "FeedMode",
    "FeedStatus",
    "MovieCandidate",
    "MovieRef",
    "NewConfession",
    "__version__",
]
