"""Framework-independent controllers behind the FilmFess screens.

Each controller owns its state, exposes it as an immutable snapshot plus a
reactivex stream, and can be instantiated and tested on its own.
"""

from filmfess.controllers.board import Board
from filmfess.controllers.composer import (
    CompositionController,
    DraftSnapshot,
    utf16_length,
    validate_draft,
)
from filmfess.controllers.feed import FeedController, FeedSnapshot
from filmfess.controllers.lookup import LookupController, LookupSnapshot, MovieOracle
from filmfess.controllers.timer import CancellableTimer

__all__ = [
    "Board",
    "CancellableTimer",
    "CompositionController",
    "DraftSnapshot",
    "FeedController",
    "FeedSnapshot",
    "LookupController",
    "LookupSnapshot",
    "MovieOracle",
    "utf16_length",
    "validate_draft",
]
