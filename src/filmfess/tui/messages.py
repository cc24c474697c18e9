"""Custom Textual Message types for inter-widget communication.

Widgets never call controllers themselves: they post these messages and the
App forwards them to the Board's controllers. Controller snapshots flow back
down through the App's subscriptions.
"""

from __future__ import annotations

from textual.message import Message

from filmfess.models import MovieCandidate


class MovieQueryEdited(Message):
    """The user edited the text of a movie picker."""

    def __init__(self, picker_id: str, text: str) -> None:
        self.picker_id = picker_id
        self.text = text
        super().__init__()


class MovieChosen(Message):
    """The user confirmed one of a picker's candidates."""

    def __init__(self, picker_id: str, candidate: MovieCandidate) -> None:
        self.picker_id = picker_id
        self.candidate = candidate
        super().__init__()


class MovieCleared(Message):
    """The user dropped a picker's confirmed movie."""

    def __init__(self, picker_id: str) -> None:
        self.picker_id = picker_id
        super().__init__()


class DraftEdited(Message):
    """A compose form text field changed (``field`` is "message" or "recipient")."""

    def __init__(self, field: str, value: str) -> None:
        self.field = field
        self.value = value
        super().__init__()


class SubmitRequested(Message):
    """The user asked to publish the current draft."""
