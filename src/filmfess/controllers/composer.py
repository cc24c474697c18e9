"""Composition form: draft state and validated, all-or-nothing submission."""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

import reactivex as rx
from reactivex import operators as ops
from reactivex.subject import BehaviorSubject

from filmfess.constants import MAX_MESSAGE_LENGTH, SUBMIT_FAILED_NOTICE, SUCCESS_NOTICE
from filmfess.controllers.lookup import LookupController, LookupSnapshot
from filmfess.exceptions import DraftValidationError
from filmfess.models import ConfessionRecord, MovieCandidate, NewConfession
from filmfess.store.base import ConfessionStore
from filmfess.telemetry import Telemetry, get_telemetry

SubmittedCallback = Callable[[ConfessionRecord], "Awaitable[Any] | None"]


def utf16_length(text: str) -> int:
    """Length in UTF-16 code units (astral characters count twice)."""
    return len(text.encode("utf-16-le")) // 2


def validate_draft(message: str, recipient: str, movie: MovieCandidate | None) -> None:
    """Check the submission rules in order; the first failure wins.

    Raises:
        DraftValidationError: With a user-facing message.
    """
    if not message.strip():
        raise DraftValidationError("Please write a message")
    if not recipient.strip():
        raise DraftValidationError("Please enter who this confession is for")
    if movie is None:
        raise DraftValidationError("Please choose a movie")
    if utf16_length(message) > MAX_MESSAGE_LENGTH:
        raise DraftValidationError(
            f"Message is too long (max {MAX_MESSAGE_LENGTH} characters)"
        )


@dataclass(frozen=True)
class DraftSnapshot:
    """Read-only view of the compose form."""

    message: str = ""
    recipient: str = ""
    movie_lookup: LookupSnapshot = LookupSnapshot()
    is_submitting: bool = False
    validation_error: str | None = None
    submit_error: str | None = None
    notice: str | None = None

    @property
    def message_length(self) -> int:
        return utf16_length(self.message)

    @property
    def counter(self) -> str:
        return f"{self.message_length}/{MAX_MESSAGE_LENGTH} characters"

    @property
    def movie(self) -> MovieCandidate | None:
        return self.movie_lookup.selection


class CompositionController:
    """Owns the draft of a new confession and its submission.

    Validation runs before any store call. A failed insert keeps the draft so
    nothing typed is lost; a successful one resets it and calls
    ``on_submitted`` with the stored record.

    Args:
        store: Record store client.
        movie_lookup: Lookup session behind the movie picker.
        on_submitted: Optional callback (sync or async) run after a
            successful insert.
        telemetry: Optional Telemetry; defaults to the active instance.
    """

    def __init__(
        self,
        store: ConfessionStore,
        movie_lookup: LookupController,
        *,
        on_submitted: SubmittedCallback | None = None,
        telemetry: Telemetry | None = None,
    ) -> None:
        self._store = store
        self.movie_lookup = movie_lookup
        self.on_submitted = on_submitted
        self._telemetry = telemetry

        self._message = ""
        self._recipient = ""
        self._submitting = False
        self._validation_error: str | None = None
        self._submit_error: str | None = None
        self._notice: str | None = None

        self._states = BehaviorSubject(self.snapshot)
        # Re-publish the draft whenever the picker's own state moves
        self._lookup_subscription = movie_lookup.observe().subscribe(
            on_next=lambda _: self._publish()
        )

    @property
    def tel(self) -> Telemetry:
        return self._telemetry if self._telemetry is not None else get_telemetry()

    @property
    def snapshot(self) -> DraftSnapshot:
        return DraftSnapshot(
            message=self._message,
            recipient=self._recipient,
            movie_lookup=self.movie_lookup.snapshot,
            is_submitting=self._submitting,
            validation_error=self._validation_error,
            submit_error=self._submit_error,
            notice=self._notice,
        )

    def observe(self) -> rx.Observable:
        return self._states.pipe(ops.distinct_until_changed())

    def _publish(self) -> None:
        self._states.on_next(self.snapshot)

    # ------------------------------------------------------------------
    # Draft edits
    # ------------------------------------------------------------------

    def set_message(self, text: str) -> None:
        self._message = text
        self._clear_feedback()
        self._publish()

    def set_recipient(self, text: str) -> None:
        self._recipient = text
        self._clear_feedback()
        self._publish()

    def on_movie_query_change(self, text: str) -> None:
        self._clear_feedback()
        self.movie_lookup.on_query_change(text)

    def select_movie(self, candidate: MovieCandidate) -> None:
        self._clear_feedback()
        self.movie_lookup.on_select(candidate)

    def clear_movie(self) -> None:
        """Drop the chosen movie and empty the movie search box."""
        self.movie_lookup.on_clear_selection(clear_query=True)

    def reset(self) -> None:
        self._message = ""
        self._recipient = ""
        self._validation_error = None
        self._submit_error = None
        self.movie_lookup.reset()
        self._publish()

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    async def submit(self) -> ConfessionRecord | None:
        """Validate and publish the draft.

        Returns:
            The stored record, or None when validation failed, the store
            rejected the insert, or a submission was already in flight.
        """
        if self._submitting:
            return None

        movie = self.movie_lookup.snapshot.selection
        try:
            validate_draft(self._message, self._recipient, movie)
        except DraftValidationError as exc:
            self._validation_error = str(exc)
            self._notice = None
            self.tel.log.info(f"draft rejected reason={exc}")
            self._publish()
            return None

        confession = NewConfession.create(self._message, self._recipient, movie)
        self._validation_error = None
        self._submit_error = None
        self._notice = None
        self._submitting = True
        self._publish()

        with self.tel.span(
            "submit.insert",
            movie_id=confession.movie.id,
            message_length=utf16_length(confession.message),
        ) as span:
            try:
                record = await self._store.insert_confession(confession)
            except Exception as exc:
                span.fail(exc, ok=False)
                self.tel.log.error(f"confession submit failed error={exc!r}")
                self._submitting = False
                self._submit_error = SUBMIT_FAILED_NOTICE
                self._publish()
                return None

            span.set(ok=True, record_id=record.id)

        self._submitting = False
        self._message = ""
        self._recipient = ""
        self.movie_lookup.reset()
        self._notice = SUCCESS_NOTICE
        self._publish()
        self.tel.log.info(f"confession submitted id={record.id}")

        if self.on_submitted is not None:
            result = self.on_submitted(record)
            if inspect.isawaitable(result):
                await result
        return record

    def close(self) -> None:
        self._lookup_subscription.dispose()
        self.movie_lookup.close()
        self._states.on_completed()

    def _clear_feedback(self) -> None:
        self._validation_error = None
        self._submit_error = None
        self._notice = None
