"""Tests for draft validation and confession submission."""

from __future__ import annotations

import re
from unittest.mock import AsyncMock

import pytest

from filmfess.constants import SUBMIT_FAILED_NOTICE, SUCCESS_NOTICE
from filmfess.controllers.composer import (
    CompositionController,
    DraftSnapshot,
    utf16_length,
    validate_draft,
)
from filmfess.controllers.lookup import LookupController
from filmfess.exceptions import DraftValidationError, StoreError
from filmfess.models import ConfessionQuery
from filmfess.telemetry import Telemetry

from conftest import FAST_DEBOUNCE


def _composer(store, oracle, **kwargs) -> CompositionController:
    return CompositionController(
        store,
        LookupController(oracle, name="compose", debounce_seconds=FAST_DEBOUNCE),
        **kwargs,
    )


class TestUtf16Length:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [("", 0), ("abc", 3), ("é", 1), ("✨", 1), ("😀", 2), ("a😀b", 4)],
    )
    def test_counts_code_units(self, text, expected):
        assert utf16_length(text) == expected


class TestValidateDraft:
    @pytest.mark.parametrize(
        ("message", "recipient", "with_movie", "error"),
        [
            ("", "", False, "Please write a message"),
            ("   ", "Jordan", True, "Please write a message"),
            ("hi", "  ", False, "Please enter who this confession is for"),
            ("hi", "Jordan", False, "Please choose a movie"),
            ("x" * 1001, "Jordan", True, "Message is too long (max 1000 characters)"),
        ],
    )
    def test_first_failing_rule_wins(self, fight_club, message, recipient, with_movie, error):
        with pytest.raises(DraftValidationError, match=re.escape(error)):
            validate_draft(message, recipient, fight_club if with_movie else None)

    def test_exactly_limit_is_accepted(self, fight_club):
        validate_draft("x" * 1000, "Jordan", fight_club)

    def test_astral_characters_count_double(self, fight_club):
        with pytest.raises(DraftValidationError, match="too long"):
            validate_draft("😀" * 501, "Jordan", fight_club)


class TestSubmit:
    async def test_successful_submit_stores_normalized_record(self, store, oracle, fight_club):
        composer = _composer(store, oracle)
        composer.set_message("I still think about you.")
        composer.set_recipient("  Jordan  ")
        composer.select_movie(fight_club)

        record = await composer.submit()

        assert record is not None
        assert record.recipient == "Jordan"
        assert record.recipient_normalized == "jordan"
        assert record.movie.id == 550
        (stored,) = await store.list_confessions(ConfessionQuery())
        assert stored.id == record.id

    async def test_success_resets_draft_and_sets_notice(self, store, oracle, fight_club):
        composer = _composer(store, oracle)
        composer.set_message("hello")
        composer.set_recipient("Kai")
        composer.select_movie(fight_club)

        await composer.submit()

        snap = composer.snapshot
        assert snap.message == ""
        assert snap.recipient == ""
        assert snap.movie is None
        assert snap.movie_lookup.query_text == ""
        assert snap.notice == SUCCESS_NOTICE
        assert not snap.is_submitting

    async def test_validation_failure_makes_no_store_call(self, oracle, fight_club):
        store = AsyncMock()
        composer = _composer(store, oracle)
        composer.set_message("x" * 1001)
        composer.set_recipient("Kai")
        composer.select_movie(fight_club)

        assert await composer.submit() is None

        store.insert_confession.assert_not_awaited()
        snap = composer.snapshot
        assert snap.validation_error == "Message is too long (max 1000 characters)"
        assert snap.message == "x" * 1001
        assert snap.movie == fight_club

    async def test_missing_movie_is_rejected(self, oracle):
        store = AsyncMock()
        composer = _composer(store, oracle)
        composer.set_message("hello")
        composer.set_recipient("Kai")

        assert await composer.submit() is None
        assert composer.snapshot.validation_error == "Please choose a movie"
        store.insert_confession.assert_not_awaited()

    async def test_store_failure_keeps_draft(self, oracle, fight_club):
        store = AsyncMock()
        store.insert_confession.side_effect = StoreError("insert", "timeout")
        callback = AsyncMock()
        composer = _composer(store, oracle, on_submitted=callback)
        composer.set_message("  keep me  ")
        composer.set_recipient("Kai")
        composer.select_movie(fight_club)

        assert await composer.submit() is None

        snap = composer.snapshot
        assert snap.submit_error == SUBMIT_FAILED_NOTICE
        assert snap.message == "  keep me  "
        assert snap.recipient == "Kai"
        assert snap.movie == fight_club
        assert not snap.is_submitting
        callback.assert_not_awaited()

    async def test_retry_after_failure_succeeds(self, store, oracle, fight_club):
        flaky = AsyncMock()
        flaky.insert_confession.side_effect = StoreError("insert", "timeout")
        composer = _composer(flaky, oracle)
        composer.set_message("second try")
        composer.set_recipient("Kai")
        composer.select_movie(fight_club)
        await composer.submit()

        flaky.insert_confession.side_effect = store.insert_confession
        record = await composer.submit()

        assert record is not None
        assert composer.snapshot.submit_error is None

    async def test_on_submitted_receives_record(self, store, oracle, fight_club):
        received = []
        composer = _composer(store, oracle, on_submitted=received.append)
        composer.set_message("hello")
        composer.set_recipient("Kai")
        composer.select_movie(fight_club)

        record = await composer.submit()

        assert received == [record]

    async def test_submit_span_attributes(self, store, oracle, fight_club):
        tel, exporter = Telemetry.for_testing()
        composer = _composer(store, oracle, telemetry=tel)
        composer.set_message("hi ✨")
        composer.set_recipient("Kai")
        composer.select_movie(fight_club)

        await composer.submit()

        (span,) = exporter.get_finished_spans()
        assert span.name == "submit.insert"
        assert span.attributes["submit.movie_id"] == 550
        assert span.attributes["submit.message_length"] == 4
        assert span.attributes["submit.ok"] is True


class TestDraftState:
    async def test_counter_text(self, oracle):
        composer = _composer(AsyncMock(), oracle)
        composer.set_message("a😀")
        assert composer.snapshot.counter == "3/1000 characters"

    async def test_editing_clears_feedback(self, oracle):
        composer = _composer(AsyncMock(), oracle)
        await composer.submit()
        assert composer.snapshot.validation_error == "Please write a message"

        composer.set_message("h")
        assert composer.snapshot.validation_error is None

    async def test_picker_changes_republish_draft(self, oracle, fight_club):
        composer = _composer(AsyncMock(), oracle)
        seen: list[DraftSnapshot] = []
        composer.observe().subscribe(on_next=seen.append)

        composer.select_movie(fight_club)

        assert seen[-1].movie == fight_club
        assert seen[-1].movie_lookup.query_text == "Fight Club"

    async def test_clear_movie_empties_search_box(self, oracle, fight_club):
        composer = _composer(AsyncMock(), oracle)
        composer.select_movie(fight_club)
        composer.clear_movie()
        snap = composer.snapshot
        assert snap.movie is None
        assert snap.movie_lookup.query_text == ""

    async def test_reset(self, oracle, fight_club):
        composer = _composer(AsyncMock(), oracle)
        composer.set_message("m")
        composer.set_recipient("r")
        composer.select_movie(fight_club)
        composer.reset()
        snap = composer.snapshot
        assert (snap.message, snap.recipient, snap.movie) == ("", "", None)
