"""Tests for the debounced movie lookup controller.

Covers debounce collapsing, staleness discard of out-of-order responses,
selection and clear semantics, failure handling and the candidate cap.
"""

from __future__ import annotations

import asyncio
import logging

from filmfess.controllers.lookup import LookupController, LookupSnapshot
from filmfess.telemetry import Telemetry

from conftest import FAST_DEBOUNCE, FakeOracle


def _controller(oracle, **kwargs) -> LookupController:
    return LookupController(oracle, debounce_seconds=FAST_DEBOUNCE, **kwargs)


async def _settle(controller: LookupController) -> None:
    await asyncio.sleep(FAST_DEBOUNCE * 3)
    await controller.drain()


class TestDebounce:
    async def test_only_last_query_of_burst_is_sent(self, oracle):
        lookup = _controller(oracle)
        for text in ["f", "fi", "fig", "figh", "fight"]:
            lookup.on_query_change(text)
        assert lookup.lookup_pending
        await _settle(lookup)

        assert oracle.calls == ["fight"]
        assert [c.title for c in lookup.snapshot.candidates] == ["Fight Club"]
        assert not lookup.snapshot.is_searching

    async def test_nothing_sent_before_quiet_period(self, oracle):
        lookup = LookupController(oracle, debounce_seconds=10)
        lookup.on_query_change("fight")
        await asyncio.sleep(0.02)
        assert oracle.calls == []
        lookup.close()

    async def test_blank_text_cancels_and_clears(self, oracle):
        lookup = _controller(oracle)
        await lookup.search_now("fight")
        assert lookup.snapshot.candidates

        lookup.on_query_change("fight c")
        lookup.on_query_change("   ")
        await _settle(lookup)

        assert oracle.calls == ["fight"]
        assert lookup.snapshot.candidates == ()
        assert not lookup.lookup_pending


class TestStaleness:
    async def test_slow_earlier_response_does_not_overwrite_newer(self, oracle, before_sunrise):
        lookup = _controller(oracle)
        gate = oracle.hold("fight")

        slow = asyncio.ensure_future(lookup.search_now("fight"))
        await asyncio.sleep(0)
        assert lookup.snapshot.is_searching

        assert await lookup.search_now("before") is True
        assert lookup.snapshot.candidates == (before_sunrise,)

        gate.set()
        assert await slow is False
        assert lookup.snapshot.candidates == (before_sunrise,)
        assert lookup.snapshot.query_text == "before"

    async def test_response_after_selection_is_discarded(self, oracle, fight_club):
        lookup = _controller(oracle)
        gate = oracle.hold("fight")
        pending = asyncio.ensure_future(lookup.search_now("fight"))
        await asyncio.sleep(0)

        lookup.on_select(fight_club)
        gate.set()
        assert await pending is False
        assert lookup.snapshot.candidates == ()
        assert lookup.snapshot.selection == fight_club

    async def test_response_after_text_edit_is_discarded(self, oracle):
        lookup = _controller(oracle)
        gate = oracle.hold("fight")
        pending = asyncio.ensure_future(lookup.on_lookup_fire("fight"))
        await asyncio.sleep(0)

        # The user keeps typing; the next lookup is still only scheduled
        lookup.on_query_change("fight cl")
        gate.set()
        assert await pending is False
        assert lookup.snapshot.candidates == ()
        lookup.close()

    async def test_reset_discards_in_flight_response(self, oracle):
        lookup = _controller(oracle)
        gate = oracle.hold("fight")
        pending = asyncio.ensure_future(lookup.search_now("fight"))
        await asyncio.sleep(0)

        lookup.reset()
        gate.set()
        assert await pending is False
        assert lookup.snapshot == LookupSnapshot()


class TestSelection:
    async def test_select_sets_title_and_clears_candidates(self, oracle, fight_club):
        lookup = _controller(oracle)
        await lookup.search_now("fight")
        lookup.on_select(fight_club)

        snap = lookup.snapshot
        assert snap.selection == fight_club
        assert snap.query_text == "Fight Club"
        assert snap.candidates == ()

    async def test_select_cancels_scheduled_lookup(self, oracle, fight_club):
        lookup = _controller(oracle)
        lookup.on_query_change("fight")
        lookup.on_select(fight_club)
        await _settle(lookup)
        assert oracle.calls == []

    async def test_editing_clears_selection(self, oracle, fight_club):
        lookup = _controller(oracle)
        lookup.on_select(fight_club)
        lookup.on_query_change("Fight Clu")
        assert lookup.snapshot.selection is None
        lookup.close()

    async def test_clear_keeping_query_does_not_restore_candidates(self, oracle, fight_club):
        lookup = _controller(oracle)
        await lookup.search_now("fight")
        lookup.on_select(fight_club)
        lookup.on_clear_selection(clear_query=False)

        snap = lookup.snapshot
        assert snap.selection is None
        assert snap.query_text == "Fight Club"
        assert snap.candidates == ()
        await _settle(lookup)
        assert oracle.calls == ["fight"]

    async def test_clear_with_query(self, oracle, fight_club):
        lookup = _controller(oracle)
        lookup.on_select(fight_club)
        lookup.on_clear_selection(clear_query=True)
        assert lookup.snapshot.query_text == ""

    async def test_fire_with_selection_is_a_no_op(self, oracle, fight_club):
        lookup = _controller(oracle)
        lookup.on_select(fight_club)
        assert await lookup.on_lookup_fire("fight") is False
        assert oracle.calls == []


class TestResults:
    async def test_candidates_capped_at_ten_in_oracle_order(self, oracle):
        lookup = _controller(oracle)
        await lookup.search_now("many")
        titles = [c.title for c in lookup.snapshot.candidates]
        assert titles == [f"Movie {i}" for i in range(10)]

    async def test_oracle_failure_degrades_to_empty(self, oracle):
        lookup = _controller(oracle)
        await lookup.search_now("fight")
        oracle.failing.add("fight club")

        assert await lookup.search_now("fight club") is True
        assert lookup.snapshot.candidates == ()
        assert not lookup.snapshot.is_searching

    async def test_failure_is_recorded_on_span(self):
        tel, exporter = Telemetry.for_testing()
        oracle = FakeOracle()
        oracle.failing.add("boom")
        lookup = LookupController(oracle, name="compose", telemetry=tel)

        await lookup.search_now("boom")

        (span,) = exporter.get_finished_spans()
        assert span.name == "lookup.fire"
        assert span.attributes["lookup.session"] == "compose"
        assert span.attributes["lookup.failed"] is True
        assert span.events[0].name == "exception"

    async def test_crash_in_scheduled_lookup_is_logged(self, oracle, monkeypatch, caplog):
        lookup = _controller(oracle, name="browse")
        lookup.on_query_change("fight")

        def _render_failed() -> None:
            raise RuntimeError("render failed")

        monkeypatch.setattr(lookup, "_publish", _render_failed)
        with caplog.at_level(logging.ERROR, logger="filmfess"):
            await _settle(lookup)
            await asyncio.sleep(0)

        (record,) = [r for r in caplog.records if "scheduled lookup crashed" in r.getMessage()]
        assert "session=browse" in record.getMessage()
        assert record.exc_info[0] is RuntimeError

    async def test_snapshot_stream_reports_searching(self, oracle):
        lookup = _controller(oracle)
        seen: list[LookupSnapshot] = []
        lookup.observe().subscribe(on_next=seen.append)

        await lookup.search_now("fight")

        assert seen[0] == LookupSnapshot()
        assert any(s.is_searching for s in seen)
        assert not seen[-1].is_searching
        assert seen[-1].candidates
