"""Tracing and JSON-lines logging for the FilmFess controllers.

Spans are named ``<area>.<action>`` (``lookup.fire``, ``feed.list``,
``submit.insert``). Keyword attributes are recorded under the span's area, so
``tel.span("feed.list", mode="movie", token=3)`` sets ``feed.mode`` and
``feed.token``. Log lines written while a span is current carry its trace and
span ids.
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Generator

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

LOGGER_NAME = "filmfess"

_NO_TRACE = "0" * 32
_NO_SPAN = "0" * 16


class OperationSpan:
    """A controller operation in progress; attribute keys get the area prefix."""

    def __init__(self, span: trace.Span, area: str) -> None:
        self._span = span
        self.area = area

    def set(self, **attributes: object) -> None:
        for key, value in attributes.items():
            self._span.set_attribute(f"{self.area}.{key}", value)

    def fail(self, exc: BaseException, **attributes: object) -> None:
        """Attach ``exc`` to the span and mark the operation as failed."""
        self._span.record_exception(exc)
        self.set(failed=True, **attributes)


class Telemetry:
    """Tracer plus the ``filmfess`` logger, handed to every controller."""

    def __init__(self, tracer: trace.Tracer) -> None:
        self._tracer = tracer
        self.log = logging.getLogger(LOGGER_NAME)

    @contextmanager
    def span(self, name: str, **attributes: object) -> Generator[OperationSpan, None, None]:
        area = name.split(".", 1)[0]
        with self._tracer.start_as_current_span(name) as otel_span:
            operation = OperationSpan(otel_span, area)
            operation.set(**attributes)
            yield operation

    @classmethod
    def for_testing(cls) -> tuple[Telemetry, InMemorySpanExporter]:
        """Return a Telemetry whose finished spans land in the returned exporter."""
        exporter = InMemorySpanExporter()
        provider = TracerProvider()
        provider.add_span_processor(SimpleSpanProcessor(exporter))
        return cls(provider.get_tracer(LOGGER_NAME)), exporter

    @classmethod
    def noop(cls) -> Telemetry:
        return cls(TracerProvider().get_tracer(LOGGER_NAME))


_active: Telemetry | None = None


def get_telemetry() -> Telemetry:
    """Return the active Telemetry, creating a no-op one on first use."""
    global _active
    if _active is None:
        _active = Telemetry.noop()
    return _active


def set_telemetry(tel: Telemetry) -> None:
    global _active
    _active = tel


class _JsonLineFormatter(logging.Formatter):
    """One JSON object per record, stamped with the span current at emit time."""

    def format(self, record: logging.LogRecord) -> str:
        ctx = trace.get_current_span().get_span_context()
        return json.dumps(
            {
                "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
                "level": record.levelname,
                "logger": record.name,
                "trace": format(ctx.trace_id, "032x") if ctx.is_valid else _NO_TRACE,
                "span": format(ctx.span_id, "016x") if ctx.is_valid else _NO_SPAN,
                "msg": record.getMessage(),
            },
            ensure_ascii=False,
        )


def configure_file_logging(log_dir: str = "logs") -> str:
    """Write the ``filmfess`` logger to ``{log_dir}/filmfess-YYYYMMDD.log``.

    The TUI owns the terminal while it runs, so this file is where lookup,
    feed and submit diagnostics go. Calling it again keeps the existing
    handler.

    Returns:
        The log file path.
    """
    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    log_path = str(directory / f"filmfess-{datetime.now():%Y%m%d}.log")

    logger = logging.getLogger(LOGGER_NAME)
    if any(isinstance(h, logging.FileHandler) for h in logger.handlers):
        return log_path

    handler = logging.FileHandler(log_path, encoding="utf-8")
    handler.setFormatter(_JsonLineFormatter())
    logger.setLevel(logging.DEBUG)
    logger.addHandler(handler)
    return log_path
