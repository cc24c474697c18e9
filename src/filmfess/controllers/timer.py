"""Single-slot cancellable timer used for trailing-edge debouncing."""

from __future__ import annotations

import asyncio
from typing import Any, Callable


class CancellableTimer:
    """At most one pending callback; arming again replaces the previous one.

    The event loop handle is cancelled on re-arm, and a generation counter is
    checked when the callback fires, so a callback that was already queued by
    the loop when it was superseded is dropped as well.
    """

    def __init__(self, delay: float, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self.delay = delay
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None
        self._gen: int = 0

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def arm(self, callback: Callable[..., Any], *args: Any) -> None:
        """Schedule ``callback(*args)`` after ``delay`` seconds, replacing any pending call."""
        self.cancel()
        loop = self._loop or asyncio.get_running_loop()
        gen = self._gen
        self._handle = loop.call_later(self.delay, self._fire, gen, callback, args)

    def cancel(self) -> bool:
        """Drop the pending call. Returns True if one was pending."""
        self._gen += 1
        if self._handle is None:
            return False
        self._handle.cancel()
        self._handle = None
        return True

    def _fire(self, gen: int, callback: Callable[..., Any], args: tuple) -> None:
        if gen != self._gen:
            return
        self._handle = None
        callback(*args)
