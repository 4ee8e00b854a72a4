"""Cooperative periodic ticker used to drive auto-play."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Optional, Protocol

DEFAULT_INTERVAL_S = 1.0


class TimerHandle(Protocol):
    def cancel(self) -> None:
        """Cancel the scheduled call."""


class Scheduler(Protocol):
    """Anything exposing ``call_later`` with asyncio loop semantics."""

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        """Schedule ``callback(*args)`` after *delay* seconds."""


class PlaybackClock:
    """Fires a callback once per ``interval`` until stopped.

    Every schedule carries a generation number.  ``stop_ticking`` bumps the
    generation, so a firing that was already queued by the scheduler when the
    clock was stopped is recognised as stale and dropped.
    """

    def __init__(self, interval: float = DEFAULT_INTERVAL_S, *, scheduler: Scheduler | None = None) -> None:
        if interval <= 0:
            raise ValueError("clock interval must be positive")
        self.interval = float(interval)
        self._scheduler = scheduler
        self._handle: Optional[TimerHandle] = None
        self._generation = 0

    @property
    def active(self) -> bool:
        return self._handle is not None

    def start_ticking(self, callback: Callable[[], None]) -> None:
        """Begin calling *callback* every interval, replacing any running schedule."""

        self.stop_ticking()
        self._schedule(self._generation, callback)

    def stop_ticking(self) -> None:
        """Cancel the current schedule; no callback fires after this returns."""

        self._generation += 1
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _resolve_scheduler(self) -> Scheduler:
        if self._scheduler is None:
            return asyncio.get_running_loop()
        return self._scheduler

    def _schedule(self, generation: int, callback: Callable[[], None]) -> None:
        self._handle = self._resolve_scheduler().call_later(
            self.interval, self._fire, generation, callback
        )

    def _fire(self, generation: int, callback: Callable[[], None]) -> None:
        if generation != self._generation:
            return
        # Re-arm before the callback so that stop_ticking() inside it wins.
        self._schedule(generation, callback)
        callback()


__all__ = ["DEFAULT_INTERVAL_S", "PlaybackClock", "Scheduler", "TimerHandle"]
