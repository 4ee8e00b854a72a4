"""Shared fakes for playback tests: a manual scheduler and an in-memory API."""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import pytest

from contracts.errors import FetchFailure, LoadFailure
from playback import events
from playback.step import Grid, Step, freeze_grid


class ManualHandle:
    def __init__(self, when: float, callback: Callable[..., Any], args: Tuple[Any, ...]) -> None:
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def run(self) -> None:
        self.callback(*self.args)


class ManualScheduler:
    """``call_later`` implementation driven explicitly by the test."""

    def __init__(self) -> None:
        self.now = 0.0
        self._handles: List[ManualHandle] = []

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> ManualHandle:
        handle = ManualHandle(self.now + delay, callback, args)
        self._handles.append(handle)
        return handle

    def pending(self) -> List[ManualHandle]:
        return [handle for handle in self._handles if not handle.cancelled]

    def advance(self, seconds: float) -> int:
        """Run every due callback up to ``now + seconds``; returns how many fired."""

        target = self.now + seconds
        fired = 0
        while True:
            due = [h for h in self.pending() if h.when <= target]
            if not due:
                break
            handle = min(due, key=lambda h: h.when)
            self._handles.remove(handle)
            self.now = handle.when
            handle.run()
            fired += 1
        self.now = target
        return fired


def blank_grid(size: int = 9) -> Grid:
    return freeze_grid([[0] * size for _ in range(size)])


def filled_grid(value: int, size: int = 9) -> Grid:
    return freeze_grid([[value] * size for _ in range(size)])


class FakeApi:
    """Synchronous stand-in for :class:`ports.sudoku_api.SudokuApiClient`."""

    def __init__(
        self,
        *,
        catalog: Optional[Mapping[str, Sequence[str]]] = None,
        grids: Optional[Dict[Tuple[str, str], Grid]] = None,
        steps: Optional[Dict[Tuple[str, str], Sequence[Step]]] = None,
    ) -> None:
        self.catalog = dict(catalog or {})
        self.grids = dict(grids or {})
        self.steps = dict(steps or {})
        self.fail_catalog = False
        self.fail_grids: set = set()
        self.fail_steps: set = set()
        self.step_gate: Optional[threading.Event] = None
        self.grid_gates: Dict[Tuple[str, str], threading.Event] = {}
        self.grid_started = threading.Event()
        self.fetch_started = threading.Event()
        self.fetch_calls: List[Tuple[str, str]] = []
        self.grid_calls: List[Tuple[str, str]] = []
        self.closed = False

    def list_puzzles(self) -> Dict[str, Tuple[str, ...]]:
        if self.fail_catalog:
            raise LoadFailure("catalog offline", code="transport-error")
        return {k: tuple(v) for k, v in self.catalog.items()}

    def load_grid(self, difficulty: str, identifier: str) -> Grid:
        self.grid_calls.append((difficulty, identifier))
        key = (difficulty, identifier)
        gate = self.grid_gates.get(key)
        if gate is not None:
            self.grid_started.set()
            gate.wait(5.0)
        if key in self.fail_grids or key not in self.grids:
            raise LoadFailure(f"{difficulty}/{identifier}", code="not-found")
        return self.grids[key]

    def fetch_steps(self, difficulty: str, identifier: str) -> Tuple[Step, ...]:
        key = (difficulty, identifier)
        self.fetch_calls.append(key)
        self.fetch_started.set()
        if self.step_gate is not None:
            self.step_gate.wait(5.0)
        if key in self.fail_steps:
            raise FetchFailure("solver unavailable", code="http-error")
        return tuple(self.steps.get(key, ()))

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> "FakeApi":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def event_log(tmp_path):
    log_dir = tmp_path / "events"
    events.configure(log_dir)
    yield log_dir
    events.configure(None)
