"""Playback state machine for replaying solver steps."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, List, Optional, Sequence

from contracts.errors import IndexOutOfRange

from . import events
from .clock import PlaybackClock
from .step import Grid, HighlightedCell, MutableGrid, Step, freeze_grid, thaw_grid
from .step_store import StepStore


class PlaybackStatus(str, Enum):
    """Playback status; ``running`` and ``resumed`` are both *active*."""

    STOPPED = "stopped"
    RUNNING = "running"
    PAUSED = "paused"
    RESUMED = "resumed"

    @property
    def active(self) -> bool:
        return self in (PlaybackStatus.RUNNING, PlaybackStatus.RESUMED)


@dataclass(frozen=True)
class PlaybackSnapshot:
    """Read-only view of the controller state handed to the rendering layer."""

    grid: Grid
    highlight: Optional[HighlightedCell]
    status: PlaybackStatus
    index: Optional[int]
    step_count: int
    step: Optional[Step]


Listener = Callable[[PlaybackSnapshot], None]


class PlaybackController:
    """Sole owner of the playback index, status, displayed grid and highlight.

    All operations are synchronous and complete a whole transition (index
    update plus step application) before returning.  Boundary violations are
    no-ops reported through the boolean return value.
    """

    def __init__(
        self,
        clock: PlaybackClock | None = None,
        *,
        store: StepStore | None = None,
        grid: Sequence[Sequence[Any]] = (),
    ) -> None:
        self.clock = clock or PlaybackClock()
        self.store = store if store is not None else StepStore()
        self._initial_grid: Grid = freeze_grid(grid)
        self._grid: MutableGrid = thaw_grid(self._initial_grid)
        self._highlight: Optional[HighlightedCell] = None
        self._index: Optional[int] = None
        self._status = PlaybackStatus.STOPPED
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------------
    # Read surface
    # ------------------------------------------------------------------
    @property
    def status(self) -> PlaybackStatus:
        return self._status

    @property
    def index(self) -> Optional[int]:
        return self._index

    @property
    def highlight(self) -> Optional[HighlightedCell]:
        return self._highlight

    @property
    def grid(self) -> Grid:
        return freeze_grid(self._grid)

    @property
    def initial_grid(self) -> Grid:
        return self._initial_grid

    @property
    def step_count(self) -> int:
        return len(self.store)

    @property
    def current_step(self) -> Optional[Step]:
        if self._index is None:
            return None
        return self.store.step_at(self._index)

    def snapshot(self) -> PlaybackSnapshot:
        return PlaybackSnapshot(
            grid=self.grid,
            highlight=self._highlight,
            status=self._status,
            index=self._index,
            step_count=len(self.store),
            step=self.current_step,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener* for post-transition snapshots; returns an unsubscribe callable."""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def load_puzzle(self, grid: Sequence[Sequence[Any]]) -> None:
        """Install a fresh grid and reset playback to stopped with no steps."""

        self._halt()
        self.store.clear()
        self._initial_grid = freeze_grid(grid)
        self._reset_position()
        self._transition("load_puzzle", size=len(self._initial_grid))

    def load_steps(self, steps: Iterable[Step]) -> None:
        """Replace the step sequence; playback restarts from the initial grid."""

        self._halt()
        self.store.replace(steps)
        self._reset_position()
        self._transition("load_steps", step_count=len(self.store))

    def reset(self) -> None:
        """Drop steps and selection state while keeping the displayed grid."""

        self._halt()
        self.store.clear()
        self._index = None
        self._highlight = None
        self._status = PlaybackStatus.STOPPED
        self._transition("reset")

    def close(self) -> None:
        self._halt()
        if self._status.active:
            self._status = PlaybackStatus.STOPPED

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def start(self) -> bool:
        """Begin auto-play; returns ``True`` when playback is active afterwards."""

        if self._status.active:
            return True
        if not self.store:
            events.emit("playback.start_ignored", reason="no-steps")
            return False

        last = len(self.store) - 1
        if self._index is None:
            self._apply(0)
        elif self._status is PlaybackStatus.STOPPED and self._index >= last:
            # Finished run: replay from step 0.
            self._index = None
            self._apply(0)
        self._activate(PlaybackStatus.RUNNING)
        self._transition("start")
        return True

    def pause(self) -> bool:
        if not self._status.active:
            return False
        self.clock.stop_ticking()
        self._status = PlaybackStatus.PAUSED
        self._transition("pause")
        return True

    def resume(self) -> bool:
        if self._status is not PlaybackStatus.PAUSED:
            return False
        self._activate(PlaybackStatus.RESUMED)
        self._transition("resume")
        return True

    def step_forward(self) -> bool:
        """Manually advance one step; always leaves playback paused."""

        if self._index is None or self._index >= len(self.store) - 1:
            return False
        return self._manual_step(self._index + 1, "step_forward")

    def step_backward(self) -> bool:
        """Manually rewind one step; always leaves playback paused."""

        if self._index is None or self._index <= 0:
            return False
        return self._manual_step(self._index - 1, "step_backward")

    def tick(self) -> bool:
        """Advance on a clock firing; a no-op unless playback is active."""

        if not self._status.active or self._index is None:
            return False
        last = len(self.store) - 1
        if self._index < last:
            try:
                self._apply(self._index + 1)
            except IndexOutOfRange:
                self._finish()
                return False
            if self._index == last:
                self._finish()
            else:
                self._transition("tick")
            return True
        self._finish()
        return False

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _manual_step(self, target: int, op: str) -> bool:
        try:
            step = self.store.step_at(target)
        except IndexOutOfRange:
            return False
        self.clock.stop_ticking()
        self._status = PlaybackStatus.PAUSED
        self._apply_step(target, step)
        self._transition(op)
        return True

    def _activate(self, status: PlaybackStatus) -> None:
        self._status = status
        self.clock.start_ticking(self._on_tick)

    def _on_tick(self) -> None:
        self.tick()

    def _finish(self) -> None:
        self.clock.stop_ticking()
        self._status = PlaybackStatus.STOPPED
        self._transition("finished")

    def _halt(self) -> None:
        self.clock.stop_ticking()

    def _reset_position(self) -> None:
        self._grid = thaw_grid(self._initial_grid)
        self._index = None
        self._highlight = None
        self._status = PlaybackStatus.STOPPED

    def _apply(self, index: int) -> None:
        self._apply_step(index, self.store.step_at(index))

    def _apply_step(self, index: int, step: Step) -> None:
        if step.board_state is not None:
            self._grid = thaw_grid(step.board_state)
        elif self._index is None or index != self._index + 1:
            # Not a sequential advance: rebuild the grid as of ``index``.
            self._grid = thaw_grid(self._grid_at(index))
        self._index = index
        self._highlight = step.highlight

    def _grid_at(self, index: int) -> Grid:
        for position in range(index, -1, -1):
            board = self.store.step_at(position).board_state
            if board is not None:
                return board
        return self._initial_grid

    def _transition(self, op: str, **extra: Any) -> None:
        events.emit("playback.transition", op=op, status=self._status.value, index=self._index, **extra)
        if self._listeners:
            snapshot = self.snapshot()
            for listener in list(self._listeners):
                listener(snapshot)


__all__ = ["Listener", "PlaybackController", "PlaybackSnapshot", "PlaybackStatus"]
