"""Puzzle session: binds a puzzle selection to the playback controller."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Tuple, TypeVar

from contracts.errors import FetchFailure, LoadFailure, PayloadValidationError

from . import events
from .controller import PlaybackController, PlaybackSnapshot
from .projector import BoardView, describe_snapshot, project_snapshot
from .step import Step, check_step_bounds

if TYPE_CHECKING:  # pragma: no cover
    from ports.sudoku_api import GridLoader, PuzzleCatalogSource, SolverStepSource

_T = TypeVar("_T")


@dataclass(frozen=True)
class PuzzleSelection:
    difficulty: str
    identifier: str


class PuzzleSession:
    """Coordinates puzzle loading, step fetching and the playback controller.

    External calls run off the event loop via :func:`asyncio.to_thread` and
    resume on it.  Every selection change bumps a generation counter; results
    that come back for an older generation are discarded.
    """

    def __init__(
        self,
        controller: PlaybackController,
        *,
        catalog: "PuzzleCatalogSource",
        grids: "GridLoader",
        steps: "SolverStepSource",
    ) -> None:
        self.controller = controller
        self._catalog_source = catalog
        self._grids = grids
        self._steps = steps
        self._catalog: Dict[str, Tuple[str, ...]] = {}
        self._selection: Optional[PuzzleSelection] = None
        self._steps_for: Optional[PuzzleSelection] = None
        self._generation = 0
        self._fetch_task: Optional[asyncio.Task] = None
        self._fetch_generation = -1

    # ------------------------------------------------------------------
    # Read surface
    # ------------------------------------------------------------------
    @property
    def selection(self) -> Optional[PuzzleSelection]:
        return self._selection

    @property
    def catalog(self) -> Dict[str, Tuple[str, ...]]:
        return dict(self._catalog)

    @property
    def steps_loaded(self) -> bool:
        return self._selection is not None and self._steps_for == self._selection

    def snapshot(self) -> PlaybackSnapshot:
        return self.controller.snapshot()

    def view(self) -> BoardView:
        return project_snapshot(self.controller.snapshot())

    def caption(self) -> str:
        return describe_snapshot(self.controller.snapshot())

    # ------------------------------------------------------------------
    # Puzzle selection
    # ------------------------------------------------------------------
    async def bootstrap(self) -> Optional[PuzzleSelection]:
        """Discover the catalog and auto-select its first puzzle."""

        try:
            catalog = await self._call(self._catalog_source.list_puzzles)
        except LoadFailure as exc:
            self._report("session.catalog_failed", exc)
            return None
        self._catalog = {str(k): tuple(v) for k, v in catalog.items()}
        for difficulty, identifiers in self._catalog.items():
            if identifiers:
                if await self.select_puzzle(difficulty, identifiers[0]):
                    return self._selection
                return None
        return None

    async def select_puzzle(self, difficulty: str, identifier: str) -> bool:
        """Load a new puzzle; returns ``False`` when the grid could not be loaded.

        Playback is stopped and cleared immediately.  On failure the previous
        grid and selection stay in place.
        """

        self._generation += 1
        generation = self._generation
        self._cancel_fetch()
        self.controller.reset()
        self._steps_for = None

        try:
            grid = await self._call(self._grids.load_grid, difficulty, identifier)
        except LoadFailure as exc:
            self._report("session.load_failed", exc, difficulty=difficulty, identifier=identifier)
            return False
        if generation != self._generation:
            events.emit("session.stale_grid", difficulty=difficulty, identifier=identifier)
            return False

        self.controller.load_puzzle(grid)
        self._selection = PuzzleSelection(difficulty, identifier)
        events.emit("session.selected", difficulty=difficulty, identifier=identifier)
        return True

    # ------------------------------------------------------------------
    # Playback
    # ------------------------------------------------------------------
    async def start(self) -> bool:
        """Fetch steps for the current selection if needed, then start playback."""

        if self.controller.status.active:
            return True
        selection = self._selection
        if selection is None:
            return False
        if self._steps_for != selection:
            generation = self._generation
            try:
                steps = await self._fetch_steps(selection, generation)
            except FetchFailure as exc:
                self.controller.close()
                self._report(
                    "session.fetch_failed",
                    exc,
                    difficulty=selection.difficulty,
                    identifier=selection.identifier,
                )
                return False
            except asyncio.CancelledError:
                if generation == self._generation:
                    raise
                return False
            if generation != self._generation:
                events.emit(
                    "session.stale_steps",
                    difficulty=selection.difficulty,
                    identifier=selection.identifier,
                )
                return False
            if self._steps_for != selection:
                self.controller.load_steps(steps)
                self._steps_for = selection
        return self.controller.start()

    def pause(self) -> bool:
        return self.controller.pause()

    def resume(self) -> bool:
        return self.controller.resume()

    def step_forward(self) -> bool:
        return self.controller.step_forward()

    def step_backward(self) -> bool:
        return self.controller.step_backward()

    def close(self) -> None:
        self._generation += 1
        self._cancel_fetch()
        self.controller.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    async def _fetch_steps(self, selection: PuzzleSelection, generation: int) -> Tuple[Step, ...]:
        # Concurrent start() calls for the same selection share one request.
        if self._fetch_task is None or self._fetch_generation != generation:
            self._fetch_task = asyncio.ensure_future(
                self._call(self._steps.fetch_steps, selection.difficulty, selection.identifier)
            )
            self._fetch_generation = generation
        task = self._fetch_task
        try:
            steps = tuple(await asyncio.shield(task))
        finally:
            if task.done() and self._fetch_task is task:
                self._fetch_task = None
        try:
            check_step_bounds(steps, len(self.controller.initial_grid))
        except PayloadValidationError as exc:
            raise FetchFailure(exc.detail, code="invalid-steps") from exc
        return steps

    def _cancel_fetch(self) -> None:
        if self._fetch_task is not None and not self._fetch_task.done():
            self._fetch_task.cancel()
        self._fetch_task = None

    @staticmethod
    async def _call(func: Callable[..., _T], *args: Any) -> _T:
        return await asyncio.to_thread(func, *args)

    @staticmethod
    def _report(event_name: str, exc: Exception, **extra: Any) -> None:
        events.emit(
            event_name,
            code=getattr(exc, "code", type(exc).__name__),
            detail=getattr(exc, "detail", str(exc)),
            **extra,
        )


__all__ = ["PuzzleSelection", "PuzzleSession"]
