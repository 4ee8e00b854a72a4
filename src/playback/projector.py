"""Pure projection of playback state into renderable board views."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .controller import PlaybackSnapshot
from .step import EMPTY, HighlightedCell, Step


@dataclass(frozen=True)
class CellView:
    row: int
    col: int
    value: int
    action_type: Optional[str] = None

    @property
    def empty(self) -> bool:
        return self.value == EMPTY

    @property
    def highlighted(self) -> bool:
        return self.action_type is not None


@dataclass(frozen=True)
class BoardView:
    """Everything a renderer needs to draw one frame."""

    size: int
    cells: Tuple[CellView, ...]
    highlight: Optional[HighlightedCell]

    def cell(self, row: int, col: int) -> CellView:
        return self.cells[row * self.size + col]

    def rows(self) -> Tuple[Tuple[CellView, ...], ...]:
        return tuple(
            self.cells[start : start + self.size]
            for start in range(0, len(self.cells), self.size)
        )


def project(grid: Sequence[Sequence[int]], highlight: Optional[HighlightedCell]) -> BoardView:
    """Build a :class:`BoardView`; a highlight outside the grid is ignored."""

    size = len(grid)
    cells = []
    for row_index, row in enumerate(grid):
        for col_index, value in enumerate(row):
            action = None
            if highlight is not None and highlight.row == row_index and highlight.col == col_index:
                action = highlight.action_type
            cells.append(CellView(row_index, col_index, int(value), action))
    return BoardView(size=size, cells=tuple(cells), highlight=highlight)


def project_snapshot(snapshot: PlaybackSnapshot) -> BoardView:
    return project(snapshot.grid, snapshot.highlight)


def describe_step(index: Optional[int], count: int, step: Optional[Step]) -> str:
    """Caption for the step panel, e.g. ``Step 3/41: conflict at r1c2``."""

    if index is None or step is None:
        if count:
            return f"Ready: {count} solver steps loaded"
        return "No solver steps loaded"
    caption = f"Step {index + 1}/{count}: {step.action_type} at r{step.row + 1}c{step.col + 1}"
    if step.value is not None:
        caption += f" = {step.value}"
    if step.note:
        caption += f" ({step.note})"
    return caption


def describe_snapshot(snapshot: PlaybackSnapshot) -> str:
    return describe_step(snapshot.index, snapshot.step_count, snapshot.step)


__all__ = [
    "BoardView",
    "CellView",
    "describe_snapshot",
    "describe_step",
    "project",
    "project_snapshot",
]
