"""Step records produced by the remote CDCL solver."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from contracts.errors import PayloadValidationError

ASSIGN = "assign"
CONFLICT = "conflict"
BACKTRACK = "backtrack"
KNOWN_ACTIONS = frozenset({ASSIGN, CONFLICT, BACKTRACK})

EMPTY = 0
_EMPTY_MARKERS = (None, "", ".", "0")

Grid = Tuple[Tuple[int, ...], ...]
MutableGrid = List[List[int]]


def _normalise_cell(value: Any) -> int:
    if value in _EMPTY_MARKERS:
        return EMPTY
    if isinstance(value, bool):
        raise PayloadValidationError(f"cell value {value!r} is not a digit")
    if isinstance(value, int):
        if value < 0:
            raise PayloadValidationError(f"cell value {value} is negative")
        return value
    if isinstance(value, str) and value.isascii() and value.isdecimal():
        return int(value)
    raise PayloadValidationError(f"cell value {value!r} is not a digit")


def freeze_grid(rows: Iterable[Iterable[Any]]) -> Grid:
    """Return an immutable, normalised copy of *rows*."""

    return tuple(tuple(_normalise_cell(cell) for cell in row) for row in rows)


def thaw_grid(grid: Sequence[Sequence[int]]) -> MutableGrid:
    """Return a mutable deep copy of *grid*; never aliases the input rows."""

    return [list(row) for row in grid]


@dataclass(frozen=True, slots=True)
class HighlightedCell:
    """Cell and action of the step currently applied to the board."""

    row: int
    col: int
    action_type: str


@dataclass(frozen=True, slots=True)
class Step:
    """Immutable solver action.

    ``board_state`` is the full grid after the action, when the solver
    reported one.  Steps without it only move the highlight.
    """

    action_type: str
    row: int
    col: int
    board_state: Optional[Grid] = None
    value: Optional[int] = None
    note: Optional[str] = None

    @property
    def highlight(self) -> HighlightedCell:
        return HighlightedCell(self.row, self.col, self.action_type)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Step":
        board = payload.get("boardState")
        return cls(
            action_type=str(payload["actionType"]),
            row=int(payload["row"]),
            col=int(payload["col"]),
            board_state=freeze_grid(board) if board else None,
            value=payload.get("value"),
            note=payload.get("note"),
        )

    def to_payload(self) -> dict:
        payload: dict = {
            "actionType": self.action_type,
            "row": self.row,
            "col": self.col,
        }
        if self.board_state is not None:
            payload["boardState"] = [list(row) for row in self.board_state]
        if self.value is not None:
            payload["value"] = self.value
        if self.note is not None:
            payload["note"] = self.note
        return payload


def check_step_bounds(steps: Sequence[Step], size: int) -> None:
    """Raise :class:`PayloadValidationError` for steps outside a *size* x *size* grid."""

    for position, step in enumerate(steps):
        if not (0 <= step.row < size and 0 <= step.col < size):
            raise PayloadValidationError(
                f"step {position} targets r{step.row}c{step.col} outside a {size}x{size} grid"
            )
        if step.board_state is not None and (
            len(step.board_state) != size
            or any(len(row) != size for row in step.board_state)
        ):
            raise PayloadValidationError(f"step {position} boardState is not {size}x{size}")


def parse_steps(entries: Iterable[Mapping[str, Any]], *, size: int | None = None) -> Tuple[Step, ...]:
    """Build a step tuple from API entries, checking coordinates against *size*."""

    steps = tuple(Step.from_payload(entry) for entry in entries)
    if size is not None:
        check_step_bounds(steps, size)
    return steps


__all__ = [
    "ASSIGN",
    "BACKTRACK",
    "CONFLICT",
    "check_step_bounds",
    "EMPTY",
    "Grid",
    "HighlightedCell",
    "KNOWN_ACTIONS",
    "MutableGrid",
    "Step",
    "freeze_grid",
    "parse_steps",
    "thaw_grid",
]
