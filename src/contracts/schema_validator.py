"""JSON Schema validation for payloads returned by the puzzle API."""

from __future__ import annotations

from typing import Any, Mapping

from .errors import PayloadValidationError
from .loader import compiled_validator

PUZZLE_CATALOG = "PuzzleCatalog"
BOARD = "Board"
SOLVER_STEPS = "SolverSteps"


def _format_path(path: Any) -> str:
    parts = [str(part) for part in path]
    return "/" + "/".join(parts) if parts else "/"


def validate_payload(payload_type: str, obj: Any) -> Mapping[str, Any]:
    """Validate *obj* against the schema registered for *payload_type*.

    The first error (ordered by location) is reported through
    :class:`PayloadValidationError`; the validated object is returned as-is.
    """

    validator = compiled_validator(payload_type)
    errors = sorted(validator.iter_errors(obj), key=lambda err: list(err.absolute_path))
    if errors:
        first = errors[0]
        raise PayloadValidationError(
            f"{payload_type} {_format_path(first.absolute_path)}: {first.message}"
        )
    return obj


def validate_grid_shape(grid: Any, *, where: str) -> int:
    """Ensure *grid* is square and return its size."""

    size = len(grid)
    for row_index, row in enumerate(grid):
        if len(row) != size:
            raise PayloadValidationError(
                f"{where} row {row_index} has {len(row)} cells, expected {size}"
            )
    return size


__all__ = [
    "BOARD",
    "PUZZLE_CATALOG",
    "SOLVER_STEPS",
    "validate_grid_shape",
    "validate_payload",
]
