"""Collaborator ports consumed by the playback core."""

from __future__ import annotations

from .sudoku_api import GridLoader, PuzzleCatalogSource, SolverStepSource, SudokuApiClient

__all__ = [
    "GridLoader",
    "PuzzleCatalogSource",
    "SolverStepSource",
    "SudokuApiClient",
]
