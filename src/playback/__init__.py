"""Step playback core for replaying precomputed solver traces."""

from __future__ import annotations

from .clock import PlaybackClock
from .controller import PlaybackController, PlaybackSnapshot, PlaybackStatus
from .projector import BoardView, CellView, describe_step, project
from .session import PuzzleSelection, PuzzleSession
from .step import HighlightedCell, Step
from .step_store import StepStore

__all__ = [
    "BoardView",
    "CellView",
    "HighlightedCell",
    "PlaybackClock",
    "PlaybackController",
    "PlaybackSnapshot",
    "PlaybackStatus",
    "PuzzleSelection",
    "PuzzleSession",
    "Step",
    "StepStore",
    "describe_step",
    "project",
]
