"""Payload contracts and error taxonomy for the replay client."""

from __future__ import annotations

from .errors import (
    FetchFailure,
    IndexOutOfRange,
    LoadFailure,
    PayloadValidationError,
    PlaybackError,
)
from .schema_validator import validate_grid_shape, validate_payload

__all__ = [
    "FetchFailure",
    "IndexOutOfRange",
    "LoadFailure",
    "PayloadValidationError",
    "PlaybackError",
    "validate_grid_shape",
    "validate_payload",
]
