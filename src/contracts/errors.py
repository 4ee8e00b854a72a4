"""Shared error types for the replay client."""

from __future__ import annotations

from typing import Optional


class PlaybackError(RuntimeError):
    """Base class for recoverable playback failures.

    ``code`` is a short machine readable tag that ends up in the event log,
    ``detail`` carries the human readable context.
    """

    default_code = "playback-error"

    def __init__(self, detail: Optional[str] = None, *, code: Optional[str] = None) -> None:
        self.code = code or self.default_code
        self.detail = detail
        message = self.code if detail is None else f"{self.code}:{detail}"
        super().__init__(message)


class LoadFailure(PlaybackError):
    """Raised when the puzzle catalog or a grid could not be loaded."""

    default_code = "load-failure"


class FetchFailure(PlaybackError):
    """Raised when the solver step sequence could not be fetched."""

    default_code = "fetch-failure"


class IndexOutOfRange(PlaybackError, IndexError):
    """Raised by the step store for indices outside ``[0, len - 1]``."""

    default_code = "index-out-of-range"


class PayloadValidationError(PlaybackError, ValueError):
    """Raised when an API payload does not match its JSON schema."""

    default_code = "invalid-payload"


__all__ = [
    "FetchFailure",
    "IndexOutOfRange",
    "LoadFailure",
    "PayloadValidationError",
    "PlaybackError",
]
