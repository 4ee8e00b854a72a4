"""Collaborator ports for the puzzle catalog, grid loader and solver steps.

The playback core only depends on the three protocols below.
:class:`SudokuApiClient` implements all of them against the solver web API::

    GET {base_url}/puzzles                            -> {"puzzles": {difficulty: [id, ...]}}
    GET {base_url}/puzzles/{difficulty}/{identifier}  -> {"board": [[...], ...]}
    GET {base_url}/solve/{difficulty}/{identifier}    -> {"steps": [{...}, ...]}
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple, Type
from urllib.parse import quote

import requests

from contracts.errors import FetchFailure, LoadFailure, PayloadValidationError, PlaybackError
from contracts.schema_validator import (
    BOARD,
    PUZZLE_CATALOG,
    SOLVER_STEPS,
    validate_grid_shape,
    validate_payload,
)
from playback.settings import ApiSettings
from playback.step import Grid, Step, freeze_grid, parse_steps


class PuzzleCatalogSource(Protocol):
    def list_puzzles(self) -> Mapping[str, Sequence[str]]:
        """Return puzzle identifiers grouped by difficulty, in display order."""


class GridLoader(Protocol):
    def load_grid(self, difficulty: str, identifier: str) -> Grid:
        """Return the starting grid of a puzzle."""


class SolverStepSource(Protocol):
    def fetch_steps(self, difficulty: str, identifier: str) -> Sequence[Step]:
        """Return the ordered solver steps for a puzzle (possibly empty)."""


class SudokuApiClient:
    """HTTP client for the solver API built on :mod:`requests`."""

    def __init__(
        self,
        settings: ApiSettings,
        *,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.settings = settings
        self._session = session or requests.Session()

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "SudokuApiClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Ports
    # ------------------------------------------------------------------
    def list_puzzles(self) -> Dict[str, Tuple[str, ...]]:
        payload = self._get_json(self.settings.puzzles_path, error_cls=LoadFailure)
        try:
            validate_payload(PUZZLE_CATALOG, payload)
        except PayloadValidationError as exc:
            raise LoadFailure(exc.detail, code="invalid-catalog") from exc
        return {
            str(difficulty): tuple(identifiers)
            for difficulty, identifiers in payload["puzzles"].items()
        }

    def load_grid(self, difficulty: str, identifier: str) -> Grid:
        path = self._format_path(self.settings.board_path, difficulty, identifier)
        payload = self._get_json(path, error_cls=LoadFailure)
        try:
            validate_payload(BOARD, payload)
            validate_grid_shape(payload["board"], where="board")
            return freeze_grid(payload["board"])
        except PayloadValidationError as exc:
            raise LoadFailure(exc.detail, code="invalid-board") from exc

    def fetch_steps(self, difficulty: str, identifier: str) -> Tuple[Step, ...]:
        path = self._format_path(self.settings.solve_path, difficulty, identifier)
        payload = self._get_json(path, error_cls=FetchFailure)
        try:
            validate_payload(SOLVER_STEPS, payload)
            entries: List[Mapping[str, Any]] = payload.get("steps") or []
            return parse_steps(entries)
        except PayloadValidationError as exc:
            raise FetchFailure(exc.detail, code="invalid-steps") from exc

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    @staticmethod
    def _format_path(template: str, difficulty: str, identifier: str) -> str:
        return template.format(
            difficulty=quote(difficulty, safe=""),
            identifier=quote(identifier, safe=""),
        )

    def _url(self, path: str) -> str:
        return self.settings.base_url.rstrip("/") + "/" + path.lstrip("/")

    def _get_json(self, path: str, *, error_cls: Type[PlaybackError]) -> Any:
        url = self._url(path)
        try:
            response = self._session.get(url, timeout=self.settings.timeout_s)
            response.raise_for_status()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            code = "not-found" if status == 404 else "http-error"
            raise error_cls(f"GET {url} returned {status}", code=code) from exc
        except requests.RequestException as exc:
            raise error_cls(f"GET {url} failed: {exc}", code="transport-error") from exc
        try:
            return response.json()
        except ValueError as exc:
            raise error_cls(f"GET {url} returned invalid JSON", code="invalid-json") from exc


__all__ = ["GridLoader", "PuzzleCatalogSource", "SolverStepSource", "SudokuApiClient"]
