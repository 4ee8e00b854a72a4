from __future__ import annotations

import asyncio
from typing import Any, Dict, List

import pytest
import requests

from contracts.errors import FetchFailure, LoadFailure
from playback.controller import PlaybackController
from playback.session import PuzzleSession
from playback.settings import ApiSettings
from ports.sudoku_api import SudokuApiClient


_MISSING_BODY = object()


class _FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = _MISSING_BODY) -> None:
        self.status_code = status_code
        self._body = body

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)

    def json(self) -> Any:
        if self._body is _MISSING_BODY:
            raise ValueError("no JSON object could be decoded")
        return self._body


class _FakeSession:
    def __init__(self, routes: Dict[str, Any]) -> None:
        self.routes = routes
        self.requested: List[tuple] = []
        self.closed = False

    def get(self, url: str, timeout: float | None = None) -> _FakeResponse:
        self.requested.append((url, timeout))
        route = self.routes.get(url)
        if isinstance(route, Exception):
            raise route
        if route is None:
            return _FakeResponse(404)
        return route

    def close(self) -> None:
        self.closed = True


BASE = "http://solver.test"


def _client(routes: Dict[str, Any]) -> SudokuApiClient:
    settings = ApiSettings(base_url=BASE + "/", timeout_s=2.5)
    return SudokuApiClient(settings, session=_FakeSession(routes))


def test_list_puzzles_groups_identifiers_by_difficulty() -> None:
    client = _client(
        {BASE + "/puzzles": _FakeResponse(body={"puzzles": {"easy": ["e1", "e2"], "hard": []}})}
    )

    assert client.list_puzzles() == {"easy": ("e1", "e2"), "hard": ()}
    assert client._session.requested == [(BASE + "/puzzles", 2.5)]


def test_list_puzzles_rejects_malformed_catalog() -> None:
    client = _client({BASE + "/puzzles": _FakeResponse(body={"puzzles": {"easy": "e1"}})})

    with pytest.raises(LoadFailure) as excinfo:
        client.list_puzzles()
    assert excinfo.value.code == "invalid-catalog"


def test_load_grid_normalises_cells() -> None:
    board = [[1, None, "", "4"], [0, ".", 3, 0], [0, 0, 0, 0], [0, 0, 0, 2]]
    client = _client({BASE + "/puzzles/easy/e1": _FakeResponse(body={"board": board})})

    grid = client.load_grid("easy", "e1")

    assert grid[0] == (1, 0, 0, 4)
    assert grid[1] == (0, 0, 3, 0)
    assert grid[3][3] == 2


def test_load_grid_quotes_path_segments() -> None:
    session_routes = {BASE + "/puzzles/very%20hard/a%2Fb": _FakeResponse(body={"board": [[0]]})}
    client = _client(session_routes)

    assert client.load_grid("very hard", "a/b") == ((0,),)


def test_load_grid_maps_missing_puzzle_to_not_found() -> None:
    client = _client({})

    with pytest.raises(LoadFailure) as excinfo:
        client.load_grid("easy", "missing")
    assert excinfo.value.code == "not-found"


def test_load_grid_rejects_non_square_board() -> None:
    client = _client(
        {BASE + "/puzzles/easy/e1": _FakeResponse(body={"board": [[1, 2], [3]]})}
    )

    with pytest.raises(LoadFailure) as excinfo:
        client.load_grid("easy", "e1")
    assert excinfo.value.code == "invalid-board"


def test_load_grid_maps_server_errors() -> None:
    client = _client({BASE + "/puzzles/easy/e1": _FakeResponse(500)})

    with pytest.raises(LoadFailure) as excinfo:
        client.load_grid("easy", "e1")
    assert excinfo.value.code == "http-error"


def test_fetch_steps_parses_entries() -> None:
    body = {
        "steps": [
            {"actionType": "assign", "row": 0, "col": 1, "value": 5},
            {"actionType": "backtrack", "row": 0, "col": 1, "boardState": [[0, 0], [0, 0]]},
        ]
    }
    client = _client({BASE + "/solve/easy/e1": _FakeResponse(body=body)})

    steps = client.fetch_steps("easy", "e1")

    assert [step.action_type for step in steps] == ["assign", "backtrack"]
    assert steps[0].value == 5
    assert steps[1].board_state == ((0, 0), (0, 0))


@pytest.mark.parametrize("body", [{"steps": None}, {"steps": []}, {}])
def test_fetch_steps_treats_missing_steps_as_empty(body: Dict[str, Any]) -> None:
    client = _client({BASE + "/solve/easy/e1": _FakeResponse(body=body)})

    assert client.fetch_steps("easy", "e1") == ()


def test_fetch_steps_rejects_entries_without_coordinates() -> None:
    client = _client(
        {BASE + "/solve/easy/e1": _FakeResponse(body={"steps": [{"actionType": "assign"}]})}
    )

    with pytest.raises(FetchFailure) as excinfo:
        client.fetch_steps("easy", "e1")
    assert excinfo.value.code == "invalid-steps"


def test_fetch_steps_maps_transport_errors() -> None:
    client = _client({BASE + "/solve/easy/e1": requests.ConnectionError("refused")})

    with pytest.raises(FetchFailure) as excinfo:
        client.fetch_steps("easy", "e1")
    assert excinfo.value.code == "transport-error"


def test_fetch_steps_maps_invalid_json() -> None:
    client = _client({BASE + "/solve/easy/e1": _FakeResponse()})

    with pytest.raises(FetchFailure) as excinfo:
        client.fetch_steps("easy", "e1")
    assert excinfo.value.code == "invalid-json"


def test_client_closes_its_session() -> None:
    client = _client({})

    with client:
        pass

    assert client._session.closed


def test_load_grid_rejects_non_ascii_digit_cells() -> None:
    board = [["²", 0], [0, 0]]
    client = _client({BASE + "/puzzles/easy/e1": _FakeResponse(body={"board": board})})

    with pytest.raises(LoadFailure) as excinfo:
        client.load_grid("easy", "e1")
    assert excinfo.value.code == "invalid-board"


def test_fetch_steps_rejects_non_ascii_digit_board_state() -> None:
    body = {"steps": [{"actionType": "assign", "row": 0, "col": 0, "boardState": [["²"]]}]}
    client = _client({BASE + "/solve/easy/e1": _FakeResponse(body=body)})

    with pytest.raises(FetchFailure) as excinfo:
        client.fetch_steps("easy", "e1")
    assert excinfo.value.code == "invalid-steps"


def test_session_survives_a_board_with_unparsable_cells() -> None:
    client = _client({BASE + "/puzzles/easy/e1": _FakeResponse(body={"board": [["²"]]})})
    session = PuzzleSession(PlaybackController(), catalog=client, grids=client, steps=client)

    assert asyncio.run(session.select_puzzle("easy", "e1")) is False
    assert session.selection is None
