from __future__ import annotations

import pytest

from contracts.errors import IndexOutOfRange, PayloadValidationError
from playback.step import Step, check_step_bounds, freeze_grid, parse_steps, thaw_grid
from playback.step_store import StepStore


def _steps() -> list[Step]:
    return [Step("assign", 0, 0), Step("conflict", 0, 1), Step("backtrack", 1, 0)]


def test_step_at_returns_steps_in_order() -> None:
    store = StepStore(_steps())

    assert len(store) == 3
    assert store.step_at(0).action_type == "assign"
    assert store.step_at(2).action_type == "backtrack"
    assert [step.col for step in store] == [0, 1, 0]


@pytest.mark.parametrize("index", [-1, 3, 100])
def test_step_at_rejects_out_of_range(index: int) -> None:
    store = StepStore(_steps())

    with pytest.raises(IndexOutOfRange):
        store.step_at(index)


def test_empty_store_is_falsy_and_rejects_every_index() -> None:
    store = StepStore()

    assert not store
    assert len(store) == 0
    with pytest.raises(IndexOutOfRange):
        store.step_at(0)


def test_replace_publishes_new_sequence_and_clear_empties() -> None:
    store = StepStore(_steps())
    before = store.steps

    store.replace([Step("assign", 4, 4)])

    assert before == tuple(_steps())
    assert store.steps == (Step("assign", 4, 4),)

    store.clear()
    assert store.steps == ()


def test_step_from_payload_normalises_board_and_annotations() -> None:
    payload = {
        "actionType": "assign",
        "row": 2,
        "col": 3,
        "value": 7,
        "boardState": [[None, "5"], [".", 3]],
    }

    step = Step.from_payload(payload)

    assert step.board_state == ((0, 5), (0, 3))
    assert step.value == 7
    assert step.highlight.row == 2 and step.highlight.col == 3
    assert Step.from_payload(step.to_payload()) == step


def test_step_without_board_state_keeps_none() -> None:
    step = Step.from_payload({"actionType": "conflict", "row": 0, "col": 0, "boardState": None})

    assert step.board_state is None
    assert "boardState" not in step.to_payload()


def test_parse_steps_checks_bounds_against_grid_size() -> None:
    entries = [{"actionType": "assign", "row": 0, "col": 9}]

    with pytest.raises(PayloadValidationError):
        parse_steps(entries, size=9)
    assert parse_steps(entries)[0].col == 9


def test_check_step_bounds_rejects_mismatched_board_state() -> None:
    step = Step("assign", 0, 0, board_state=freeze_grid([[1, 2], [3, 4]]))

    with pytest.raises(PayloadValidationError):
        check_step_bounds([step], 9)
    check_step_bounds([step], 2)


def test_thaw_grid_never_aliases_rows() -> None:
    frozen = freeze_grid([[1, 2], [3, 4]])

    thawed = thaw_grid(frozen)
    thawed[0][0] = 9

    assert frozen == ((1, 2), (3, 4))


@pytest.mark.parametrize("cell", ["²", "٣", "x", -1, True])
def test_non_digit_cells_are_payload_errors(cell) -> None:
    with pytest.raises(PayloadValidationError):
        freeze_grid([[cell]])
    with pytest.raises(PayloadValidationError):
        Step.from_payload({"actionType": "assign", "row": 0, "col": 0, "boardState": [[cell]]})
