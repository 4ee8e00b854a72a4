from __future__ import annotations

import json

import pytest

from playback import events


def test_unconfigured_log_writes_nothing(tmp_path) -> None:
    events.configure(None)

    assert events.emit("playback.start_ignored", reason="no-steps") is None
    assert not events.is_enabled()
    assert events.current_log_path() is None
    assert list(tmp_path.iterdir()) == []


def test_records_carry_the_envelope_and_a_sequence(event_log) -> None:
    first = events.emit("playback.transition", op="start", status="running", index=0)
    second = events.emit("playback.transition", op="pause", status="paused", index=0)

    assert first == second == events.current_log_path()
    assert first.parent.parent == event_log
    assert first.name == "playback_00.jsonl"

    records = [json.loads(line) for line in first.read_text("utf-8").splitlines()]
    assert [r["op"] for r in records] == ["start", "pause"]
    assert [r["seq"] for r in records] == [1, 2]
    assert all(r["event"] == "playback.transition" and "ts" in r for r in records)


def test_unknown_event_is_rejected(event_log) -> None:
    with pytest.raises(ValueError):
        events.emit("playback.exploded")


def test_missing_required_field_is_rejected_even_when_disabled() -> None:
    events.configure(None)

    with pytest.raises(ValueError, match="identifier"):
        events.emit("session.selected", difficulty="easy")


def test_extra_fields_are_kept(event_log) -> None:
    path = events.emit(
        "playback.transition", op="load_steps", status="stopped", index=None, step_count=3
    )

    (record,) = [json.loads(line) for line in path.read_text("utf-8").splitlines()]
    assert record["step_count"] == 3
    assert record["index"] is None


def test_log_rotates_when_file_exceeds_max_bytes(tmp_path) -> None:
    events.configure(tmp_path, max_bytes=64)
    try:
        paths = [
            events.emit("session.selected", difficulty="easy", identifier=f"puzzle-{n:03d}")
            for n in range(4)
        ]
    finally:
        events.configure(None)

    assert paths[0].name == "playback_00.jsonl"
    assert paths[-1].name != "playback_00.jsonl"
    assert len({path.name for path in paths}) > 1
