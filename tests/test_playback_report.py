from __future__ import annotations

import json
from pathlib import Path

from tools.reports import playback_report


def _write_events(path: Path, records: list[dict]) -> None:
    lines = [json.dumps(record, sort_keys=True) for record in records]
    path.write_text("\n".join(lines) + "\n\n", encoding="utf-8")


def test_aggregate_counts_transitions_failures_and_stale(tmp_path) -> None:
    first = tmp_path / "playback_00.jsonl"
    second = tmp_path / "playback_01.jsonl"
    _write_events(
        first,
        [
            {"event": "session.selected", "difficulty": "easy", "identifier": "e1"},
            {"event": "playback.transition", "op": "start"},
            {"event": "playback.transition", "op": "tick"},
            {"event": "session.load_failed", "code": "not-found"},
        ],
    )
    _write_events(
        second,
        [
            {"event": "session.selected", "difficulty": "easy", "identifier": "e1"},
            {"event": "session.selected", "difficulty": "hard", "identifier": "h1"},
            {"event": "session.stale_grid"},
            {"event": "session.fetch_failed", "code": "not-found"},
            {"event": "playback.transition", "op": "start"},
        ],
    )

    summary = playback_report.aggregate([first, second], top=1)

    assert summary["total_events"] == 9
    assert summary["transitions"] == {"start": 2, "tick": 1}
    assert summary["failures"] == {"not-found": 2}
    assert summary["stale_discarded"] == 1
    assert summary["top_puzzles"] == [("easy/e1", 2)]


def test_aggregate_of_no_files_is_empty() -> None:
    summary = playback_report.aggregate([])

    assert summary["total_events"] == 0
    assert summary["top_puzzles"] == []
