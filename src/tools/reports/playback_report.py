"""Aggregation helpers for playback event logs."""

from __future__ import annotations

import json
from collections import Counter
from pathlib import Path
from typing import Iterable, Mapping

__all__ = ["aggregate"]

_FAILURE_EVENTS = {"session.catalog_failed", "session.load_failed", "session.fetch_failed"}
_STALE_EVENTS = {"session.stale_grid", "session.stale_steps"}


def _load_events(paths: Iterable[Path]) -> Iterable[Mapping[str, object]]:
    for path in paths:
        for line in path.read_text(encoding="utf-8").splitlines():
            if not line.strip():
                continue
            yield json.loads(line)


def aggregate(paths: Iterable[Path], *, top: int = 5) -> Mapping[str, object]:
    """Summarise transitions, failures and discarded responses across *paths*."""

    transitions = Counter()
    failures = Counter()
    puzzles = Counter()
    stale = 0
    total = 0
    for event in _load_events(paths):
        total += 1
        name = str(event.get("event", "unknown"))
        if name == "playback.transition":
            transitions[str(event.get("op", "unknown"))] += 1
        elif name in _FAILURE_EVENTS:
            failures[str(event.get("code", "unknown"))] += 1
        elif name in _STALE_EVENTS:
            stale += 1
        elif name == "session.selected":
            puzzles[f"{event.get('difficulty')}/{event.get('identifier')}"] += 1

    return {
        "total_events": total,
        "transitions": dict(transitions),
        "failures": dict(failures),
        "stale_discarded": stale,
        "top_puzzles": puzzles.most_common(top),
    }
