"""Playback event log.

Every record is one JSON line with a fixed envelope::

    {"event": <name>, "seq": <int>, "ts": <UTC ISO-8601>, ...fields}

``event`` must be one of :data:`EVENT_FIELDS` and carry at least the fields
listed for it, so reports can rely on the shape.  Records land in
``<base_dir>/<YYYYMMDD>/playback_NN.jsonl``; a file is closed for writing
once it reaches ``max_bytes`` and the next number is used.
"""

from __future__ import annotations

import itertools
import json
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

__all__ = ["EVENT_FIELDS", "EventSink", "configure", "current_log_path", "emit", "is_enabled"]

_FAILURE_FIELDS = ("code", "detail")
_PUZZLE_FIELDS = ("difficulty", "identifier")

EVENT_FIELDS: Mapping[str, Tuple[str, ...]] = {
    "playback.transition": ("op", "status", "index"),
    "playback.start_ignored": ("reason",),
    "session.selected": _PUZZLE_FIELDS,
    "session.stale_grid": _PUZZLE_FIELDS,
    "session.stale_steps": _PUZZLE_FIELDS,
    "session.catalog_failed": _FAILURE_FIELDS,
    "session.load_failed": _FAILURE_FIELDS + _PUZZLE_FIELDS,
    "session.fetch_failed": _FAILURE_FIELDS + _PUZZLE_FIELDS,
}

DEFAULT_MAX_BYTES = 10 * 1024 * 1024


class EventSink:
    """Appends envelope records under one base directory with size rotation."""

    def __init__(self, base_dir: str | Path, *, max_bytes: int | None = None) -> None:
        self.base_dir = Path(base_dir)
        self.max_bytes = max_bytes or DEFAULT_MAX_BYTES
        self.current_path: Optional[Path] = None
        self._lock = threading.Lock()
        self._seq = itertools.count(1)

    def _path_for_write(self) -> Path:
        day_dir = self.base_dir / datetime.now(timezone.utc).strftime("%Y%m%d")
        current = self.current_path
        if current is not None and current.parent == day_dir and current.exists():
            if current.stat().st_size < self.max_bytes:
                return current
        day_dir.mkdir(parents=True, exist_ok=True)
        for number in itertools.count():
            candidate = day_dir / f"playback_{number:02d}.jsonl"
            if not candidate.exists() or candidate.stat().st_size < self.max_bytes:
                self.current_path = candidate
                return candidate
        raise AssertionError("unreachable")

    def write(self, name: str, fields: Mapping[str, Any]) -> Path:
        with self._lock:
            record: Dict[str, Any] = {
                "event": name,
                "seq": next(self._seq),
                "ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            }
            record.update(fields)
            path = self._path_for_write()
            with path.open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(record, sort_keys=True, ensure_ascii=False, default=str) + "\n")
        return path


_sink: Optional[EventSink] = None


def configure(base_dir: str | Path | None, *, max_bytes: int | None = None) -> None:
    """Send events under ``base_dir``; ``None`` disables the log."""

    global _sink
    _sink = None if base_dir is None else EventSink(base_dir, max_bytes=max_bytes)


def is_enabled() -> bool:
    return _sink is not None


def current_log_path() -> Optional[Path]:
    return None if _sink is None else _sink.current_path


def emit(name: str, **fields: Any) -> Optional[Path]:
    """Record event *name*; returns the file written, or ``None`` when disabled.

    Raises :class:`ValueError` for an unknown event or a missing required field,
    whether or not the log is enabled.
    """

    required = EVENT_FIELDS.get(name)
    if required is None:
        raise ValueError(f"unknown playback event {name!r}")
    missing = [field for field in required if field not in fields]
    if missing:
        raise ValueError(f"event {name!r} is missing {', '.join(missing)}")
    sink = _sink
    if sink is None:
        return None
    return sink.write(name, fields)
