#!/usr/bin/env python3
"""Validate the API payload fixtures against the contract schemas offline."""

from __future__ import annotations

import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from contracts import schema_validator
from contracts.errors import PayloadValidationError
from playback.step import freeze_grid, parse_steps

_PREFIXES = {
    "catalog": schema_validator.PUZZLE_CATALOG,
    "board": schema_validator.BOARD,
    "steps": schema_validator.SOLVER_STEPS,
}


def _guess_type(path: Path) -> str:
    prefix = path.stem.split("-", 1)[0].lower()
    if prefix in _PREFIXES:
        return _PREFIXES[prefix]
    raise ValueError(f"Cannot infer payload type for {path.name}")


def check(path: Path) -> None:
    """Raise :class:`PayloadValidationError` when the fixture at *path* is invalid."""

    payload = json.loads(path.read_text("utf-8"))
    payload_type = _guess_type(path)
    schema_validator.validate_payload(payload_type, payload)
    if payload_type == schema_validator.BOARD:
        schema_validator.validate_grid_shape(payload["board"], where=path.name)
        freeze_grid(payload["board"])
    elif payload_type == schema_validator.SOLVER_STEPS:
        parse_steps(payload.get("steps") or [])


def main(fixtures_root: Path | None = None) -> int:
    fixtures_root = fixtures_root or ROOT / "PuzzleContracts" / "fixtures"
    failures: list[str] = []

    for path in sorted((fixtures_root / "valid").glob("*.json")):
        try:
            check(path)
        except PayloadValidationError as exc:
            failures.append(f"valid fixture failed: {path.name}: {exc.detail}")

    for path in sorted((fixtures_root / "invalid").glob("*.json")):
        try:
            check(path)
        except PayloadValidationError as exc:
            print(f"{path.name}: {exc.detail}")
        else:
            failures.append(f"invalid fixture unexpectedly passed: {path.name}")

    if failures:
        for line in failures:
            print(line)
        return 1

    print("All contract fixtures are valid.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
