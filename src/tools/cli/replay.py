"""Command line front-end for replaying solver traces."""

from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from contracts.errors import LoadFailure
from playback import events
from playback.clock import PlaybackClock
from playback.controller import PlaybackController, PlaybackSnapshot, PlaybackStatus
from playback.projector import describe_snapshot, project_snapshot
from playback.render import render_text, save_board_image
from playback.session import PuzzleSession
from playback.settings import ReplaySettings, resolve_settings
from ports.sudoku_api import SudokuApiClient
from tools.reports import playback_report


def _resolve(args: argparse.Namespace) -> ReplaySettings:
    cli: Dict[str, Any] = {
        "base_url": getattr(args, "base_url", None),
        "interval_s": getattr(args, "interval", None),
        "log_dir": getattr(args, "log_dir", None),
    }
    settings = resolve_settings(cli=cli)
    events.configure(settings.log_dir, max_bytes=settings.log_max_bytes)
    return settings


def make_client(settings: ReplaySettings) -> SudokuApiClient:
    return SudokuApiClient(settings.api)


def _print_frame(snapshot: PlaybackSnapshot) -> None:
    print(render_text(project_snapshot(snapshot), caption=describe_snapshot(snapshot)))
    print(f"[{snapshot.status.value}]")
    print()


async def _open_session(
    args: argparse.Namespace, settings: ReplaySettings, client: SudokuApiClient
) -> Optional[PuzzleSession]:
    controller = PlaybackController(PlaybackClock(settings.interval_s))
    session = PuzzleSession(controller, catalog=client, grids=client, steps=client)
    if args.difficulty and args.puzzle:
        ok = await session.select_puzzle(args.difficulty, args.puzzle)
    else:
        ok = await session.bootstrap() is not None
    if not ok:
        print("Could not load a puzzle")
        session.close()
        return None
    return session


async def _play(args: argparse.Namespace, settings: ReplaySettings, client: SudokuApiClient) -> int:
    session = await _open_session(args, settings, client)
    if session is None:
        return 1
    finished = asyncio.Event()

    def _on_change(snapshot: PlaybackSnapshot) -> None:
        _print_frame(snapshot)
        if snapshot.status is PlaybackStatus.STOPPED and snapshot.index is not None:
            finished.set()

    session.controller.subscribe(_on_change)
    try:
        if not await session.start():
            print("Nothing to play")
            return 1
        if session.controller.status.active:
            await finished.wait()
    finally:
        session.close()
    return 0


async def _render(args: argparse.Namespace, settings: ReplaySettings, client: SudokuApiClient) -> int:
    session = await _open_session(args, settings, client)
    if session is None:
        return 1
    try:
        if not await session.start():
            print("Nothing to render")
            return 1
        session.pause()
        while (session.controller.index or 0) < args.step and session.step_forward():
            pass
        snapshot = session.snapshot()
        out = save_board_image(project_snapshot(snapshot), args.out, title=describe_snapshot(snapshot))
    finally:
        session.close()
    print(f"Board saved to: {out.resolve()}")
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    settings = _resolve(args)
    with make_client(settings) as client:
        try:
            catalog = client.list_puzzles()
        except LoadFailure as exc:
            events.emit("session.catalog_failed", code=exc.code, detail=exc.detail)
            print(f"Could not load the puzzle catalog: {exc.detail or exc.code}")
            return 1
    print(json.dumps({k: list(v) for k, v in catalog.items()}, indent=2))
    return 0


def cmd_play(args: argparse.Namespace) -> int:
    settings = _resolve(args)
    with make_client(settings) as client:
        return asyncio.run(_play(args, settings, client))


def cmd_render(args: argparse.Namespace) -> int:
    settings = _resolve(args)
    with make_client(settings) as client:
        return asyncio.run(_render(args, settings, client))


def cmd_report(args: argparse.Namespace) -> int:
    base_dir = Path(args.path)
    files = sorted(base_dir.glob("**/*.jsonl"))
    if not files:
        raise SystemExit(f"No JSONL logs found under {base_dir}")
    summary = playback_report.aggregate(files, top=args.top)
    print(json.dumps(summary, indent=2, sort_keys=True))
    return 0


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--base-url", default=None, help="Solver API base URL")
    parser.add_argument("--log-dir", default=None, help="Event log directory ('off' disables it)")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Replay CDCL Sudoku solver traces")
    sub = parser.add_subparsers(dest="command", required=True)

    list_cmd = sub.add_parser("list", help="Print the puzzle catalog")
    _add_common(list_cmd)
    list_cmd.set_defaults(func=cmd_list)

    play = sub.add_parser("play", help="Auto-play the solver steps of one puzzle")
    _add_common(play)
    play.add_argument("--difficulty", default=None)
    play.add_argument("--puzzle", default=None, help="Puzzle identifier; defaults to the first in the catalog")
    play.add_argument("--interval", type=float, default=None, help="Seconds between steps")
    play.set_defaults(func=cmd_play)

    render = sub.add_parser("render", help="Save the board at a given step as an image")
    _add_common(render)
    render.add_argument("--difficulty", default=None)
    render.add_argument("--puzzle", default=None)
    render.add_argument("--step", type=int, default=0, help="Zero-based step index")
    render.add_argument("--out", required=True, help="Output image path (.png, .pdf, .svg)")
    render.set_defaults(func=cmd_render)

    report = sub.add_parser("report", help="Aggregate playback event logs")
    report.add_argument("path", help="Directory containing JSONL logs")
    report.add_argument("--top", type=int, default=5)
    report.set_defaults(func=cmd_report)

    return parser


def main(argv: List[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
