"""Resolved runtime settings for the replay client.

Precedence, lowest first: built-in defaults, ``config.toml``, environment
variables, CLI overrides.  Values that cannot be parsed are ignored so a
typo in one layer falls back to the layer below.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping, Optional

from project_config import get_section


@dataclass(frozen=True)
class ApiSettings:
    base_url: str = "http://localhost:5000"
    timeout_s: float = 10.0
    puzzles_path: str = "/puzzles"
    board_path: str = "/puzzles/{difficulty}/{identifier}"
    solve_path: str = "/solve/{difficulty}/{identifier}"


@dataclass(frozen=True)
class ReplaySettings:
    """Finalised settings after precedence resolution."""

    api: ApiSettings
    interval_s: float = 1.0
    log_dir: Optional[str] = "logs/playback"
    log_max_bytes: int = 10 * 1024 * 1024


_ENV_KEYS = {
    "base_url": ("SUDOKU_API_BASE_URL",),
    "timeout_s": ("SUDOKU_API_TIMEOUT_S",),
    "interval_s": ("SUDOKU_PLAYBACK_INTERVAL_S",),
    "log_dir": ("SUDOKU_LOG_DIR",),
}


def build_env(overrides: Mapping[str, str] | None = None) -> Dict[str, str]:
    """Merge process environment with optional overrides."""

    env: Dict[str, str] = {str(k): str(v) for k, v in os.environ.items()}
    if overrides:
        env.update({str(k): str(v) for k, v in overrides.items()})
    return env


def _parse_positive_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    if parsed <= 0:
        return None
    return parsed


def _parse_int(value: Any) -> Optional[int]:
    try:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip():
            return int(value)
    except (TypeError, ValueError):
        return None
    return None


def _parse_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _apply_overrides(settings: ReplaySettings, overrides: Mapping[str, Any]) -> ReplaySettings:
    api = settings.api
    interval_s = settings.interval_s
    log_dir = settings.log_dir
    log_max_bytes = settings.log_max_bytes

    for key in ("base_url", "puzzles_path", "board_path", "solve_path"):
        if key in overrides:
            maybe = _parse_text(overrides[key])
            if maybe is not None:
                api = replace(api, **{key: maybe})
    if "timeout_s" in overrides:
        maybe_timeout = _parse_positive_float(overrides["timeout_s"])
        if maybe_timeout is not None:
            api = replace(api, timeout_s=maybe_timeout)
    if "interval_s" in overrides:
        maybe_interval = _parse_positive_float(overrides["interval_s"])
        if maybe_interval is not None:
            interval_s = maybe_interval
    if "log_dir" in overrides:
        value = overrides["log_dir"]
        if value is None or (isinstance(value, str) and value.strip().lower() in {"", "off", "none"}):
            log_dir = None
        elif isinstance(value, str):
            log_dir = value
    if "max_bytes" in overrides:
        maybe_bytes = _parse_int(overrides["max_bytes"])
        if maybe_bytes is not None and maybe_bytes > 0:
            log_max_bytes = maybe_bytes

    return ReplaySettings(
        api=api,
        interval_s=interval_s,
        log_dir=log_dir,
        log_max_bytes=log_max_bytes,
    )


def _config_overrides() -> Dict[str, Any]:
    payload: Dict[str, Any] = {}
    for section in ("api", "playback", "log"):
        block = get_section(section, default={})
        if isinstance(block, dict):
            payload.update(block)
    if "dir" in payload:
        payload["log_dir"] = payload.pop("dir")
    return payload


def _env_overrides(env: Mapping[str, str]) -> Dict[str, Any]:
    payload: Dict[str, Any] = {}
    for field, aliases in _ENV_KEYS.items():
        for alias in aliases:
            if alias in env:
                payload[field] = env[alias]
                break
    return payload


def resolve_settings(
    env: Mapping[str, str] | None = None,
    cli: Mapping[str, Any] | None = None,
) -> ReplaySettings:
    """Resolve settings; ``env`` defaults to the process environment."""

    env_map = build_env() if env is None else dict(env)
    settings = ReplaySettings(api=ApiSettings())
    settings = _apply_overrides(settings, _config_overrides())
    settings = _apply_overrides(settings, _env_overrides(env_map))
    if cli:
        settings = _apply_overrides(settings, {k: v for k, v in cli.items() if v is not None})
    return settings


__all__ = ["ApiSettings", "ReplaySettings", "build_env", "resolve_settings"]
