"""Runtime configuration: flags first, then environment, then defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

CORRUPT_POLICIES = ("empty", "raise")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Config:
    data_path: Path
    on_corrupt: str = "empty"
    log_level: str = "WARNING"
    log_file: Path | None = None


def default_data_path(profile: str | None = None) -> Path:
    """~/.config/moodpad/data.json, or <profile>.json when a profile is named."""
    return Path.home() / ".config" / "moodpad" / (f"{profile}.json" if profile else "data.json")


def _resolve_data_path(data_arg: str | None, profile: str | None) -> Path:
    raw = data_arg or os.environ.get("MOODPAD_DATA")
    chosen = Path(raw) if raw else default_data_path(profile)
    return chosen.expanduser().resolve()


def _resolve_on_corrupt(strict: bool) -> str:
    if strict:
        return "raise"
    value = os.environ.get("MOODPAD_ON_CORRUPT", "empty").strip().lower()
    if value not in CORRUPT_POLICIES:
        raise SystemExit(f"MOODPAD_ON_CORRUPT must be one of {', '.join(CORRUPT_POLICIES)} (got {value!r})")
    return value


def _resolve_log_level(log_level: str | None) -> str:
    value = (log_level or os.environ.get("MOODPAD_LOG_LEVEL") or "WARNING").strip().upper()
    if value not in LOG_LEVELS:
        raise SystemExit(f"log level must be one of {', '.join(LOG_LEVELS)} (got {value!r})")
    return value


def load_config(
    data_arg: str | None = None,
    profile: str | None = None,
    strict: bool = False,
    log_level: str | None = None,
) -> Config:
    log_file = os.environ.get("MOODPAD_LOG_FILE")
    return Config(
        data_path=_resolve_data_path(data_arg, profile),
        on_corrupt=_resolve_on_corrupt(strict),
        log_level=_resolve_log_level(log_level),
        log_file=Path(log_file).expanduser() if log_file else None,
    )
