"""Shared low-level helpers used across the package."""

from __future__ import annotations

from datetime import date, datetime


def _now_local() -> datetime:
    return datetime.now().astimezone()


def _today() -> date:
    return _now_local().date()


def _parse_day(value: str) -> date | None:
    """Strict YYYY-MM-DD -> date, or None for anything else."""
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError:
        return None
