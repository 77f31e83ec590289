from __future__ import annotations

import re
from datetime import date, datetime, timedelta

from ._util import _today

WEEKDAY_NAMES = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def parse_day(value: str | None, today: date | None = None) -> str:
    """
    Parse flexible user input into a calendar day.
    Accepts:
      - None / blank -> today
      - ISO "2026-02-25", or "2026/02/25"
      - keywords: "today", "yesterday", "tomorrow"
      - relative: "3 days ago", "1 day ago", "2 weeks ago"
      - "last monday" (most recent Monday strictly before today)
    Returns: YYYY-MM-DD string.
    """
    today = today or _today()
    if not value or not value.strip():
        return today.isoformat()

    s = value.strip().lower()

    # --- 1) ISO / slashed date ---
    for fmt in ("%Y-%m-%d", "%Y/%m/%d"):
        try:
            return datetime.strptime(s, fmt).date().isoformat()
        except ValueError:
            continue

    # --- 2) Keywords ---
    if s == "today":
        return today.isoformat()
    if s == "yesterday":
        return (today - timedelta(days=1)).isoformat()
    if s == "tomorrow":
        return (today + timedelta(days=1)).isoformat()

    # --- 3) Relative like "3 days ago", "2 weeks ago" ---
    m = re.fullmatch(r"(\d+)\s*(day|days|week|weeks)\s*ago", s)
    if m:
        n = int(m.group(1))
        if "week" in m.group(2):
            n *= 7
        return (today - timedelta(days=n)).isoformat()

    # --- 4) "last <weekday>" ---
    m = re.fullmatch(r"last\s+(\w+)", s)
    if m and m.group(1) in WEEKDAY_NAMES:
        target = WEEKDAY_NAMES.index(m.group(1))
        back = (today.weekday() - target) % 7 or 7
        return (today - timedelta(days=back)).isoformat()

    raise SystemExit(
        f"Could not parse date {value!r}. Try ISO like '2026-02-25' "
        f"or 'today', 'yesterday', '3 days ago', 'last monday'."
    )
