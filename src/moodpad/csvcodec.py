"""
CSV exchange format:

    Date,Emoji,Note
    2024-12-08,😊,"Had a great day!"

Export always writes Date,Emoji,Note with only the note quoted. Import finds
the columns by header name (case-insensitive), so column order does not matter.
Tags are not part of the format.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from ._util import _parse_day
from .errors import FormatError
from .store import EntryStore, MoodEntry

logger = logging.getLogger(__name__)

CSV_HEADER = ["Date", "Emoji", "Note"]


@dataclass
class ImportRow:
    date: str
    emoji: str
    note: str = ""


@dataclass
class ParseResult:
    entries: list[ImportRow] = field(default_factory=list)
    imported_count: int = 0


def _quote(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def serialize(entries: Iterable[MoodEntry]) -> str:
    """Entries -> CSV text in the order given. No entries -> ""."""
    rows = [f"{e.date},{e.emoji},{_quote(e.note or '')}" for e in entries]
    if not rows:
        return ""
    return "\n".join([",".join(CSV_HEADER), *rows])


def _split_line(line: str) -> list[str]:
    # a quote toggles in/out of a quoted run and is dropped; "" is not an escape
    values: list[str] = []
    current = ""
    in_quotes = False
    for ch in line:
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            values.append(current.strip())
            current = ""
        else:
            current += ch
    values.append(current.strip())
    return values


def _strip_outer_quotes(value: str) -> str:
    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    return value


def _column(headers: list[str], name: str) -> int | None:
    try:
        return headers.index(name)
    except ValueError:
        return None


def parse(text: str) -> ParseResult:
    """
    Parse CSV text into import rows.

    Raises FormatError when there are no data rows or the header lacks a
    date or emoji column. Rows with a missing field or a date that is not
    a real YYYY-MM-DD calendar day are skipped.
    """
    lines = (text or "").strip().split("\n")
    if len(lines) < 2:
        raise FormatError("CSV file is empty or has no data rows")

    headers = [h.strip() for h in lines[0].strip().lower().split(",")]
    date_idx = _column(headers, "date")
    emoji_idx = _column(headers, "emoji")
    note_idx = _column(headers, "note")
    if date_idx is None or emoji_idx is None:
        raise FormatError("CSV must have Date and Emoji columns")

    result = ParseResult()
    for lineno, raw in enumerate(lines[1:], start=2):
        line = raw.strip()
        if not line:
            continue

        values = _split_line(line)

        def field_at(idx: int | None) -> str:
            if idx is None or idx >= len(values):
                return ""
            return values[idx]

        d = field_at(date_idx)
        emoji = field_at(emoji_idx)
        note = _strip_outer_quotes(field_at(note_idx))

        day = _parse_day(d) if d else None
        if day is None or not emoji:
            logger.debug("Skipping CSV line %d: %r", lineno, line)
            continue

        result.entries.append(ImportRow(date=day.isoformat(), emoji=emoji, note=note))

    result.imported_count = len(result.entries)
    return result


def import_csv(store: EntryStore, text: str) -> int:
    """Merge CSV rows into the store. Existing dates are overwritten, tags kept."""
    result = parse(text)
    for row in result.entries:
        store.save(row.date, row.emoji, row.note)
    logger.info("Imported %d mood entries from CSV", result.imported_count)
    return result.imported_count


def export_csv(store: EntryStore) -> str:
    return serialize(store.get_all())


def read_csv_file(path: Path) -> str:
    return Path(path).expanduser().read_text(encoding="utf-8-sig")


def write_csv_file(path: Path, text: str) -> Path:
    out_path = Path(path).expanduser().resolve()
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(text, encoding="utf-8")
    return out_path
