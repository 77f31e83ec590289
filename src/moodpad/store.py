from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Callable, Iterable, Protocol

from ._util import _now_local, _parse_day
from .errors import StorageError

logger = logging.getLogger(__name__)

MOODS_KEY = "moodpad_moods"

DEFAULT_EMOJIS = ["😊", "😢", "😠", "😴", "😍", "😰", "😐"]


class KeyValueStore(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def remove(self, key: str) -> None: ...


@dataclass
class MoodEntry:
    date: str
    emoji: str
    note: str = ""
    tags: list[str] = field(default_factory=list)
    timestamp: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: Any) -> MoodEntry:
        if not isinstance(raw, dict):
            raise ValueError(f"entry must be an object, got {type(raw).__name__}")
        d = raw.get("date")
        emoji = raw.get("emoji")
        if not isinstance(d, str) or not d or not isinstance(emoji, str):
            raise ValueError(f"entry needs string date and emoji: {raw!r}")
        tags = raw.get("tags") or []
        if not isinstance(tags, list):
            tags = []
        return cls(
            date=d,
            emoji=emoji,
            note=str(raw.get("note") or ""),
            tags=[str(t) for t in tags],
            timestamp=str(raw.get("timestamp") or ""),
        )


def normalize_tag(raw: str) -> str:
    s = str(raw).strip()
    if s.startswith("#"):
        s = s[1:]
    return s.strip().lower()


def normalize_tags(tags: Iterable[str]) -> list[str]:
    seen = set()
    out: list[str] = []
    for t in tags:
        key = normalize_tag(t)
        if not key or key in seen:
            continue
        seen.add(key)
        out.append(key)
    return out


class EntryStore:
    """
    Single owner of the mood entry collection.

    The collection lives under one key of a KeyValueStore and is always
    rewritten whole, sorted by date descending. Everything handed out is a
    fresh copy.

    on_corrupt:
      "empty" - storage failures and corrupt data are logged, reads come
                back empty and writes are dropped
      "raise" - the StorageError propagates to the caller
    """

    def __init__(
        self,
        kv: KeyValueStore,
        on_corrupt: str = "empty",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if on_corrupt not in ("empty", "raise"):
            raise ValueError(f"on_corrupt must be 'empty' or 'raise', got {on_corrupt!r}")
        self.kv = kv
        self.on_corrupt = on_corrupt
        self.clock = clock or _now_local

    # -------------------------
    # Persistence
    # -------------------------

    def _load(self) -> tuple[list[MoodEntry], int]:
        """Entries plus how many stored items could not be read. Raises StorageError."""
        raw = self.kv.get(MOODS_KEY, [])
        if raw is None:
            return [], 0
        if not isinstance(raw, list):
            raise StorageError(f"{MOODS_KEY} holds {type(raw).__name__}, expected a list")

        entries: list[MoodEntry] = []
        skipped = 0
        for item in raw:
            try:
                entries.append(MoodEntry.from_dict(item))
            except ValueError as e:
                if self.on_corrupt == "raise":
                    raise StorageError(str(e)) from e
                logger.warning("Skipping unreadable mood entry: %s", e)
                skipped += 1
        return entries, skipped

    def _read(self) -> list[MoodEntry]:
        try:
            entries, _ = self._load()
        except StorageError:
            if self.on_corrupt == "raise":
                raise
            logger.exception("Error reading moods from storage")
            return []
        return entries

    def _read_for_write(self) -> list[MoodEntry] | None:
        """
        Like _read, but None when rewriting the collection would lose data
        (the read failed, or some stored items could not be parsed).
        """
        try:
            entries, skipped = self._load()
        except StorageError:
            if self.on_corrupt == "raise":
                raise
            logger.exception("Error reading moods from storage; not writing")
            return None
        if skipped:
            logger.error("Not rewriting moods: %d unreadable entries would be lost", skipped)
            return None
        return entries

    def _write(self, entries: list[MoodEntry]) -> None:
        try:
            self.kv.set(MOODS_KEY, [e.to_dict() for e in entries])
        except StorageError:
            if self.on_corrupt == "raise":
                raise
            logger.exception("Error saving moods to storage")

    @staticmethod
    def _sorted(entries: list[MoodEntry]) -> list[MoodEntry]:
        return sorted(entries, key=lambda e: e.date, reverse=True)

    @staticmethod
    def _day(date: str) -> str:
        d = _parse_day(date)
        if d is None:
            raise ValueError(f"date must be a calendar day like 2024-12-08 (got {date!r})")
        return d.isoformat()

    # -------------------------
    # Queries
    # -------------------------

    def get_all(self) -> list[MoodEntry]:
        return self._sorted(self._read())

    def get(self, date: str) -> MoodEntry | None:
        d = _parse_day(date)
        key = d.isoformat() if d else date
        for e in self._read():
            if e.date == key:
                return e
        return None

    def get_for_month(self, year: int, month: int) -> list[MoodEntry]:
        """Entries inside one calendar month (month is 1-12)."""
        prefix = f"{int(year):04d}-{int(month):02d}-"
        return [e for e in self.get_all() if e.date.startswith(prefix)]

    def count(self) -> int:
        return len(self._read())

    # -------------------------
    # Mutations
    # -------------------------

    def save(
        self,
        date: str,
        emoji: str,
        note: str = "",
        tags: list[str] | None = None,
    ) -> MoodEntry:
        """
        Create or replace the entry for date.

        date is normalized to YYYY-MM-DD; anything that is not a calendar
        day raises ValueError. tags=None keeps whatever tags the existing
        entry already has; an explicit list (even empty) replaces them.
        If the stored collection cannot be read in full, nothing is written.
        """
        date = self._day(date)
        entries = self._read_for_write()
        current = entries or []
        idx = next((i for i, e in enumerate(current) if e.date == date), None)

        if tags is not None:
            new_tags = normalize_tags(tags)
        elif idx is not None:
            new_tags = list(current[idx].tags)
        else:
            new_tags = []

        entry = MoodEntry(
            date=date,
            emoji=emoji,
            note=(note or "").strip(),
            tags=new_tags,
            timestamp=self.clock().isoformat(timespec="seconds"),
        )

        if entries is not None:
            if idx is not None:
                entries[idx] = entry
            else:
                entries.append(entry)
            self._write(self._sorted(entries))
        return MoodEntry.from_dict(entry.to_dict())

    def delete(self, date: str) -> None:
        d = _parse_day(date)
        key = d.isoformat() if d else date
        entries = self._read_for_write()
        if entries is None:
            return
        kept = [e for e in entries if e.date != key]
        if len(kept) != len(entries):
            self._write(self._sorted(kept))

    def clear_all(self) -> None:
        try:
            self.kv.remove(MOODS_KEY)
        except StorageError:
            if self.on_corrupt == "raise":
                raise
            logger.exception("Error clearing moods from storage")
