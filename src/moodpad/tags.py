from __future__ import annotations

from collections import Counter
from dataclasses import dataclass

from .store import EntryStore, normalize_tag

__all__ = ["TagCount", "normalize_tag", "all_tags", "popular_tags", "add_tag", "remove_tag"]


@dataclass
class TagCount:
    tag: str
    count: int


def all_tags(store: EntryStore) -> list[TagCount]:
    """Every tag in use, most used first."""
    counts = Counter(t for e in store.get_all() for t in e.tags)
    return [TagCount(tag, n) for tag, n in counts.most_common()]


def popular_tags(store: EntryStore, limit: int = 5) -> list[TagCount]:
    return all_tags(store)[:limit]


def add_tag(store: EntryStore, date: str, tag: str) -> list[str] | None:
    """Attach tag to the entry for date. None if there is no entry."""
    entry = store.get(date)
    if entry is None:
        return None

    t = normalize_tag(tag)
    tags = list(entry.tags)
    if t and t not in tags:
        tags.append(t)
        store.save(date, entry.emoji, entry.note, tags)
    return tags


def remove_tag(store: EntryStore, date: str, tag: str) -> list[str] | None:
    entry = store.get(date)
    if entry is None:
        return None

    t = normalize_tag(tag)
    tags = [x for x in entry.tags if x != t]
    store.save(date, entry.emoji, entry.note, tags)
    return tags
