"""
Derived statistics over the entry history.

Every function recomputes from the store on each call. Where "today" matters
it is a keyword argument so callers (and tests) can pin the clock.

"Dominant emoji" style aggregations break ties by first occurrence in the
store's entry order (newest date first).
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable

from ._util import _parse_day, _today
from .store import EntryStore, MoodEntry

# 1 = worst, 5 = best
MOOD_VALUES = {
    "😍": 5,
    "😊": 4,
    "😐": 3,
    "😴": 2,
    "😰": 2,
    "😢": 1,
    "😠": 1,
}
NEUTRAL_VALUE = 3

WEEKDAYS = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

EMOJI_NAMES = {
    "😊": "happy",
    "😢": "sad",
    "😠": "angry",
    "😴": "tired",
    "😍": "loving",
    "😰": "anxious",
    "😐": "neutral",
}


@dataclass
class TrendPoint:
    date: str
    value: int | None
    emoji: str | None


@dataclass
class Insight:
    kind: str  # positive | info | stat | achievement
    text: str


@dataclass
class DayPattern:
    day: str
    emoji: str | None
    count: int


@dataclass
class MonthSummary:
    name: str
    count: int
    emoji: str | None


@dataclass
class YearReview:
    year: int
    months: list[MonthSummary]
    total_entries: int
    top_emoji: str | None
    days_logged: int


def mood_value(emoji: str) -> int:
    return MOOD_VALUES.get(emoji, NEUTRAL_VALUE)


def _dominant(emojis: Iterable[str]) -> str | None:
    # Counter.most_common keeps first-encountered order among equal counts
    top = Counter(emojis).most_common(1)
    return top[0][0] if top else None


def _weekday_index(d: date) -> int:
    # Sunday = 0 ... Saturday = 6
    return (d.weekday() + 1) % 7


def _dated(entries: Iterable[MoodEntry]) -> list[tuple[date, MoodEntry]]:
    out = []
    for e in entries:
        d = _parse_day(e.date)
        if d is not None:
            out.append((d, e))
    return out


# -------------------------
# Monthly / totals
# -------------------------

def most_common_mood(store: EntryStore, year: int, month: int) -> str | None:
    return _dominant(e.emoji for e in store.get_for_month(year, month))


def total_entries(store: EntryStore) -> int:
    return store.count()


# -------------------------
# Streaks
# -------------------------

def _current_streak(days: list[date], today: date) -> int:
    if not days:
        return 0
    ordered = sorted(set(days), reverse=True)
    yesterday = today - timedelta(days=1)
    if ordered[0] < yesterday:
        return 0

    streak = 1
    expected = ordered[0]
    for d in ordered[1:]:
        expected -= timedelta(days=1)
        if d != expected:
            break
        streak += 1
    return streak


def current_streak(store: EntryStore, today: date | None = None) -> int:
    """
    Consecutive logged days counted back from the latest entry.
    Only active when the latest entry is today or yesterday; otherwise 0.
    """
    today = today or _today()
    return _current_streak([d for d, _ in _dated(store.get_all())], today)


def longest_streak(store: EntryStore) -> int:
    days = sorted(d for d, _ in _dated(store.get_all()))
    if not days:
        return 0

    best = 1
    run = 1
    for prev, cur in zip(days, days[1:]):
        diff = (cur - prev).days
        if diff == 1:
            run += 1
            best = max(best, run)
        elif diff > 1:
            run = 1
        # diff == 0: duplicate date, neither extends nor breaks
    return best


# -------------------------
# Trend
# -------------------------

def trend_data(store: EntryStore, days: int = 30, today: date | None = None) -> list[TrendPoint]:
    """One point per day for the trailing window ending today, oldest first."""
    today = today or _today()
    by_date = {e.date: e for e in store.get_all()}

    points: list[TrendPoint] = []
    for i in range(days - 1, -1, -1):
        day = (today - timedelta(days=i)).isoformat()
        e = by_date.get(day)
        points.append(
            TrendPoint(
                date=day,
                value=mood_value(e.emoji) if e else None,
                emoji=e.emoji if e else None,
            )
        )
    return points


# -------------------------
# Insights + patterns
# -------------------------

def _percent(part: int, whole: int) -> int:
    # round half up
    return int(math.floor(part * 100 / whole + 0.5))


def weekly_insights(store: EntryStore, today: date | None = None) -> list[Insight]:
    entries = store.get_all()
    if len(entries) < 7:
        return []

    today = today or _today()
    dated = _dated(entries)

    totals = [0] * 7
    counts = [0] * 7
    for d, e in dated:
        i = _weekday_index(d)
        totals[i] += mood_value(e.emoji)
        counts[i] += 1

    best_day = worst_day = None
    best_avg = worst_avg = 0.0
    for i, name in enumerate(WEEKDAYS):
        if counts[i] < 2:
            continue
        avg = totals[i] / counts[i]
        if best_day is None or avg > best_avg:
            best_day, best_avg = name, avg
        if worst_day is None or avg < worst_avg:
            worst_day, worst_avg = name, avg

    insights: list[Insight] = []
    if best_day:
        insights.append(Insight("positive", f"You tend to feel happiest on {best_day}s!"))
    if worst_day and worst_day != best_day:
        insights.append(
            Insight("info", f"{worst_day}s tend to be tougher. Consider planning something nice!")
        )

    top = Counter(e.emoji for e in entries).most_common(1)
    if top:
        emoji, n = top[0]
        insights.append(
            Insight("stat", f"Your most frequent mood is {emoji} ({_percent(n, len(entries))}% of entries)")
        )

    streak = _current_streak([d for d, _ in dated], today)
    if streak >= 7:
        insights.append(
            Insight("achievement", f"Amazing! You've logged your mood for {streak} days in a row!")
        )

    return insights


def day_of_week_patterns(store: EntryStore) -> list[DayPattern]:
    """Dominant emoji and entry count per weekday, Sunday first."""
    buckets: list[list[str]] = [[] for _ in WEEKDAYS]
    for d, e in _dated(store.get_all()):
        buckets[_weekday_index(d)].append(e.emoji)

    return [
        DayPattern(day=name[:3], emoji=_dominant(bucket), count=len(bucket))
        for name, bucket in zip(WEEKDAYS, buckets)
    ]


# -------------------------
# Year in review
# -------------------------

def year_review(store: EntryStore, year: int | None = None, today: date | None = None) -> YearReview:
    if year is None:
        year = (today or _today()).year

    in_year = [(d, e) for d, e in _dated(store.get_all()) if d.year == year]

    months = []
    for i, name in enumerate(MONTHS, start=1):
        emojis = [e.emoji for d, e in in_year if d.month == i]
        months.append(MonthSummary(name=name, count=len(emojis), emoji=_dominant(emojis)))

    return YearReview(
        year=year,
        months=months,
        total_entries=len(in_year),
        top_emoji=_dominant(e.emoji for _, e in in_year),
        days_logged=len(in_year),
    )
