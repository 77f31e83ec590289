"""Sample history for trying the tool out."""

from __future__ import annotations

import logging
import random
from datetime import date, timedelta

from ._util import _today
from .settings import Settings
from .store import DEFAULT_EMOJIS, EntryStore

logger = logging.getLogger(__name__)

# more neutral/happy, fewer extremes; same order as DEFAULT_EMOJIS
EMOJI_WEIGHTS = [30, 10, 5, 15, 15, 10, 15]

SAMPLE_NOTES = [
    "Had a great day at work!",
    "Feeling a bit under the weather",
    "Productive morning, relaxing evening",
    "Caught up with old friends",
    "Stressful deadline approaching",
    "Good workout session today",
    "Lazy Sunday vibes",
    "Exciting news!",
    "Need more sleep...",
    "Grateful for small things",
    "Movie night was fun",
    "Finished a big project",
    "Missing family",
    "Beautiful weather today",
    "Coffee was perfect this morning",
    "",
]

LOG_CHANCE = 0.85
NOTE_CHANCE = 0.6


def _months_back(d: date, months: int) -> date:
    y, m = divmod(d.year * 12 + (d.month - 1) - months, 12)
    m += 1
    # clamp to the last valid day of the target month
    for day in range(d.day, 27, -1):
        try:
            return date(y, m, day)
        except ValueError:
            continue
    return date(y, m, min(d.day, 28))


def load_demo_data(
    store: EntryStore,
    settings: Settings | None = None,
    keep_existing: bool = False,
    today: date | None = None,
    rng: random.Random | None = None,
) -> int:
    """Fill roughly the last three months with random entries. Returns how many."""
    rng = rng or random.Random()
    today = today or _today()

    if not keep_existing:
        store.clear_all()

    added = 0
    day = _months_back(today, 3)
    while day <= today:
        if rng.random() < LOG_CHANCE:
            emoji = rng.choices(DEFAULT_EMOJIS, weights=EMOJI_WEIGHTS, k=1)[0]
            note = rng.choice(SAMPLE_NOTES) if rng.random() < NOTE_CHANCE else ""
            store.save(day.isoformat(), emoji, note)
            added += 1
        day += timedelta(days=1)

    if settings is not None:
        settings.set_demo_mode(True)

    logger.info("Demo data loaded: %d entries over 3 months", added)
    return added
