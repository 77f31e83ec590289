from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from ._util import _now_local
from .errors import StorageError
from .store import DEFAULT_EMOJIS, EntryStore, KeyValueStore

logger = logging.getLogger(__name__)

THEME_KEY = "moodpad_theme"
REMINDER_KEY = "moodpad_reminder"
CUSTOM_EMOJIS_KEY = "moodpad_custom_emojis"
DEMO_KEY = "moodpad_demo"

THEMES = ("dark", "light")
DEFAULT_THEME = "dark"

# reminder fires during this local hour if nothing is logged yet
REMINDER_HOUR = 20


class Settings:
    """
    Small independent preferences, each under its own key.

    Storage failures are logged and read back as defaults; a failed write
    is dropped.
    """

    def __init__(self, kv: KeyValueStore) -> None:
        self.kv = kv

    def _get(self, key: str, default: Any = None) -> Any:
        try:
            return self.kv.get(key, default)
        except StorageError:
            logger.exception("Error reading %s", key)
            return default

    def _set(self, key: str, value: Any) -> None:
        try:
            self.kv.set(key, value)
        except StorageError:
            logger.exception("Error saving %s", key)

    def _remove(self, key: str) -> None:
        try:
            self.kv.remove(key)
        except StorageError:
            logger.exception("Error removing %s", key)

    # ---- theme ----

    @property
    def theme(self) -> str:
        value = self._get(THEME_KEY)
        return value if value in THEMES else DEFAULT_THEME

    def set_theme(self, theme: str) -> str:
        if theme not in THEMES:
            raise ValueError(f"theme must be one of {', '.join(THEMES)} (got {theme!r})")
        self._set(THEME_KEY, theme)
        return theme

    def toggle_theme(self) -> str:
        return self.set_theme("light" if self.theme == "dark" else "dark")

    # ---- reminder ----

    @property
    def reminder_enabled(self) -> bool:
        return self._get(REMINDER_KEY) == "true"

    def enable_reminder(self) -> None:
        self._set(REMINDER_KEY, "true")

    def disable_reminder(self) -> None:
        self._remove(REMINDER_KEY)

    def should_send_reminder(self, store: EntryStore, now: datetime | None = None) -> bool:
        """True between 8 and 9 PM when enabled and today has no entry."""
        if not self.reminder_enabled:
            return False
        now = now or _now_local()
        if now.hour != REMINDER_HOUR:
            return False
        return store.get(now.date().isoformat()) is None

    # ---- custom emoji ----

    @property
    def custom_emojis(self) -> list[str]:
        value = self._get(CUSTOM_EMOJIS_KEY, [])
        if not isinstance(value, list):
            logger.warning("Ignoring corrupt custom emoji list")
            return []
        return [str(e) for e in value]

    def all_emojis(self) -> list[str]:
        return [*DEFAULT_EMOJIS, *self.custom_emojis]

    def add_custom_emoji(self, emoji: str) -> list[str]:
        emoji = emoji.strip()
        custom = self.custom_emojis
        if emoji and emoji not in custom and emoji not in DEFAULT_EMOJIS:
            custom.append(emoji)
            self._set(CUSTOM_EMOJIS_KEY, custom)
        return self.all_emojis()

    def remove_custom_emoji(self, emoji: str) -> list[str]:
        custom = [e for e in self.custom_emojis if e != emoji.strip()]
        self._set(CUSTOM_EMOJIS_KEY, custom)
        return self.all_emojis()

    # ---- demo ----

    @property
    def demo_mode(self) -> bool:
        return self._get(DEMO_KEY) == "true"

    def set_demo_mode(self, enabled: bool) -> None:
        if enabled:
            self._set(DEMO_KEY, "true")
        else:
            self._remove(DEMO_KEY)
