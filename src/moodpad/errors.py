from __future__ import annotations


class MoodPadError(Exception):
    """Base class for every error raised by moodpad."""


class StorageError(MoodPadError):
    """Persistent read/write failed or returned data we cannot use."""


class FormatError(MoodPadError):
    """CSV input is missing required columns or has no data rows."""
