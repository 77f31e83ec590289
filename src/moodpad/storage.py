from __future__ import annotations

import json
import logging
import os
import time
from pathlib import Path
from typing import Any

from .errors import StorageError

logger = logging.getLogger(__name__)


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def load_json(path: Path, strict: bool = False) -> dict[str, Any]:
    """
    Safe load:
    - creates parent dirs
    - if missing/empty -> writes {}
    - if corrupt -> backs up raw text then resets to {}
      (strict=True raises StorageError and leaves the file alone)
    Always returns a dict.
    """
    path = Path(path)
    _ensure_parent(path)

    if not path.exists():
        save_json(path, {})
        return {}

    txt = path.read_text(encoding="utf-8").strip()
    if not txt:
        save_json(path, {})
        return {}

    try:
        data = json.loads(txt)
    except json.JSONDecodeError as e:
        if strict:
            raise StorageError(f"corrupt data file {path}: {e}") from e
        data = None

    if isinstance(data, dict):
        return data
    if strict:
        raise StorageError(f"data file {path} does not hold a JSON object")

    # corruption guard: backup then reset
    backup = path.with_suffix(f".corrupt-{int(time.time())}.json")
    backup.write_text(txt, encoding="utf-8")
    logger.warning("Corrupt data file %s backed up to %s and reset", path, backup)
    save_json(path, {})
    return {}


def save_json(path: Path, data: Any) -> None:
    """
    Atomic-ish save:
    - write to temp file in same directory
    - flush + fsync
    - os.replace to target
    - chmod 0600 best-effort
    """
    path = Path(path)
    _ensure_parent(path)

    tmp = path.with_name(path.name + ".tmp")

    payload = json.dumps(
        data,
        indent=2,
        sort_keys=True,
        ensure_ascii=False,
    ) + "\n"

    with open(tmp, "w", encoding="utf-8") as f:
        f.write(payload)
        f.flush()
        os.fsync(f.fileno())

    os.replace(tmp, path)

    try:
        os.chmod(path, 0o600)
    except OSError:
        pass


class JsonKeyValueStore:
    """
    Key-value view over one JSON data file.

    Every call re-reads (and, for writes, rewrites) the whole file, so two
    instances pointed at the same path always agree. Failures surface as
    StorageError; callers decide whether to swallow them.
    """

    def __init__(self, path: Path, strict: bool = False) -> None:
        self.path = Path(path)
        self.strict = strict

    def _load(self) -> dict[str, Any]:
        try:
            return load_json(self.path, strict=self.strict)
        except OSError as e:
            raise StorageError(f"could not read {self.path}: {e}") from e

    def _save(self, data: dict[str, Any]) -> None:
        try:
            save_json(self.path, data)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"could not write {self.path}: {e}") from e

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)


class MemoryKeyValueStore:
    """
    In-process key-value store with the same interface as JsonKeyValueStore.

    Values are held JSON-encoded so every read hands back a fresh copy.
    fail_reads / fail_writes make the next calls raise StorageError.
    """

    def __init__(self) -> None:
        self._data: dict[str, str] = {}
        self.fail_reads = False
        self.fail_writes = False

    def get(self, key: str, default: Any = None) -> Any:
        if self.fail_reads:
            raise StorageError("storage unavailable")
        raw = self._data.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"corrupt value under {key!r}") from e

    def set(self, key: str, value: Any) -> None:
        if self.fail_writes:
            raise StorageError("storage quota exceeded")
        self._data[key] = json.dumps(value, ensure_ascii=False)

    def set_raw(self, key: str, raw: str) -> None:
        # test hook: plant undecodable text
        self._data[key] = raw

    def remove(self, key: str) -> None:
        if self.fail_writes:
            raise StorageError("storage quota exceeded")
        self._data.pop(key, None)
