"""Persisted key-value storage.

Backs the theme preference and the identity provider's remembered session.
Values are plain strings, mirroring what a browser's local storage offers.

Design Goals
------------
- Pure-Python (no Qt import) for headless unit tests.
- Versioned JSON document so the layout can migrate later.
- Graceful fallback: a corrupt or incompatible file reads as empty.
- Writes are atomic (temp file + replace); write failures raise `OSError`
  and the caller decides whether to log or surface them.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from threading import RLock
from typing import Dict, Optional, Protocol

__all__ = [
    "KeyValueStore",
    "MemoryStorage",
    "JsonFileStorage",
    "STORAGE_VERSION",
]

_logger = logging.getLogger(__name__)

STORAGE_VERSION = 1
STORAGE_FILENAME = "local_storage.json"


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...  # pragma: no cover - structural

    def set(self, key: str, value: str) -> None: ...  # pragma: no cover - structural

    def remove(self, key: str) -> None: ...  # pragma: no cover - structural


class MemoryStorage:
    """Dict-backed storage; contents vanish with the process."""

    def __init__(self, initial: Dict[str, str] | None = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)


class JsonFileStorage:
    """File-backed storage under ``base_dir/local_storage.json``.

    The whole document is cached after the first read; each `set`/`remove`
    rewrites the file.
    """

    def __init__(self, base_dir: str | Path | None = None) -> None:
        base = Path(base_dir) if base_dir else Path.cwd()
        self.path = base / STORAGE_FILENAME
        self._lock = RLock()
        self._cache: Dict[str, str] | None = None

    def _load(self) -> Dict[str, str]:
        if self._cache is not None:
            return self._cache
        data: Dict[str, str] = {}
        if self.path.exists():
            try:
                doc = json.loads(self.path.read_text(encoding="utf-8"))
                if int(doc.get("version", 0)) == STORAGE_VERSION:
                    data = {str(k): str(v) for k, v in dict(doc.get("items", {})).items()}
                else:
                    _logger.warning("Ignoring storage file %s with version %r", self.path, doc.get("version"))
            except (ValueError, TypeError, AttributeError, OSError):
                _logger.warning("Storage file %s unreadable; starting empty", self.path)
        self._cache = data
        return data

    def _flush(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        payload = {"version": STORAGE_VERSION, "items": data}
        tmp.write_text(json.dumps(payload, indent=2, ensure_ascii=False, sort_keys=True), encoding="utf-8")
        tmp.replace(self.path)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = dict(self._load())
            data[key] = str(value)
            self._flush(data)
            self._cache = data

    def remove(self, key: str) -> None:
        with self._lock:
            data = dict(self._load())
            if data.pop(key, None) is None:
                return
            self._flush(data)
            self._cache = data
