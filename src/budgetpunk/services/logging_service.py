"""Logging service.

Keeps the most recent log records in memory and republishes each one as
`GUIEvent.LOG_RECORD_ADDED`, so a diagnostics panel can follow storage
failures, ignored persistence errors and unmatched overlay hides without
tailing a file.
"""

from __future__ import annotations

import json
import logging
from collections import deque
from dataclasses import asdict, dataclass
from pathlib import Path
from threading import RLock
from typing import Deque, List, Optional

from .event_bus import EventBus, GUIEvent

__all__ = [
    "LogEntry",
    "LoggingService",
    "configure_logging",
    "LOG_FORMAT",
]

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
EVENT_MESSAGE_LIMIT = 120


def configure_logging(level: str | int = "INFO") -> None:
    """Install a stream handler on first use, then only adjust the root level."""
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        level = resolved if isinstance(resolved, int) else logging.INFO
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=LOG_FORMAT)
    root.setLevel(level)


@dataclass(frozen=True)
class LogEntry:
    level: str
    name: str
    message: str
    created: float


class LoggingService(logging.Handler):
    """Bounded in-memory log sink.

    `install()` hooks the service onto the root logger; `uninstall()` removes
    it again. Records keep flowing to the other root handlers either way.
    """

    def __init__(self, event_bus: EventBus | None = None, capacity: int = 500) -> None:
        super().__init__(level=logging.DEBUG)
        self._bus = event_bus
        self._buffer_lock = RLock()
        self._entries: Deque[LogEntry] = deque(maxlen=max(1, capacity))
        self._installed = False
        self._publishing = False

    @property
    def installed(self) -> bool:
        return self._installed

    def install(self) -> None:
        if not self._installed:
            logging.getLogger().addHandler(self)
            self._installed = True

    def uninstall(self) -> None:
        if self._installed:
            logging.getLogger().removeHandler(self)
            self._installed = False

    # logging.Handler ----------------------------------------------------
    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry = LogEntry(record.levelname, record.name, record.getMessage(), record.created)
        except Exception:  # noqa: BLE001 - malformed format args
            self.handleError(record)
            return
        with self._buffer_lock:
            self._entries.append(entry)
        if self._bus is None or self._publishing:
            return
        # Records logged by LOG_RECORD_ADDED handlers are buffered, not republished.
        self._publishing = True
        try:
            self._bus.publish(
                GUIEvent.LOG_RECORD_ADDED,
                {
                    "level": entry.level,
                    "name": entry.name,
                    "message": entry.message[:EVENT_MESSAGE_LIMIT],
                },
            )
        finally:
            self._publishing = False

    # Query --------------------------------------------------------------
    def recent(
        self,
        limit: Optional[int] = None,
        *,
        level: str | None = None,
        name_contains: str | None = None,
    ) -> List[LogEntry]:
        """Buffered entries, oldest first, optionally filtered then truncated to `limit`."""
        with self._buffer_lock:
            entries = list(self._entries)
        if level:
            entries = [e for e in entries if e.level == level.upper()]
        if name_contains:
            entries = [e for e in entries if name_contains in e.name]
        if limit is not None:
            entries = entries[-limit:] if limit > 0 else []
        return entries

    def clear(self) -> None:
        with self._buffer_lock:
            self._entries.clear()

    def export_jsonl(self, path: str | Path, *, level: str | None = None) -> int:
        """Write buffered entries as JSON Lines; returns the number written."""
        entries = self.recent(level=level)
        with open(path, "w", encoding="utf-8") as fh:
            for entry in entries:
                fh.write(json.dumps(asdict(entry), sort_keys=True) + "\n")
        return len(entries)
