"""System colour-scheme signal sources.

The theme store needs two things from the platform: whether the system
currently prefers a dark scheme, and a notification whenever that changes.
Listeners receive the new ``matches`` value (True = dark).
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Protocol

__all__ = [
    "ColorSchemeListener",
    "ColorSchemeSignal",
    "StaticColorSchemeSignal",
    "QtColorSchemeSignal",
]

_logger = logging.getLogger(__name__)

ColorSchemeListener = Callable[[bool], None]


class ColorSchemeSignal(Protocol):
    @property
    def matches(self) -> bool: ...  # pragma: no cover - structural

    def add_listener(self, listener: ColorSchemeListener) -> None: ...  # pragma: no cover

    def remove_listener(self, listener: ColorSchemeListener) -> None: ...  # pragma: no cover


class StaticColorSchemeSignal:
    """Settable signal used headless and in tests.

    `set_matches()` notifies listeners only when the value actually changes.
    """

    def __init__(self, matches: bool = False) -> None:
        self._matches = bool(matches)
        self._listeners: List[ColorSchemeListener] = []

    @property
    def matches(self) -> bool:
        return self._matches

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def add_listener(self, listener: ColorSchemeListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: ColorSchemeListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def set_matches(self, matches: bool) -> None:
        matches = bool(matches)
        if matches == self._matches:
            return
        self._matches = matches
        for listener in list(self._listeners):
            listener(matches)


class QtColorSchemeSignal:
    """Follows ``QStyleHints.colorScheme`` (Qt 6.5+).

    An ``Unknown`` scheme reads as light. Requires a running QGuiApplication.
    """

    def __init__(self, app: Any = None) -> None:
        from PyQt6.QtCore import Qt
        from PyQt6.QtGui import QGuiApplication

        self._dark = Qt.ColorScheme.Dark
        app = app or QGuiApplication.instance()
        if app is None:
            raise RuntimeError("QtColorSchemeSignal requires a QGuiApplication instance")
        self._hints = app.styleHints()
        self._listeners: List[ColorSchemeListener] = []
        self._hints.colorSchemeChanged.connect(self._on_changed)  # type: ignore[attr-defined]

    @property
    def matches(self) -> bool:
        return self._hints.colorScheme() == self._dark

    def add_listener(self, listener: ColorSchemeListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: ColorSchemeListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def _on_changed(self, scheme: Any) -> None:
        dark = scheme == self._dark
        _logger.debug("System colour scheme changed (dark=%s)", dark)
        for listener in list(self._listeners):
            listener(dark)
