"""Theme preference store.

Reconciles three inputs into one light/dark value:

 1. a persisted choice (``theme`` key in storage), which always wins;
 2. the live system colour scheme, consulted only while nothing is persisted;
 3. a fixed default (light).

An explicit `toggle()` persists the new value and also remembers it in
memory, so later system changes can no longer override it even when the
storage write failed. The system listener checks storage when it fires, not
when it was registered.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional

from budgetpunk.services.event_bus import EventBus, GUIEvent
from budgetpunk.services.storage import KeyValueStore
from budgetpunk.services.system_theme import ColorSchemeListener, ColorSchemeSignal

from .base import Store

__all__ = ["Theme", "ThemeStore", "THEME_STORAGE_KEY"]

_logger = logging.getLogger(__name__)

THEME_STORAGE_KEY = "theme"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"

    @property
    def opposite(self) -> "Theme":
        return Theme.DARK if self is Theme.LIGHT else Theme.LIGHT

    @classmethod
    def from_matches(cls, prefers_dark: bool) -> "Theme":
        return cls.DARK if prefers_dark else cls.LIGHT


ThemeApplier = Callable[[Theme], None]


class ThemeStore(Store[Theme]):
    event = GUIEvent.THEME_CHANGED

    def __init__(
        self,
        storage: KeyValueStore,
        system: ColorSchemeSignal | None = None,
        event_bus: EventBus | None = None,
        *,
        apply: ThemeApplier | None = None,
        default: Theme = Theme.LIGHT,
    ) -> None:
        super().__init__(default, event_bus)
        self._storage = storage
        self._system = system
        self._apply = apply
        self._default = default
        self._listener: Optional[ColorSchemeListener] = None
        self._explicit: Optional[Theme] = None

    @property
    def theme(self) -> Theme:
        return self._state

    @property
    def listening(self) -> bool:
        return self._listener is not None

    # Lifecycle --------------------------------------------------------
    def initialize(self) -> None:
        self.dispose()
        persisted = self._persisted()
        if persisted is None:
            persisted = self._explicit
        if persisted is not None:
            theme = persisted
        elif self._system is not None:
            theme = Theme.from_matches(self._system.matches)
        else:
            theme = self._default
        self._adopt(theme)
        if self._system is not None:
            self._listener = self._on_system_change
            self._system.add_listener(self._listener)

    def dispose(self) -> None:
        if self._listener is not None:
            listener, self._listener = self._listener, None
            if self._system is not None:
                self._system.remove_listener(listener)

    # Mutators ---------------------------------------------------------
    def toggle(self) -> Theme:
        theme = self._state.opposite
        self._explicit = theme
        self._adopt(theme)
        try:
            self._storage.set(THEME_STORAGE_KEY, theme.value)
        except OSError:
            _logger.exception("Could not persist theme preference")
        return theme

    # Internal ---------------------------------------------------------
    def _persisted(self) -> Optional[Theme]:
        raw = self._storage.get(THEME_STORAGE_KEY)
        if raw is None:
            return None
        try:
            return Theme(raw)
        except ValueError:
            _logger.warning("Ignoring unrecognised persisted theme %r", raw)
            return None

    def _on_system_change(self, prefers_dark: bool) -> None:
        if self._explicit is not None or self._persisted() is not None:
            return
        self._adopt(Theme.from_matches(prefers_dark))

    def _adopt(self, theme: Theme) -> None:
        self._commit(theme)
        if self._apply is not None:
            self._apply(theme)
