"""Reactive application stores (overlay counters, session gate, theme)."""

from .overlay_store import OverlayIndicator, OverlayScope, OverlayStore  # noqa: F401
from .session_store import SessionState, SessionStore  # noqa: F401
from .theme_store import Theme, ThemeStore  # noqa: F401

__all__ = [
    "OverlayIndicator",
    "OverlayScope",
    "OverlayStore",
    "SessionState",
    "SessionStore",
    "Theme",
    "ThemeStore",
]
