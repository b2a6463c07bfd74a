"""Applies the active theme to the running QApplication.

The light/dark palettes are small fixed colour sets; widgets pick up the
palette directly and stylesheets can key off the ``theme`` application
property.
"""

from __future__ import annotations

from typing import Dict, Optional

from PyQt6.QtGui import QColor, QPalette
from PyQt6.QtWidgets import QApplication

from budgetpunk.stores.theme_store import Theme

__all__ = ["PALETTES", "build_palette", "QtThemeApplier"]

PALETTES: Dict[Theme, Dict[str, str]] = {
    Theme.LIGHT: {
        "window": "#ffffff",
        "text": "#0f172a",
        "base": "#f8fafc",
        "button": "#e2e8f0",
        "highlight": "#2563eb",
        "highlighted_text": "#ffffff",
    },
    Theme.DARK: {
        "window": "#0b1120",
        "text": "#e2e8f0",
        "base": "#111827",
        "button": "#1e293b",
        "highlight": "#3b82f6",
        "highlighted_text": "#ffffff",
    },
}

_ROLES = {
    "window": (QPalette.ColorRole.Window,),
    "text": (QPalette.ColorRole.WindowText, QPalette.ColorRole.Text, QPalette.ColorRole.ButtonText),
    "base": (QPalette.ColorRole.Base,),
    "button": (QPalette.ColorRole.Button,),
    "highlight": (QPalette.ColorRole.Highlight,),
    "highlighted_text": (QPalette.ColorRole.HighlightedText,),
}


def build_palette(theme: Theme) -> QPalette:
    palette = QPalette()
    for key, hex_value in PALETTES[theme].items():
        for role in _ROLES[key]:
            palette.setColor(role, QColor(hex_value))
    return palette


class QtThemeApplier:
    """Callable handed to `ThemeStore(apply=...)`."""

    def __init__(self, app: Optional[QApplication] = None) -> None:
        self._app = app

    def __call__(self, theme: Theme) -> None:
        app = self._app or QApplication.instance()
        if app is None:
            raise RuntimeError("QApplication must exist before applying a theme")
        app.setPalette(build_palette(theme))
        app.setProperty("theme", theme.value)
