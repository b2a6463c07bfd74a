"""Loading overlay widget.

Renders one overlay indicator (global or content scope): a translucent cover
with a busy bar and the indicator message. The widget holds no counter of its
own; it mirrors the `OverlayStore` and follows every commit until disposed.

Properties exposed for QSS theming:
 - objectName: ``globalLoadingOverlay`` / ``contentLoadingOverlay``
 - dynamic property ``scope``: ``global`` or ``content``
"""

from __future__ import annotations

from typing import Optional

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QLabel, QProgressBar, QVBoxLayout, QWidget

from budgetpunk.services.event_bus import Subscription
from budgetpunk.stores.overlay_store import OverlayIndicator, OverlayState

__all__ = ["LoadingOverlay", "OBJECT_NAMES"]

OBJECT_NAMES = {
    "global": "globalLoadingOverlay",
    "content": "contentLoadingOverlay",
}


class LoadingOverlay(QWidget):
    def __init__(self, indicator: OverlayIndicator, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._indicator = indicator
        scope = indicator.scope.value
        self.setObjectName(OBJECT_NAMES[scope])
        self.setProperty("scope", scope)
        self.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)

        self._bar = QProgressBar(self)
        self._bar.setRange(0, 0)  # indeterminate
        self._bar.setTextVisible(False)
        self._bar.setFixedWidth(160)
        self._label = QLabel(self)
        self._label.setObjectName("loadingOverlayMessage")
        self._label.setAlignment(Qt.AlignmentFlag.AlignCenter)

        layout = QVBoxLayout(self)
        layout.addStretch(1)
        layout.addWidget(self._bar, 0, Qt.AlignmentFlag.AlignHCenter)
        layout.addWidget(self._label)
        layout.addStretch(1)

        self._subscription: Optional[Subscription] = indicator.store.subscribe(self._on_state)
        # Qt may delete the widget (or its parent) without dispose().
        sub = self._subscription
        self.destroyed.connect(lambda *_: sub.cancel())
        self._sync()

    # Binding -----------------------------------------------------------
    def _on_state(self, state: OverlayState) -> None:
        self._sync()

    def _sync(self) -> None:
        snap = self._indicator.snapshot()
        self._label.setText(snap.message)
        self.setAccessibleName(snap.message)
        self.setVisible(snap.visible)
        if snap.visible:
            self.raise_()
            parent = self.parentWidget()
            if parent is not None:
                self.setGeometry(parent.rect())

    def dispose(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

    # Convenience for tests ---------------------------------------------
    def message(self) -> str:
        return self._label.text()

    def is_bound(self) -> bool:
        return self._subscription is not None
