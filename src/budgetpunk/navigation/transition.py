"""Navigation transition controller.

Debounces the content-region busy indicator around route changes:

    route change ──┬── +show_delay ──> show(CONTENT, "Loading page")
                   └── +hide_delay ──> hide(CONTENT)

Both timers are measured from the same route-change instant (they are not
chained), so a navigation settling before ``show_delay`` never shows anything
and one settling inside the window shows the indicator only briefly.

States:  IDLE -> PENDING_SHOW -> SHOWN -> IDLE
         IDLE -> PENDING_SHOW -> IDLE      (show cancelled)

Every exit path (next route change, `dispose()`, leaving the ``with`` block)
cancels both timers. If the show already fired but the hide did not, the
matching hide is issued immediately so the content counter is never left
incremented by a transition that no longer exists.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from budgetpunk.services.scheduler import Scheduler, TimerHandle
from budgetpunk.stores.overlay_store import OverlayScope, OverlayStore

__all__ = [
    "TransitionState",
    "NavigationTransitionController",
    "DEFAULT_SHOW_DELAY_MS",
    "DEFAULT_HIDE_DELAY_MS",
    "PAGE_LOADING_MESSAGE",
]

_logger = logging.getLogger(__name__)

DEFAULT_SHOW_DELAY_MS = 100
DEFAULT_HIDE_DELAY_MS = 250
PAGE_LOADING_MESSAGE = "Loading page"


class TransitionState(str, Enum):
    IDLE = "idle"
    PENDING_SHOW = "pending_show"
    SHOWN = "shown"


class NavigationTransitionController:
    def __init__(
        self,
        overlay: OverlayStore,
        scheduler: Scheduler,
        *,
        show_delay_ms: int = DEFAULT_SHOW_DELAY_MS,
        hide_delay_ms: int = DEFAULT_HIDE_DELAY_MS,
        message: str = PAGE_LOADING_MESSAGE,
    ) -> None:
        if hide_delay_ms < show_delay_ms:
            raise ValueError("hide_delay_ms must not be shorter than show_delay_ms")
        self._overlay = overlay
        self._scheduler = scheduler
        self.show_delay_ms = show_delay_ms
        self.hide_delay_ms = hide_delay_ms
        self.message = message
        self._show_timer: Optional[TimerHandle] = None
        self._hide_timer: Optional[TimerHandle] = None
        self._state = TransitionState.IDLE
        self._route: Optional[str] = None
        self._disposed = False

    @property
    def state(self) -> TransitionState:
        return self._state

    @property
    def route(self) -> Optional[str]:
        return self._route

    @property
    def disposed(self) -> bool:
        return self._disposed

    # Public API -------------------------------------------------------
    def route_changed(self, route: str) -> None:
        if self._disposed:
            raise RuntimeError("NavigationTransitionController already disposed")
        self._cancel()
        self._route = route
        self._state = TransitionState.PENDING_SHOW
        self._show_timer = self._scheduler.call_later(self.show_delay_ms, self._on_show)
        self._hide_timer = self._scheduler.call_later(self.hide_delay_ms, self._on_hide)
        _logger.debug("Transition to %s scheduled", route)

    def dispose(self) -> None:
        self._cancel()
        self._disposed = True

    def __enter__(self) -> "NavigationTransitionController":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    # Timers -------------------------------------------------------------
    def _cancel(self) -> None:
        for timer in (self._show_timer, self._hide_timer):
            if timer is not None:
                timer.cancel()
        self._show_timer = None
        self._hide_timer = None
        if self._state is TransitionState.SHOWN:
            self._overlay.hide(OverlayScope.CONTENT)
        self._state = TransitionState.IDLE

    def _on_show(self) -> None:
        self._show_timer = None
        if self._state is not TransitionState.PENDING_SHOW:
            return
        self._state = TransitionState.SHOWN
        self._overlay.show(OverlayScope.CONTENT, self.message)

    def _on_hide(self) -> None:
        self._hide_timer = None
        if self._state is TransitionState.SHOWN:
            self._overlay.hide(OverlayScope.CONTENT)
        self._state = TransitionState.IDLE
