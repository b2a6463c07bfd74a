"""Overlay counter store.

Two independent busy indicators:

 - ``OverlayScope.GLOBAL``  covers the whole window
 - ``OverlayScope.CONTENT`` covers the routed content region only

Each indicator is a strict reference count. Unrelated call sites may call
`show` and `hide` without coordinating; the indicator stays visible until
every `show` has been matched by a `hide`. Surplus `hide` calls are absorbed
(count floors at zero). When the count returns to zero the message falls back
to the scope default.

Prefer `busy()` where the show/hide pair brackets a block of work; it
guarantees the matching `hide` on every exit path.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterator, Optional

from budgetpunk.services.event_bus import EventBus, GUIEvent

from .base import Store

__all__ = [
    "OverlayScope",
    "IndicatorState",
    "OverlayState",
    "OverlaySnapshot",
    "OverlayIndicator",
    "OverlayStore",
    "DEFAULT_MESSAGES",
]

_logger = logging.getLogger(__name__)


class OverlayScope(str, Enum):
    GLOBAL = "global"
    CONTENT = "content"


DEFAULT_MESSAGES: Dict[OverlayScope, str] = {
    OverlayScope.GLOBAL: "Loading",
    OverlayScope.CONTENT: "Loading content",
}


@dataclass(frozen=True)
class IndicatorState:
    visible: bool
    message: str
    active_count: int


@dataclass(frozen=True)
class OverlaySnapshot:
    """Render-time view of one indicator."""

    visible: bool
    message: str


@dataclass(frozen=True)
class OverlayState:
    global_: IndicatorState
    content: IndicatorState

    def of(self, scope: OverlayScope) -> IndicatorState:
        return self.global_ if scope is OverlayScope.GLOBAL else self.content


def _idle(scope: OverlayScope) -> IndicatorState:
    return IndicatorState(visible=False, message=DEFAULT_MESSAGES[scope], active_count=0)


class OverlayStore(Store[OverlayState]):
    event = GUIEvent.OVERLAY_CHANGED

    def __init__(self, event_bus: EventBus | None = None) -> None:
        super().__init__(
            OverlayState(global_=_idle(OverlayScope.GLOBAL), content=_idle(OverlayScope.CONTENT)),
            event_bus,
        )

    # Internal ---------------------------------------------------------
    def _put(self, scope: OverlayScope, indicator: IndicatorState) -> None:
        if scope is OverlayScope.GLOBAL:
            self._commit(replace(self._state, global_=indicator))
        else:
            self._commit(replace(self._state, content=indicator))

    # Mutators ---------------------------------------------------------
    def show(self, scope: OverlayScope, message: Optional[str] = None) -> None:
        current = self._state.of(scope)
        self._put(
            scope,
            IndicatorState(
                visible=True,
                message=message or current.message,
                active_count=current.active_count + 1,
            ),
        )

    def hide(self, scope: OverlayScope) -> None:
        current = self._state.of(scope)
        if current.active_count == 0:
            _logger.debug("hide(%s) with no outstanding show; ignored", scope.value)
            return
        remaining = current.active_count - 1
        if remaining == 0:
            self._put(scope, _idle(scope))
        else:
            self._put(scope, replace(current, active_count=remaining))

    def set_message(self, scope: OverlayScope, message: str) -> None:
        current = self._state.of(scope)
        self._put(scope, replace(current, message=message or DEFAULT_MESSAGES[scope]))

    @contextmanager
    def busy(self, scope: OverlayScope, message: Optional[str] = None) -> Iterator[None]:
        self.show(scope, message)
        try:
            yield
        finally:
            self.hide(scope)

    # Read side --------------------------------------------------------
    def snapshot(self, scope: OverlayScope) -> OverlaySnapshot:
        indicator = self._state.of(scope)
        return OverlaySnapshot(visible=indicator.visible, message=indicator.message)

    def indicator(self, scope: OverlayScope) -> "OverlayIndicator":
        return OverlayIndicator(self, scope)

    @property
    def global_indicator(self) -> "OverlayIndicator":
        return OverlayIndicator(self, OverlayScope.GLOBAL)

    @property
    def content_indicator(self) -> "OverlayIndicator":
        return OverlayIndicator(self, OverlayScope.CONTENT)


class OverlayIndicator:
    """Store operations bound to one scope."""

    def __init__(self, store: OverlayStore, scope: OverlayScope) -> None:
        self.store = store
        self.scope = scope

    @property
    def state(self) -> IndicatorState:
        return self.store.state.of(self.scope)

    @property
    def visible(self) -> bool:
        return self.state.visible

    @property
    def message(self) -> str:
        return self.state.message

    @property
    def active_count(self) -> int:
        return self.state.active_count

    def show(self, message: Optional[str] = None) -> None:
        self.store.show(self.scope, message)

    def hide(self) -> None:
        self.store.hide(self.scope)

    def set_message(self, message: str) -> None:
        self.store.set_message(self.scope, message)

    def busy(self, message: Optional[str] = None):
        return self.store.busy(self.scope, message)

    def snapshot(self) -> OverlaySnapshot:
        return self.store.snapshot(self.scope)
