"""In-flight request tracking bound to the global indicator.

`FetchTracker` counts data requests currently in flight and publishes
`GUIEvent.FETCH_COUNT_CHANGED`. `QueryLoadingBinder` watches that count and
holds exactly one global `show("Loading data")` while it is above zero:
shown on the 0 -> n edge, hidden on the n -> 0 edge.
"""

from __future__ import annotations

from contextlib import asynccontextmanager, contextmanager
from typing import AsyncIterator, Iterator, Optional

from budgetpunk.services.event_bus import Event, EventBus, GUIEvent, Subscription
from budgetpunk.stores.overlay_store import OverlayScope, OverlayStore

__all__ = ["FetchTracker", "QueryLoadingBinder", "DATA_LOADING_MESSAGE"]

DATA_LOADING_MESSAGE = "Loading data"


class FetchTracker:
    def __init__(self, event_bus: EventBus) -> None:
        self._bus = event_bus
        self._in_flight = 0

    @property
    def in_flight(self) -> int:
        return self._in_flight

    def begin(self) -> None:
        self._in_flight += 1
        self._bus.publish(GUIEvent.FETCH_COUNT_CHANGED, self._in_flight)

    def end(self) -> None:
        if self._in_flight == 0:
            return
        self._in_flight -= 1
        self._bus.publish(GUIEvent.FETCH_COUNT_CHANGED, self._in_flight)

    @contextmanager
    def track(self) -> Iterator[None]:
        self.begin()
        try:
            yield
        finally:
            self.end()

    @asynccontextmanager
    async def track_async(self) -> AsyncIterator[None]:
        self.begin()
        try:
            yield
        finally:
            self.end()


class QueryLoadingBinder:
    def __init__(self, tracker: FetchTracker, overlay: OverlayStore, event_bus: EventBus) -> None:
        self._overlay = overlay
        self._previous = tracker.in_flight
        self._shown = False
        self._subscription: Optional[Subscription] = event_bus.subscribe(
            GUIEvent.FETCH_COUNT_CHANGED, self._on_count
        )
        if self._previous > 0:
            self._show()

    @property
    def shown(self) -> bool:
        return self._shown

    def _show(self) -> None:
        self._overlay.show(OverlayScope.GLOBAL, DATA_LOADING_MESSAGE)
        self._shown = True

    def _on_count(self, evt: Event) -> None:
        count = int(evt.payload)
        if self._previous == 0 and count > 0 and not self._shown:
            self._show()
        elif self._previous > 0 and count == 0 and self._shown:
            self._overlay.hide(OverlayScope.GLOBAL)
            self._shown = False
        self._previous = count

    def dispose(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None
        if self._shown:
            self._overlay.hide(OverlayScope.GLOBAL)
            self._shown = False
