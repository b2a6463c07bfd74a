"""Reactive store base class.

A store owns one immutable state snapshot and a fixed set of mutators. Each
commit replaces the snapshot and publishes it on the shared `EventBus` under
the store's event name, so any number of observers can follow it.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from budgetpunk.services.event_bus import Event, EventBus, GUIEvent, Subscription

__all__ = ["Store"]

S = TypeVar("S")


class Store(Generic[S]):
    event: GUIEvent

    def __init__(self, initial: S, event_bus: EventBus | None = None) -> None:
        self._state = initial
        self._bus = event_bus or EventBus()

    @property
    def state(self) -> S:
        return self._state

    @property
    def event_bus(self) -> EventBus:
        return self._bus

    def subscribe(self, listener: Callable[[S], None]) -> Subscription:
        """Call ``listener(state)`` after every commit; cancel the handle to stop."""

        def handler(evt: Event) -> None:
            listener(evt.payload)

        return self._bus.subscribe(self.event, handler)

    def _commit(self, state: S) -> None:
        if state == self._state:
            return
        self._state = state
        self._bus.publish(self.event, state)
