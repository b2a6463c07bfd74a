"""Per-application service container.

Each `AppContext` owns one `ServiceLocator`; there is no process-wide
instance, so two contexts built in the same test session never observe each
other's stores or subscriptions.

Usage pattern:
    locator = ServiceLocator()
    locator.register("event_bus", EventBus())
    bus = locator.get_typed("event_bus", EventBus)

In tests:
    with locator.override_context(scheduler=ManualScheduler()):
        ...
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from threading import RLock
from typing import Any, Dict, Iterator, List, Optional, Type, TypeVar

T = TypeVar("T")

__all__ = ["ServiceLocator", "ServiceAlreadyRegisteredError", "ServiceNotFoundError"]


class ServiceAlreadyRegisteredError(RuntimeError):
    """A key was registered twice without ``allow_override``."""


class ServiceNotFoundError(KeyError):
    """No service is registered under the requested key."""


@dataclass(frozen=True)
class _Entry:
    value: Any
    origin: Optional[str] = None


class ServiceLocator:
    """Name -> service mapping guarded by a re-entrant lock."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._entries: Dict[str, _Entry] = {}

    # Registration -------------------------------------------------------
    def register(
        self, key: str, value: Any, *, allow_override: bool = False, origin: str | None = None
    ) -> None:
        """Store ``value`` under ``key``.

        ``origin`` is free-form provenance (e.g. ``"bootstrap"``) reported by
        `origin_of`. Re-registering a key requires ``allow_override=True``.
        """
        with self._lock:
            if not allow_override and key in self._entries:
                raise ServiceAlreadyRegisteredError(f"Service {key!r} is already registered")
            self._entries[key] = _Entry(value, origin)

    def unregister(self, key: str) -> None:
        with self._lock:
            if self._entries.pop(key, None) is None:
                raise ServiceNotFoundError(key)

    # Lookup -------------------------------------------------------------
    def _entry(self, key: str) -> Optional[_Entry]:
        with self._lock:
            return self._entries.get(key)

    def get(self, key: str) -> Any:
        entry = self._entry(key)
        if entry is None:
            raise ServiceNotFoundError(key)
        return entry.value

    def get_typed(self, key: str, expected_type: Type[T]) -> T:
        value = self.get(key)
        if isinstance(value, expected_type):
            return value
        raise TypeError(
            f"Service {key!r} is a {type(value).__name__}, not a {expected_type.__name__}"
        )

    def try_get(self, key: str, default: Any = None) -> Any:
        entry = self._entry(key)
        return default if entry is None else entry.value

    def origin_of(self, key: str) -> Optional[str]:
        entry = self._entry(key)
        if entry is None:
            raise ServiceNotFoundError(key)
        return entry.origin

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def list_keys(self) -> List[str]:
        with self._lock:
            return list(self._entries)

    # Test support -------------------------------------------------------
    @contextmanager
    def override_context(self, **overrides: Any) -> Iterator[None]:
        """Swap in replacement services for the duration of the block."""
        with self._lock:
            saved = {key: self._entries.get(key) for key in overrides}
            self._entries.update({key: _Entry(value, "override") for key, value in overrides.items()})
        try:
            yield
        finally:
            with self._lock:
                for key, entry in saved.items():
                    if entry is None:
                        self._entries.pop(key, None)
                    else:
                        self._entries[key] = entry
