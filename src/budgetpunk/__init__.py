"""Budgetpunk application shell public API.

Curated, small surface for the launcher and tests. Qt widgets live in
`budgetpunk.components` and are never imported from here, so importing the
package does not require a display.
"""

from __future__ import annotations

from .services.event_bus import Event, EventBus, GUIEvent  # noqa: F401
from .services.service_locator import (  # noqa: F401
    ServiceAlreadyRegisteredError,
    ServiceLocator,
    ServiceNotFoundError,
)

__version__ = "0.1.0"

__all__ = [
    "Event",
    "EventBus",
    "GUIEvent",
    "ServiceLocator",
    "ServiceAlreadyRegisteredError",
    "ServiceNotFoundError",
    "__version__",
]
