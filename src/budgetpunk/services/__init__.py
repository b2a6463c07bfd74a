"""Service layer exports.

Responsibilities:
 - Service locator and EventBus publish/subscribe core
 - Identity providers, storage, schedulers and system colour scheme adapters
 - Notifications and the in-memory log buffer
"""

from .event_bus import EventBus, GUIEvent  # noqa: F401
from .service_locator import ServiceLocator  # noqa: F401

__all__ = ["EventBus", "GUIEvent", "ServiceLocator"]
