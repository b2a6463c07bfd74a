"""Application bootstrap for the Budgetpunk shell.

Responsibilities:
 - Load `AppConfig` (file + ``BUDGETPUNK_*`` environment overrides)
 - Configure logging and attach the in-memory log buffer
 - Optional headless bootstrap (for tests / environments without a display)
 - Construct every service and store once and register it in a fresh
   `ServiceLocator`; nothing is stored in module globals
 - Return a single context object with typed references

The bootstrap avoids importing Qt widgets at module import time so headless
tests can run without a display server.
"""

from __future__ import annotations

import logging
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from budgetpunk.bindings.fetch_tracker import FetchTracker, QueryLoadingBinder
from budgetpunk.navigation.routes import Router
from budgetpunk.services.event_bus import EventBus
from budgetpunk.services.identity import IdentityProvider, InMemoryIdentityProvider
from budgetpunk.services.logging_service import LoggingService, configure_logging
from budgetpunk.services.notifications import NotificationCenter
from budgetpunk.services.scheduler import ManualScheduler, QtTimerScheduler, Scheduler
from budgetpunk.services.service_locator import ServiceLocator
from budgetpunk.services.storage import JsonFileStorage, KeyValueStore
from budgetpunk.services.system_theme import (
    ColorSchemeSignal,
    QtColorSchemeSignal,
    StaticColorSchemeSignal,
)
from budgetpunk.stores.overlay_store import OverlayStore
from budgetpunk.stores.session_store import SessionStore
from budgetpunk.stores.theme_store import Theme, ThemeStore

from .config_store import AppConfig, apply_env_overrides, load_config
from .timing import StartupTimer

try:  # Lazy / optional Qt import
    from PyQt6.QtWidgets import QApplication  # type: ignore

    _QT_AVAILABLE = True
except ImportError:  # pragma: no cover - depends on environment
    QApplication = None  # type: ignore
    _QT_AVAILABLE = False

__all__ = ["AppContext", "create_app", "build_identity_provider"]

_logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Container with references created during bootstrap.

    Attributes
    ----------
    qt_app: The QApplication instance (None when headless)
    headless: Whether headless bootstrap was used
    config: Effective configuration after environment overrides
    services: Locator holding every service below by name
    timing: Startup phase timings
    metadata: Free-form diagnostics
    """

    qt_app: Optional[Any]
    headless: bool
    config: AppConfig
    services: ServiceLocator
    event_bus: EventBus
    logging_service: LoggingService
    notifications: NotificationCenter
    storage: KeyValueStore
    scheduler: Scheduler
    identity: IdentityProvider
    overlay: OverlayStore
    session: SessionStore
    theme: ThemeStore
    router: Router
    fetch_tracker: FetchTracker
    query_binder: QueryLoadingBinder
    timing: StartupTimer
    metadata: dict[str, Any] = field(default_factory=dict)

    def dispose(self) -> None:
        self.query_binder.dispose()
        self.session.dispose()
        self.theme.dispose()
        self.logging_service.uninstall()


def build_identity_provider(
    config: AppConfig, *, scheduler: Scheduler | None, storage: KeyValueStore
) -> IdentityProvider:
    if config.identity_backend == "rest":
        # Deferred so the memory backend works without httpx configured.
        from budgetpunk.services.rest_identity import RestIdentityProvider

        return RestIdentityProvider(
            config.identity_api_key or "", scheduler=scheduler, storage=storage
        )
    return InMemoryIdentityProvider(scheduler=scheduler, storage=storage)


def create_app(
    *,
    headless: bool | None = None,
    config: AppConfig | None = None,
    data_dir: str | Path | None = None,
    identity_provider: IdentityProvider | None = None,
    scheduler: Scheduler | None = None,
    color_scheme: ColorSchemeSignal | None = None,
    storage: KeyValueStore | None = None,
) -> AppContext:
    """Create and wire the shell.

    Parameters
    ----------
    headless: Force headless (no QApplication). If None, inferred by Qt availability.
    config: Explicit configuration; loaded from ``data_dir`` when omitted.
    identity_provider / scheduler / color_scheme / storage: injection points,
        mostly for tests; defaults follow ``config`` and ``headless``.
    """
    started = time.perf_counter()
    if headless is None:
        headless = not _QT_AVAILABLE
    timer = StartupTimer()

    with timer.phase("load_config"):
        if config is None:
            config = apply_env_overrides(load_config(data_dir))
        config.validate()
    base_dir = Path(data_dir) if data_dir is not None else Path(config.data_dir)

    with timer.phase("configure_logging"):
        configure_logging(config.log_level)
        bus = EventBus()
        log_service = LoggingService(bus)
        log_service.install()

    qt_app = None
    if not headless:
        if not _QT_AVAILABLE:
            raise RuntimeError("PyQt6 is required unless headless=True")
        with timer.phase("create_qapplication"):
            qt_app = QApplication.instance() or QApplication(sys.argv[:1])

    with timer.phase("register_services"):
        locator = ServiceLocator()
        if storage is None:
            storage = JsonFileStorage(base_dir)
        if scheduler is None:
            scheduler = ManualScheduler() if headless else QtTimerScheduler(qt_app)
        if color_scheme is None:
            color_scheme = StaticColorSchemeSignal() if headless else QtColorSchemeSignal(qt_app)
        if identity_provider is None:
            identity_provider = build_identity_provider(
                config, scheduler=scheduler, storage=storage
            )
        notifications = NotificationCenter(bus)
        overlay = OverlayStore(bus)
        session = SessionStore(identity_provider, notifications, bus)
        apply = None
        if qt_app is not None:
            from budgetpunk.components.theme_applier import QtThemeApplier

            apply = QtThemeApplier(qt_app)
        theme = ThemeStore(storage, color_scheme, bus, apply=apply, default=Theme.LIGHT)
        router = Router(bus)
        tracker = FetchTracker(bus)
        binder = QueryLoadingBinder(tracker, overlay, bus)

        for name, value in [
            ("app_config", config),
            ("event_bus", bus),
            ("logging_service", log_service),
            ("notifications", notifications),
            ("storage", storage),
            ("scheduler", scheduler),
            ("color_scheme", color_scheme),
            ("identity", identity_provider),
            ("overlay_store", overlay),
            ("session_store", session),
            ("theme_store", theme),
            ("router", router),
            ("fetch_tracker", tracker),
            ("startup_timing", timer),
        ]:
            locator.register(name, value, origin="bootstrap")

    timer.stop()
    _logger.debug("Bootstrap finished in %.4fs", timer.total_duration)

    return AppContext(
        qt_app=qt_app,
        headless=headless,
        config=config,
        services=locator,
        event_bus=bus,
        logging_service=log_service,
        notifications=notifications,
        storage=storage,
        scheduler=scheduler,
        identity=identity_provider,
        overlay=overlay,
        session=session,
        theme=theme,
        router=router,
        fetch_tracker=tracker,
        query_binder=binder,
        timing=timer,
        metadata={
            "qt_available": _QT_AVAILABLE,
            "started_at": started,
            "startup_timing": timer.as_dict(),
            "app_config": config.to_dict(),
        },
    )
