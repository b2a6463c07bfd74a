"""Headless application shell.

`AppShell` is the composition root the window (or a test) drives. It starts
the session and theme stores, resolves navigation requests against the
session gate, and owns the dashboard layout lifetime: the navigation
transition controller exists exactly while a protected page is rendered.

The shell re-resolves the last requested path whenever the session changes,
so finishing bootstrap or signing out moves the user to the right page
without the caller having to ask again.

Collaborators are resolved from the context's `ServiceLocator` when the shell
is constructed, so tests can swap one in with ``override_context``.
"""

from __future__ import annotations

import logging
from typing import Optional

from budgetpunk.navigation.routes import RouteDecision, RouteOutcome, Router
from budgetpunk.navigation.transition import NavigationTransitionController
from budgetpunk.services.event_bus import Subscription
from budgetpunk.stores.overlay_store import OverlayScope, OverlaySnapshot, OverlayStore
from budgetpunk.stores.session_store import SessionState, SessionStore
from budgetpunk.stores.theme_store import ThemeStore

from .bootstrap import AppContext
from .config_store import AppConfig

__all__ = ["AppShell", "BOOTSTRAP_SCREEN"]

_logger = logging.getLogger(__name__)

BOOTSTRAP_SCREEN = "bootstrap"


class AppShell:
    def __init__(self, ctx: AppContext) -> None:
        self.ctx = ctx
        services = ctx.services
        self._config = services.get_typed("app_config", AppConfig)
        self._session = services.get_typed("session_store", SessionStore)
        self._theme = services.get_typed("theme_store", ThemeStore)
        self._router = services.get_typed("router", Router)
        self._overlay = services.get_typed("overlay_store", OverlayStore)
        self._scheduler = services.get("scheduler")
        self._started = False
        self._requested: Optional[str] = None
        self._transitions: Optional[NavigationTransitionController] = None
        self._session_sub: Optional[Subscription] = None

    # Lifecycle --------------------------------------------------------
    def start(self, initial_path: str = "/") -> None:
        """Initialise session and theme once; later calls are no-ops."""
        if self._started:
            return
        self._started = True
        self._requested = initial_path
        self._session_sub = self._session.subscribe(self._on_session)
        self._theme.initialize()
        self._session.initialize()
        # A provider that reported synchronously has already triggered routing.
        if not self._session.bootstrapping and self._router.current is None:
            self.navigate(initial_path)

    def dispose(self) -> None:
        if self._session_sub is not None:
            self._session_sub.cancel()
            self._session_sub = None
        self.unmount_dashboard_layout()
        self.ctx.dispose()
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    # Navigation -------------------------------------------------------
    def screen(self) -> str:
        if self._session.bootstrapping:
            return BOOTSTRAP_SCREEN
        return self._router.current or BOOTSTRAP_SCREEN

    def navigate(self, path: str) -> RouteDecision:
        self._requested = path
        decision = self._router.navigate(path, self._session.state)
        if decision.outcome is RouteOutcome.BOOTSTRAP:
            return decision
        if decision.protected and self._transitions is None:
            self.mount_dashboard_layout()
            # The router skipped the controller because it was not mounted yet.
            self._transitions.route_changed(decision.path or "")  # type: ignore[union-attr]
        elif not decision.protected and self._transitions is not None:
            self.unmount_dashboard_layout()
        return decision

    def _on_session(self, state: SessionState) -> None:
        if state.bootstrapping or self._requested is None:
            return
        self.navigate(self._requested)

    # Dashboard layout ---------------------------------------------------
    @property
    def dashboard_mounted(self) -> bool:
        return self._transitions is not None

    @property
    def transitions(self) -> Optional[NavigationTransitionController]:
        return self._transitions

    def mount_dashboard_layout(self) -> NavigationTransitionController:
        if self._transitions is None:
            cfg = self._config
            self._transitions = NavigationTransitionController(
                self._overlay,
                self._scheduler,
                show_delay_ms=cfg.show_delay_ms,
                hide_delay_ms=cfg.hide_delay_ms,
            )
            self._router.attach_transitions(self._transitions)
            _logger.debug("Dashboard layout mounted")
        return self._transitions

    def unmount_dashboard_layout(self) -> None:
        if self._transitions is None:
            return
        self._router.attach_transitions(None)
        self._transitions.dispose()
        self._transitions = None
        _logger.debug("Dashboard layout unmounted")

    # Overlays -----------------------------------------------------------
    def global_overlay(self) -> OverlaySnapshot:
        return self._overlay.snapshot(OverlayScope.GLOBAL)

    def content_overlay(self) -> OverlaySnapshot:
        return self._overlay.snapshot(OverlayScope.CONTENT)
