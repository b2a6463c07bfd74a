"""Route table, access guard and router.

Route resolution is a pure function of the requested path and the session
state, so it can be tested without a view layer:

 - while the session is bootstrapping nothing routes (bootstrap screen);
 - public pages (login, sign-up, password reset) are always reachable;
 - dashboard pages require an identity, otherwise redirect to ``/login``;
 - ``/`` and unknown paths redirect to ``/dashboard``.

`Router` keeps the current path, publishes `GUIEvent.ROUTE_CHANGED` and
feeds the transition controller of the dashboard layout when a protected
page is entered.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from budgetpunk.services.event_bus import EventBus, GUIEvent
from budgetpunk.stores.session_store import SessionState

from .transition import NavigationTransitionController

__all__ = [
    "PUBLIC_ROUTES",
    "PROTECTED_ROUTES",
    "DEFAULT_ROUTE",
    "LOGIN_ROUTE",
    "RouteOutcome",
    "RouteDecision",
    "resolve_route",
    "Router",
]

_logger = logging.getLogger(__name__)

LOGIN_ROUTE = "/login"
DEFAULT_ROUTE = "/dashboard"

PUBLIC_ROUTES: frozenset[str] = frozenset({LOGIN_ROUTE, "/signup", "/reset-password"})
PROTECTED_ROUTES: frozenset[str] = frozenset(
    {DEFAULT_ROUTE, "/savings", "/investments", "/transactions", "/profile"}
)

MAX_REDIRECTS = 3


class RouteOutcome(str, Enum):
    BOOTSTRAP = "bootstrap"
    RENDER = "render"
    REDIRECT = "redirect"


@dataclass(frozen=True)
class RouteDecision:
    outcome: RouteOutcome
    path: Optional[str] = None
    protected: bool = False


def _normalise(path: str) -> str:
    path = (path or "/").split("?", 1)[0].split("#", 1)[0].strip() or "/"
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/")
    return path


def resolve_route(path: str, session: SessionState) -> RouteDecision:
    if session.bootstrapping:
        return RouteDecision(RouteOutcome.BOOTSTRAP)
    path = _normalise(path)
    if path in PUBLIC_ROUTES:
        return RouteDecision(RouteOutcome.RENDER, path)
    if path in PROTECTED_ROUTES:
        if session.identity is None:
            return RouteDecision(RouteOutcome.REDIRECT, LOGIN_ROUTE)
        return RouteDecision(RouteOutcome.RENDER, path, protected=True)
    return RouteDecision(RouteOutcome.REDIRECT, DEFAULT_ROUTE)


class Router:
    """Current-location holder for the shell.

    The transition controller belongs to the dashboard layout; the router
    only notifies it when the rendered page is a protected one.
    """

    def __init__(self, event_bus: EventBus) -> None:
        self._bus = event_bus
        self._current: Optional[str] = None
        self._transitions: Optional[NavigationTransitionController] = None

    @property
    def current(self) -> Optional[str]:
        return self._current

    def attach_transitions(self, controller: Optional[NavigationTransitionController]) -> None:
        self._transitions = controller

    def navigate(self, path: str, session: SessionState) -> RouteDecision:
        decision = resolve_route(path, session)
        hops = 0
        while decision.outcome is RouteOutcome.REDIRECT:
            hops += 1
            if hops > MAX_REDIRECTS:
                raise RuntimeError(f"Redirect loop resolving {path!r}")
            decision = resolve_route(decision.path or DEFAULT_ROUTE, session)
        if decision.outcome is RouteOutcome.BOOTSTRAP:
            return decision
        if decision.path != self._current:
            previous, self._current = self._current, decision.path
            _logger.debug("Route %s -> %s", previous, decision.path)
            self._bus.publish(
                GUIEvent.ROUTE_CHANGED, {"from": previous, "to": decision.path}
            )
            if decision.protected and self._transitions is not None:
                self._transitions.route_changed(decision.path or DEFAULT_ROUTE)
        return decision
