"""Routing and navigation transitions."""

from .routes import Router, resolve_route  # noqa: F401
from .transition import NavigationTransitionController  # noqa: F401

__all__ = ["Router", "resolve_route", "NavigationTransitionController"]
