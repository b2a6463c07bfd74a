"""Session gate store.

Holds the signed-in identity and the ``bootstrapping`` flag that keeps the
shell on its bootstrap screen until the identity provider has reported the
session state once.

Rules:
 - ``bootstrapping`` starts True and the identity callback is the only code
   path that clears it; it never becomes True again.
 - `initialize()` may be called repeatedly; the previous provider
   subscription is released first so notifications are never delivered twice.
 - Account operations notify success/failure and re-raise provider errors so
   the calling form can react as well. A failure leaves session state as is.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Set

from budgetpunk.app.settings import APP_NAME
from budgetpunk.services.event_bus import EventBus, GUIEvent
from budgetpunk.services.identity import (
    Identity,
    IdentityError,
    IdentityProvider,
    describe_identity_error,
)
from budgetpunk.services.notifications import NotificationCenter

from .base import Store

__all__ = ["SessionState", "SessionStore"]

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionState:
    identity: Optional[Identity] = None
    bootstrapping: bool = True

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None


class SessionStore(Store[SessionState]):
    event = GUIEvent.SESSION_CHANGED

    def __init__(
        self,
        provider: IdentityProvider,
        notifications: NotificationCenter,
        event_bus: EventBus | None = None,
        *,
        persistence: str = "local",
    ) -> None:
        super().__init__(SessionState(), event_bus)
        self._provider = provider
        self._notifications = notifications
        self._persistence = persistence
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._background: Set[asyncio.Task] = set()

    @property
    def identity(self) -> Optional[Identity]:
        return self._state.identity

    @property
    def bootstrapping(self) -> bool:
        return self._state.bootstrapping

    @property
    def subscribed(self) -> bool:
        return self._unsubscribe is not None

    # Lifecycle --------------------------------------------------------
    def initialize(self) -> None:
        self._request_persistence()
        self.dispose()
        self._unsubscribe = self._provider.subscribe(self._on_identity_changed)

    def dispose(self) -> None:
        if self._unsubscribe is not None:
            unsubscribe, self._unsubscribe = self._unsubscribe, None
            unsubscribe()

    def _request_persistence(self) -> None:
        """Fire-and-forget persistence request; failures are only logged."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is None:
            # No event loop (Qt runtime); the request completes synchronously.
            asyncio.run(self._persist())
            return
        task = loop.create_task(self._persist())
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _persist(self) -> None:
        try:
            await self._provider.set_persistence(self._persistence)
        except Exception:  # noqa: BLE001 - persistence is best-effort
            _logger.exception("Session persistence error")

    def _on_identity_changed(self, identity: Optional[Identity]) -> None:
        self._commit(SessionState(identity=identity, bootstrapping=False))

    # Account operations -----------------------------------------------
    async def sign_up(self, email: str, password: str) -> Identity:
        try:
            identity = await self._provider.sign_up(email, password)
        except IdentityError as exc:
            self._fail("Sign up failed", exc)
            raise
        self._notifications.success(
            "Account created successfully!",
            f"Welcome to {APP_NAME}, {identity.email}!",
            duration_ms=5000,
        )
        return identity

    async def sign_in(self, email: str, password: str) -> Identity:
        try:
            identity = await self._provider.sign_in(email, password)
        except IdentityError as exc:
            self._fail("Sign in failed", exc)
            raise
        self._notifications.success(
            "Signed in successfully!", f"Welcome back to {APP_NAME}!", duration_ms=3000
        )
        return identity

    async def log_out(self) -> None:
        try:
            await self._provider.sign_out()
        except IdentityError as exc:
            self._fail("Sign out failed", exc)
            raise
        self._notifications.success("Signed out successfully")

    async def reset_password(self, email: str) -> None:
        try:
            await self._provider.send_password_reset(email)
        except IdentityError as exc:
            self._fail("Password reset failed", exc)
            raise
        self._notifications.success(
            "Password reset email sent",
            "Please check your email for instructions to reset your password.",
            duration_ms=5000,
        )

    def _fail(self, title: str, exc: IdentityError) -> None:
        _logger.info("%s (%s)", title, exc.code or "no code")
        self._notifications.error(title, describe_identity_error(exc.code))
