"""Identity provider boundary.

The session store only talks to an object satisfying `IdentityProvider`:

 - ``subscribe(callback) -> unsubscribe``: callback receives the signed-in
   `Identity` or ``None`` on every session change, including one initial
   delivery reflecting the current state;
 - ``sign_in``, ``sign_up``, ``sign_out``, ``send_password_reset`` and
   ``set_persistence`` coroutines, failing with `IdentityError`.

`InMemoryIdentityProvider` is the simulated backend used by the demo shell
and by tests. The REST client lives in `rest_identity`.
"""

from __future__ import annotations

import itertools
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol

from .scheduler import Scheduler
from .storage import KeyValueStore

__all__ = [
    "Identity",
    "IdentityError",
    "IdentityListener",
    "IdentityProvider",
    "BaseIdentityProvider",
    "InMemoryIdentityProvider",
    "PERSISTENCE_MODES",
    "describe_identity_error",
]

_logger = logging.getLogger(__name__)

PERSISTENCE_MODES = ("local", "session", "none")
SESSION_STORAGE_KEY = "identity.session"
MAX_FAILED_ATTEMPTS = 5
MIN_PASSWORD_LENGTH = 6


@dataclass(frozen=True)
class Identity:
    uid: str
    email: str
    display_name: Optional[str] = None


class IdentityError(RuntimeError):
    """Provider failure carrying a provider error code (``auth/...``)."""

    def __init__(self, code: str | None, message: str | None = None) -> None:
        self.code = code or ""
        super().__init__(message or self.code or "identity provider error")


_ERROR_MESSAGES: Dict[str, str] = {
    "auth/email-already-in-use": "This email is already in use. Please try a different email or sign in.",
    "auth/invalid-email": "The email address is invalid. Please check and try again.",
    "auth/user-disabled": "This account has been disabled. Please contact support.",
    "auth/user-not-found": "No account found with this email. Please check your email or sign up.",
    "auth/wrong-password": "Incorrect password. Please try again or reset your password.",
    "auth/invalid-credential": "Invalid login credentials. Please check your email and password.",
    "auth/invalid-login-credentials": "Invalid login credentials. Please check your email and password.",
    "auth/too-many-requests": "Too many failed login attempts. Please try again later or reset your password.",
    "auth/weak-password": "Password is too weak. Please use a stronger password (at least 6 characters).",
    "auth/network-request-failed": "Network error. Please check your internet connection and try again.",
    "auth/internal-error": "An internal error occurred. Please try again later.",
}
GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again."


def describe_identity_error(code: object) -> str:
    """Map a provider error code to a user-facing sentence.

    Unknown, empty or non-string codes map to the generic message.
    """
    if not isinstance(code, str):
        return GENERIC_ERROR_MESSAGE
    return _ERROR_MESSAGES.get(code, GENERIC_ERROR_MESSAGE)


IdentityListener = Callable[[Optional[Identity]], None]


class IdentityProvider(Protocol):
    def subscribe(self, callback: IdentityListener) -> Callable[[], None]: ...  # pragma: no cover

    async def sign_in(self, email: str, password: str) -> Identity: ...  # pragma: no cover

    async def sign_up(self, email: str, password: str) -> Identity: ...  # pragma: no cover

    async def sign_out(self) -> None: ...  # pragma: no cover

    async def send_password_reset(self, email: str) -> None: ...  # pragma: no cover

    async def set_persistence(self, mode: str) -> None: ...  # pragma: no cover


class BaseIdentityProvider:
    """Listener bookkeeping and session persistence shared by providers.

    Subclasses call `_set_current()` whenever the signed-in identity changes
    and may extend `_session_record()` / `_restore_record()` to keep extra
    fields (tokens) alongside the identity in storage.
    """

    def __init__(
        self, *, scheduler: Scheduler | None = None, storage: KeyValueStore | None = None
    ) -> None:
        self._scheduler = scheduler
        self._storage = storage
        self._listeners: List[IdentityListener] = []
        self._current: Optional[Identity] = None
        self._persistence = "session"

    @property
    def current(self) -> Optional[Identity]:
        return self._current

    @property
    def persistence(self) -> str:
        return self._persistence

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    # Subscription -------------------------------------------------------
    def subscribe(self, callback: IdentityListener) -> Callable[[], None]:
        # One wrapper per subscription so identity checks never confuse two
        # subscriptions made with equal bound methods.
        def listener(identity: Optional[Identity]) -> None:
            callback(identity)

        self._listeners.append(listener)

        def deliver_initial() -> None:
            if any(existing is listener for existing in self._listeners):
                listener(self._current)

        if self._scheduler is not None:
            self._scheduler.call_later(0, deliver_initial)
        else:
            deliver_initial()

        def unsubscribe() -> None:
            self._listeners[:] = [existing for existing in self._listeners if existing is not listener]

        return unsubscribe

    def _set_current(self, identity: Optional[Identity]) -> None:
        self._current = identity
        self._remember()
        for listener in list(self._listeners):
            listener(identity)

    # Persistence --------------------------------------------------------
    async def set_persistence(self, mode: str) -> None:
        if mode not in PERSISTENCE_MODES:
            raise IdentityError("auth/invalid-persistence-type", f"Unknown persistence {mode!r}")
        self._persistence = mode
        self._remember()

    def _session_record(self, identity: Identity) -> Dict[str, Any]:
        return {"uid": identity.uid, "email": identity.email, "display_name": identity.display_name}

    def _restore_record(self, record: Dict[str, Any]) -> Optional[Identity]:
        return Identity(
            uid=str(record["uid"]),
            email=str(record["email"]),
            display_name=record.get("display_name"),
        )

    def _remember(self) -> None:
        if self._storage is None:
            return
        try:
            if self._persistence == "local" and self._current is not None:
                self._storage.set(SESSION_STORAGE_KEY, json.dumps(self._session_record(self._current)))
            else:
                self._storage.remove(SESSION_STORAGE_KEY)
        except OSError:
            _logger.exception("Could not persist identity session")

    def _restore(self) -> None:
        if self._storage is None:
            return
        raw = self._storage.get(SESSION_STORAGE_KEY)
        if not raw:
            return
        try:
            identity = self._restore_record(json.loads(raw))
        except (ValueError, KeyError, TypeError):
            _logger.warning("Discarding unreadable remembered session")
            self._storage.remove(SESSION_STORAGE_KEY)
            return
        if identity is not None:
            self._current = identity
            self._persistence = "local"
            _logger.debug("Restored remembered session for %s", identity.email)


@dataclass
class _Account:
    identity: Identity
    password: str
    disabled: bool = False
    failed_attempts: int = 0


class InMemoryIdentityProvider(BaseIdentityProvider):
    """Simulated identity backend.

    Parameters
    ----------
    accounts: mapping of email -> password seeded at construction.
    scheduler: when given, the initial delivery to a new subscriber is
        deferred through ``call_later(0, ...)`` the way a real provider
        resolves its state asynchronously; otherwise it is synchronous.
    storage: key-value store used to remember the session under ``local``
        persistence; a remembered session is restored on construction.
    """

    def __init__(
        self,
        accounts: Dict[str, str] | None = None,
        *,
        scheduler: Scheduler | None = None,
        storage: KeyValueStore | None = None,
    ) -> None:
        super().__init__(scheduler=scheduler, storage=storage)
        self._uid_seq = itertools.count(1)
        self._accounts: Dict[str, _Account] = {}
        for email, password in (accounts or {}).items():
            self._create_account(email, password)
        self.network_available = True
        self.sent_resets: List[str] = []
        self._restore()

    def _create_account(self, email: str, password: str) -> _Account:
        key = email.strip().lower()
        account = _Account(Identity(uid=f"user-{next(self._uid_seq)}", email=key), password)
        self._accounts[key] = account
        return account

    def disable(self, email: str) -> None:
        self._accounts[email.strip().lower()].disabled = True

    def _restore_record(self, record: Dict[str, Any]) -> Optional[Identity]:
        account = self._accounts.get(str(record.get("email", "")))
        if account is None or account.disabled:
            return None
        return account.identity

    # Operations ---------------------------------------------------------
    def _check_network(self) -> None:
        if not self.network_available:
            raise IdentityError("auth/network-request-failed")

    @staticmethod
    def _normalise_email(email: str) -> str:
        key = (email or "").strip().lower()
        local, _, domain = key.partition("@")
        if not local or "." not in domain:
            raise IdentityError("auth/invalid-email")
        return key

    async def sign_in(self, email: str, password: str) -> Identity:
        self._check_network()
        key = self._normalise_email(email)
        account = self._accounts.get(key)
        if account is None:
            raise IdentityError("auth/user-not-found")
        if account.disabled:
            raise IdentityError("auth/user-disabled")
        if account.failed_attempts >= MAX_FAILED_ATTEMPTS:
            raise IdentityError("auth/too-many-requests")
        if account.password != password:
            account.failed_attempts += 1
            raise IdentityError("auth/wrong-password")
        account.failed_attempts = 0
        self._set_current(account.identity)
        return account.identity

    async def sign_up(self, email: str, password: str) -> Identity:
        self._check_network()
        key = self._normalise_email(email)
        if key in self._accounts:
            raise IdentityError("auth/email-already-in-use")
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise IdentityError("auth/weak-password")
        account = self._create_account(key, password)
        self._set_current(account.identity)
        return account.identity

    async def sign_out(self) -> None:
        self._check_network()
        self._set_current(None)

    async def send_password_reset(self, email: str) -> None:
        self._check_network()
        key = self._normalise_email(email)
        if key not in self._accounts:
            raise IdentityError("auth/user-not-found")
        self.sent_resets.append(key)
