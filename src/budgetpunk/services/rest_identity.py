"""REST identity provider.

Talks to an identity-toolkit style password endpoint set over
``httpx.AsyncClient``:

 - ``accounts:signInWithPassword``
 - ``accounts:signUp``
 - ``accounts:sendOobCode`` (``PASSWORD_RESET``)

Server error strings (``EMAIL_NOT_FOUND``, ``WEAK_PASSWORD : ...``) are mapped
onto the ``auth/...`` codes understood by `describe_identity_error`. Any
transport failure becomes ``auth/network-request-failed``. Signing out is
local: the remembered tokens are dropped and listeners notified.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .identity import BaseIdentityProvider, Identity, IdentityError
from .scheduler import Scheduler
from .storage import KeyValueStore

__all__ = ["RestIdentityProvider", "DEFAULT_BASE_URL", "map_rest_error"]

_logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://identitytoolkit.googleapis.com/v1"
DEFAULT_TIMEOUT = 15  # seconds

_REST_ERROR_CODES: Dict[str, str] = {
    "EMAIL_EXISTS": "auth/email-already-in-use",
    "INVALID_EMAIL": "auth/invalid-email",
    "MISSING_EMAIL": "auth/invalid-email",
    "USER_DISABLED": "auth/user-disabled",
    "EMAIL_NOT_FOUND": "auth/user-not-found",
    "INVALID_PASSWORD": "auth/wrong-password",
    "INVALID_LOGIN_CREDENTIALS": "auth/invalid-login-credentials",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "auth/too-many-requests",
    "WEAK_PASSWORD": "auth/weak-password",
}


def map_rest_error(message: str | None) -> str:
    """Translate a server error string to an ``auth/...`` code.

    ``"WEAK_PASSWORD : Password should be at least 6 characters"`` maps via
    its leading token; unknown tokens become ``auth/<token-in-kebab-case>``.
    """
    token = (message or "").split(":", 1)[0].strip()
    if not token:
        return "auth/internal-error"
    return _REST_ERROR_CODES.get(token, "auth/" + token.lower().replace("_", "-"))


class RestIdentityProvider(BaseIdentityProvider):
    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        client: httpx.AsyncClient | None = None,
        scheduler: Scheduler | None = None,
        storage: KeyValueStore | None = None,
    ) -> None:
        super().__init__(scheduler=scheduler, storage=storage)
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._client = client
        self._id_token: Optional[str] = None
        self._refresh_token: Optional[str] = None
        self._restore()

    # Persistence hooks ------------------------------------------------
    def _session_record(self, identity: Identity) -> Dict[str, Any]:
        record = super()._session_record(identity)
        record["refresh_token"] = self._refresh_token
        return record

    def _restore_record(self, record: Dict[str, Any]) -> Optional[Identity]:
        identity = super()._restore_record(record)
        self._refresh_token = record.get("refresh_token")
        return identity

    @property
    def id_token(self) -> Optional[str]:
        return self._id_token

    # HTTP ---------------------------------------------------------------
    async def _post(self, endpoint: str, body: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self._base_url}/accounts:{endpoint}"
        close_client = False
        client = self._client
        if client is None:
            client = httpx.AsyncClient(timeout=DEFAULT_TIMEOUT)
            close_client = True
        try:
            resp = await client.post(url, params={"key": self._api_key}, json=body)
        except httpx.TransportError as exc:
            _logger.warning("Identity request %s failed: %s", endpoint, exc)
            raise IdentityError("auth/network-request-failed", str(exc)) from exc
        finally:
            if close_client:
                await client.aclose()
        try:
            data = resp.json()
        except ValueError:
            data = {}
        if resp.is_error:
            message = (data.get("error") or {}).get("message") if isinstance(data, dict) else None
            code = map_rest_error(message)
            _logger.info("Identity request %s rejected (%s, %s)", endpoint, resp.status_code, code)
            raise IdentityError(code, message)
        return data if isinstance(data, dict) else {}

    def _adopt(self, data: Dict[str, Any]) -> Identity:
        identity = Identity(
            uid=str(data.get("localId", "")),
            email=str(data.get("email", "")),
            display_name=data.get("displayName") or None,
        )
        self._id_token = data.get("idToken")
        self._refresh_token = data.get("refreshToken")
        self._set_current(identity)
        return identity

    # Operations ---------------------------------------------------------
    async def sign_in(self, email: str, password: str) -> Identity:
        data = await self._post(
            "signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        return self._adopt(data)

    async def sign_up(self, email: str, password: str) -> Identity:
        data = await self._post(
            "signUp", {"email": email, "password": password, "returnSecureToken": True}
        )
        return self._adopt(data)

    async def sign_out(self) -> None:
        self._id_token = None
        self._refresh_token = None
        self._set_current(None)

    async def send_password_reset(self, email: str) -> None:
        await self._post("sendOobCode", {"requestType": "PASSWORD_RESET", "email": email})
