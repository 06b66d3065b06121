"""Summary: Identity provider interfaces and implementations.

Importance: Encapsulates operator sign-in, password reset, and auth state changes.
Alternatives: Call the hosted identity SDK directly from the session gate.
"""

from __future__ import annotations

import json
import logging
import re
import secrets
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable
import urllib.parse

from contactdesk.errors import AuthError, AuthErrorKind
from contactdesk.models import OperatorAccount, Session
from contactdesk.rest import RestRequestError, Transport, request_json
from contactdesk.subscription import ListenerSet, Subscription


logger = logging.getLogger(__name__)

AuthCallback = Callable[[Session | None], None]

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class IdentityProvider(ABC):
    """Summary: Abstract interface for the hosted identity service.

    Importance: Standardizes auth across the mock and Firebase providers.
    Alternatives: Use provider-specific classes directly in the session gate.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._listeners = ListenerSet()
        self._session: Session | None = None
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def current_session(self) -> Session | None:
        return self._session

    def current_token(self) -> str | None:
        return self._session.identity if self._session else None

    @abstractmethod
    def sign_in(self, email: str, password: str) -> Session:
        """Summary: Authenticate an operator and return the new session.

        Importance: Unlocks message access for the console.
        Alternatives: Authenticate with single sign-on instead of passwords.
        """

    @abstractmethod
    def send_password_reset(self, email: str) -> None:
        """Summary: Dispatch a password reset email.

        Importance: Lets operators recover access without an administrator.
        Alternatives: Reset passwords manually in the provider console.
        """

    def observe_auth_state(self, callback: AuthCallback) -> Subscription:
        """Summary: Subscribe to session changes, firing once with the current state.

        Importance: Lets the session gate resolve its initial state and track external changes.
        Alternatives: Poll the provider for the current session.
        """

        subscription = self._listeners.add(callback)
        callback(self._session)
        return subscription

    def sign_out(self) -> None:
        self._set_session(None)

    def check_expiry(self) -> bool:
        """Summary: Sign out when the current token has expired.

        Importance: Reports external token expiry as a session change.
        Alternatives: Refresh tokens with the secure token endpoint.
        """

        session = self._session
        if session is None or session.expires_at is None:
            return False
        if self._clock() < session.expires_at:
            return False
        logger.info("Identity token expired.")
        self._set_session(None)
        return True

    def _set_session(self, session: Session | None) -> None:
        self._session = session
        self._listeners.notify(session)


class MockIdentityProvider(IdentityProvider):
    """Summary: In-process identity provider backed by a fixture of operator accounts.

    Importance: Supports offline testing and demos of the login gate.
    Alternatives: Run the hosted provider's local emulator.
    """

    def __init__(self, accounts: list[OperatorAccount]) -> None:
        super().__init__()
        self._accounts = {account.email.lower(): account for account in accounts}
        self.sent_resets: list[str] = []

    @staticmethod
    def from_fixture(fixture_path: Path) -> "MockIdentityProvider":
        """Summary: Load operator accounts from a JSON fixture.

        Importance: Keeps demo credentials out of code.
        Alternatives: Hardcode a single demo account.
        """

        data = json.loads(fixture_path.read_text(encoding="utf-8"))
        accounts = [OperatorAccount(email=item["email"], password=item["password"]) for item in data]
        return MockIdentityProvider(accounts)

    def sign_in(self, email: str, password: str) -> Session:
        account = self._accounts.get(email.strip().lower())
        if account is None or account.password != password:
            raise AuthError(AuthErrorKind.INVALID_CREDENTIALS)
        session = Session(identity=secrets.token_urlsafe(24), email=account.email)
        self._set_session(session)
        return session

    def send_password_reset(self, email: str) -> None:
        normalized = email.strip().lower()
        if not _EMAIL_PATTERN.match(normalized):
            raise AuthError(AuthErrorKind.RESET_FAILED)
        if normalized in self._accounts:
            self.sent_resets.append(normalized)

    def revoke(self) -> None:
        """Summary: Invalidate the current session from outside the console.

        Importance: Simulates token revocation for teardown tests.
        Alternatives: Expire tokens by advancing a fake clock.
        """

        self._set_session(None)


class FirebaseIdentityProvider(IdentityProvider):
    """Summary: Identity provider using the Identity Toolkit REST API.

    Importance: Signs operators in against the hosted project without an SDK.
    Alternatives: Use the firebase-admin SDK or a browser-side auth library.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        transport: Transport = request_json,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        super().__init__(clock)
        if not api_key:
            raise ValueError("Missing Firebase API key")
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._transport = transport

    def sign_in(self, email: str, password: str) -> Session:
        url = self._endpoint("accounts:signInWithPassword")
        try:
            response = self._transport(url, _sign_in_payload(email, password))
        except RestRequestError as exc:
            # Provider codes distinguish unknown email from bad password; both map to one kind.
            logger.info("Sign-in rejected by identity provider (%s).", exc.code or exc.status)
            raise AuthError(AuthErrorKind.INVALID_CREDENTIALS) from exc
        session = _session_from_response(response, email, self._clock())
        self._set_session(session)
        return session

    def send_password_reset(self, email: str) -> None:
        url = self._endpoint("accounts:sendOobCode")
        try:
            self._transport(url, _reset_payload(email))
        except RestRequestError as exc:
            raise AuthError(AuthErrorKind.RESET_FAILED) from exc

    def _endpoint(self, action: str) -> str:
        return f"{self._base_url}/{action}?" + urllib.parse.urlencode({"key": self._api_key})


def _sign_in_payload(email: str, password: str) -> dict[str, Any]:
    return {"email": email, "password": password, "returnSecureToken": True}


def _reset_payload(email: str) -> dict[str, Any]:
    return {"requestType": "PASSWORD_RESET", "email": email}


def _session_from_response(payload: dict[str, Any], email: str, now: datetime) -> Session:
    """Summary: Build a Session from a sign-in response.

    Importance: Normalizes token expiry into an absolute time.
    Alternatives: Keep the raw response and compute expiry on demand.
    """

    expires_in = payload.get("expiresIn")
    expires_at = None
    if expires_in is not None:
        try:
            expires_at = now + timedelta(seconds=int(expires_in))
        except ValueError:
            expires_at = None
    return Session(
        identity=payload["idToken"],
        email=payload.get("email") or email,
        expires_at=expires_at,
    )
