"""Summary: Session gate tracking whether an operator is signed in.

Importance: Blocks every message operation until the identity provider reports a session.
Alternatives: Check the provider token inline before each store call.
"""

from __future__ import annotations

import logging
from typing import Callable

from contactdesk.errors import AuthError
from contactdesk.identity import IdentityProvider
from contactdesk.models import Session, SessionState
from contactdesk.subscription import ListenerSet, Subscription


logger = logging.getLogger(__name__)

SessionCallback = Callable[[SessionState], None]


class SessionGate:
    """Summary: Resolving/Unauthenticated/Authenticated state machine over an identity provider.

    Importance: Single source of truth for whether message data may be fetched.
    Alternatives: Let each component observe the identity provider directly.
    """

    def __init__(self, identity: IdentityProvider) -> None:
        self._identity = identity
        self._state = SessionState.RESOLVING
        self._session: Session | None = None
        self._listeners = ListenerSet()
        self.login_error: AuthError | None = None
        self.reset_error: AuthError | None = None
        self._auth_subscription = identity.observe_auth_state(self._on_auth_state)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._state is SessionState.AUTHENTICATED

    def login(self, email: str, password: str) -> Session:
        """Summary: Sign the operator in.

        Importance: Unblocks the store subscription once credentials are accepted.
        Alternatives: Accept a pre-issued token instead of credentials.
        """

        try:
            session = self._identity.sign_in(email, password)
        except AuthError as exc:
            self.login_error = exc
            raise
        self.login_error = None
        # Providers normally report the change themselves; this covers ones that do not.
        self._on_auth_state(session)
        logger.info("Operator signed in.")
        return session

    def request_password_reset(self, email: str) -> None:
        """Summary: Ask the identity provider to email a reset link.

        Importance: Recovery path that never touches the current session or login error.
        Alternatives: Route resets through a separate support workflow.
        """

        try:
            self._identity.send_password_reset(email)
        except AuthError as exc:
            self.reset_error = exc
            raise
        self.reset_error = None
        logger.info("Password reset requested.")

    def observe_session(self, callback: SessionCallback) -> Subscription:
        """Summary: Subscribe to state changes, firing once immediately.

        Importance: Lets downstream components start and stop with the session.
        Alternatives: Poll the gate state on every user action.
        """

        subscription = self._listeners.add(callback)
        callback(self._state)
        return subscription

    def logout(self) -> None:
        self._identity.sign_out()
        self._on_auth_state(None)
        logger.info("Operator signed out.")

    def check_expiry(self) -> bool:
        return self._identity.check_expiry()

    def close(self) -> None:
        self._auth_subscription.close()

    def _on_auth_state(self, session: Session | None) -> None:
        self._session = session
        state = SessionState.AUTHENTICATED if session is not None else SessionState.UNAUTHENTICATED
        if state is self._state:
            return
        self._state = state
        self._listeners.notify(state)
