"""Summary: Error taxonomy for ContactDesk.

Importance: Lets the console tell recoverable auth and store failures apart.
Alternatives: Raise RuntimeError everywhere and match on messages.
"""

from __future__ import annotations

from enum import Enum


class ContactDeskError(Exception):
    """Base class for console errors."""


class AuthErrorKind(str, Enum):
    INVALID_CREDENTIALS = "invalid_credentials"
    RESET_FAILED = "reset_failed"


class StoreErrorKind(str, Enum):
    SUBSCRIPTION_FAILED = "subscription_failed"
    UPDATE_FAILED = "update_failed"


class AuthError(ContactDeskError):
    """Summary: Raised when the identity provider rejects a request.

    Importance: Carries a kind so the login and reset forms report independently.
    Alternatives: Use separate exception classes per failure.
    """

    def __init__(self, kind: AuthErrorKind, message: str | None = None) -> None:
        self.kind = kind
        super().__init__(message or _AUTH_MESSAGES[kind])


class StoreError(ContactDeskError):
    """Summary: Raised when the document store fails a query or write.

    Importance: Distinguishes stream failures, which are shown, from write failures, which are tolerated.
    Alternatives: Propagate raw HTTP errors to callers.
    """

    def __init__(self, kind: StoreErrorKind, message: str | None = None) -> None:
        self.kind = kind
        super().__init__(message or _STORE_MESSAGES[kind])


class SessionRequiredError(ContactDeskError):
    """Raised when message data is requested without an authenticated session."""

    def __init__(self, message: str = "An authenticated session is required") -> None:
        super().__init__(message)


_AUTH_MESSAGES = {
    AuthErrorKind.INVALID_CREDENTIALS: "Invalid email or password",
    AuthErrorKind.RESET_FAILED: "Could not send password reset email",
}

_STORE_MESSAGES = {
    StoreErrorKind.SUBSCRIPTION_FAILED: "Could not load messages",
    StoreErrorKind.UPDATE_FAILED: "Could not update message",
}
