"""Summary: Domain model dataclasses for ContactDesk.

Importance: Defines the inquiry, session, and layout entities shared across the console.
Alternatives: Use Pydantic models or raw document dictionaries directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping


class SessionState(str, Enum):
    """Summary: Lifecycle states of the operator session.

    Importance: Gates message access until the identity provider reports a signed-in operator.
    Alternatives: Track a nullable token and infer the state on every check.
    """

    RESOLVING = "resolving"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


class LayoutMode(str, Enum):
    """Summary: Presentation modes chosen from the viewport width.

    Importance: Decides whether list and detail panes render side by side.
    Alternatives: Let the front end decide layout with CSS breakpoints only.
    """

    WIDE = "wide"
    NARROW = "narrow"


@dataclass(frozen=True)
class Message:
    """Summary: Represents one inbound contact-form inquiry.

    Importance: Core unit listed, selected, and marked read by the operator.
    Alternatives: Pass raw store documents through to the presentation layer.
    """

    id: str
    name: str
    phone: str
    email: str
    service: str
    message: str
    timestamp: datetime | None
    read: bool = False

    @staticmethod
    def from_document(doc_id: str, data: Mapping[str, Any]) -> "Message":
        """Summary: Build a Message from a store document.

        Importance: Normalizes missing fields so callers never branch on absent keys.
        Alternatives: Validate documents with a schema library and reject partial ones.
        """

        return Message(
            id=str(doc_id),
            name=_text(data.get("name")),
            phone=_text(data.get("phone")),
            email=_text(data.get("email")),
            service=_text(data.get("service")),
            message=_text(data.get("message")),
            timestamp=coerce_timestamp(data.get("timestamp")),
            read=data.get("read") is True,
        )


@dataclass(frozen=True)
class Session:
    """Summary: Authenticated operator credential state.

    Importance: Carries the identity token used for store requests.
    Alternatives: Keep the token only inside the identity provider client.
    """

    identity: str
    email: str
    expires_at: datetime | None = None


@dataclass(frozen=True)
class OperatorAccount:
    """Summary: Operator credentials known to the mock identity provider.

    Importance: Supports offline demos and tests of the login gate.
    Alternatives: Require a live identity provider for every run.
    """

    email: str
    password: str


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def coerce_timestamp(value: Any) -> datetime | None:
    """Summary: Convert stored timestamp values into aware datetimes.

    Importance: Keeps ordering comparisons valid across naive and aware inputs.
    Alternatives: Store epoch integers and convert only when rendering.
    """

    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        parsed = datetime.fromtimestamp(value, tz=timezone.utc)
    else:
        text = str(value)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
