"""Summary: Minimal JSON-over-HTTP helper for hosted provider APIs.

Importance: Talks to the identity and document REST endpoints without extra dependencies.
Alternatives: Use requests or the firebase-admin SDK.
"""

from __future__ import annotations

import json
from typing import Any, Callable
import urllib.error
import urllib.request


Transport = Callable[..., Any]


class RestRequestError(RuntimeError):
    """Summary: Raised when a provider endpoint returns an error or is unreachable.

    Importance: Keeps the HTTP status and provider error code for mapping to domain errors.
    Alternatives: Let urllib exceptions escape to callers.
    """

    def __init__(self, status: int | None, code: str, detail: str) -> None:
        self.status = status
        self.code = code
        super().__init__(f"Request failed ({status}): {code or detail}")


def request_json(
    url: str,
    payload: dict[str, Any] | None = None,
    method: str = "POST",
    token: str | None = None,
) -> Any:
    """Summary: Send a JSON request and parse the JSON response.

    Importance: Single code path for identity and document store calls.
    Alternatives: Use provider-specific HTTP helpers in each module.
    """

    headers = {"Content-Type": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    data = json.dumps(payload).encode("utf-8") if payload is not None else None
    request = urllib.request.Request(url, data=data, headers=headers, method=method)
    try:
        with urllib.request.urlopen(request, timeout=10) as response:
            raw = response.read().decode("utf-8")
    except urllib.error.HTTPError as exc:
        error_body = exc.read().decode("utf-8")
        raise RestRequestError(exc.code, _error_code(error_body), error_body or str(exc.reason)) from exc
    except urllib.error.URLError as exc:
        raise RestRequestError(None, "", str(exc.reason)) from exc
    return json.loads(raw) if raw else {}


def _error_code(body: str) -> str:
    """Summary: Extract the provider error code from a Google-style error body.

    Importance: Lets callers branch on codes like INVALID_PASSWORD without string parsing.
    Alternatives: Match substrings in the raw body.
    """

    try:
        payload = json.loads(body)
    except ValueError:
        return ""
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict):
        return str(error.get("message") or error.get("status") or "")
    if isinstance(payload, list) and payload:
        return _error_code(json.dumps(payload[0]))
    return ""
