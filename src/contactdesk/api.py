"""Summary: FastAPI application for ContactDesk.

Importance: Exposes the console view model and operator actions to a browser front end.
Alternatives: Render server-side HTML or use a different web framework.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Any, AsyncIterator

from fastapi import Depends, FastAPI, Header, HTTPException
from pydantic import BaseModel, Field

from contactdesk.app import build_console
from contactdesk.audio import RecordingAudioPlayer
from contactdesk.config import AppConfig
from contactdesk.console import AdminConsole
from contactdesk.errors import AuthError, SessionRequiredError


class LoginRequest(BaseModel):
    """Summary: Request payload for operator sign-in.

    Importance: Keeps credentials in the body rather than the URL.
    Alternatives: Use HTTP basic authentication headers.
    """

    email: str
    password: str


class PasswordResetRequest(BaseModel):
    """Summary: Request payload for a password reset email.

    Importance: Lets operators recover access from the login prompt.
    Alternatives: Reset passwords only in the provider console.
    """

    email: str


class ResizeRequest(BaseModel):
    """Summary: Request payload for viewport resize notifications.

    Importance: Drives the wide/narrow layout switch from the browser.
    Alternatives: Send the width as a query parameter on every view request.
    """

    width: int = Field(ge=0)


def create_app(
    config: AppConfig,
    console: AdminConsole | None = None,
    audio: RecordingAudioPlayer | None = None,
) -> FastAPI:
    """Summary: Create a FastAPI app wired to an admin console.

    Importance: Ensures the API layer shares configuration and providers with the console.
    Alternatives: Instantiate the console globally outside the factory.
    """

    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    chimes = audio or RecordingAudioPlayer()
    console = console or build_console(config, audio=chimes)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        console.close()

    app = FastAPI(title="ContactDesk API", version="0.1.0", lifespan=lifespan)
    app.state.console = console

    def require_api_key(x_api_key: str | None = Header(default=None)) -> None:
        """Summary: Enforce API key authentication when configured.

        Importance: Keeps the console private when exposed beyond localhost.
        Alternatives: Rely on the operator session alone.
        """

        if not config.api_key:
            return
        if x_api_key != config.api_key:
            raise HTTPException(status_code=401, detail="Invalid API key")

    def view_payload() -> dict[str, Any]:
        return asdict(console.render())

    @app.get("/health")
    def health() -> dict[str, str]:
        """Summary: Health check endpoint.

        Importance: Supports uptime checks in local and hosted deployments.
        Alternatives: Use a metrics endpoint only.
        """

        return {"status": "ok"}

    @app.get("/view", dependencies=[Depends(require_api_key)])
    def view() -> dict[str, Any]:
        """Summary: Return the full console view model.

        Importance: Single payload the front end renders after every action.
        Alternatives: Expose separate list and detail endpoints.
        """

        return view_payload()

    @app.post("/session/login", dependencies=[Depends(require_api_key)])
    def login(payload: LoginRequest) -> dict[str, Any]:
        try:
            console.login(payload.email, payload.password)
        except AuthError as exc:
            raise HTTPException(status_code=401, detail=str(exc)) from exc
        return view_payload()

    @app.post("/session/logout", dependencies=[Depends(require_api_key)])
    def logout() -> dict[str, Any]:
        console.logout()
        return view_payload()

    @app.post("/session/password-reset", dependencies=[Depends(require_api_key)])
    def password_reset(payload: PasswordResetRequest) -> dict[str, Any]:
        """Summary: Send a password reset email.

        Importance: Reports failures inline without touching the login error.
        Alternatives: Always report success to the client.
        """

        try:
            console.request_password_reset(payload.email)
        except AuthError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return {"status": "sent"}

    @app.post("/messages/refresh", dependencies=[Depends(require_api_key)])
    def refresh() -> dict[str, Any]:
        try:
            console.refresh()
        except SessionRequiredError as exc:
            raise HTTPException(status_code=401, detail=str(exc)) from exc
        return view_payload()

    @app.post("/messages/{message_id}/select", dependencies=[Depends(require_api_key)])
    def select(message_id: str) -> dict[str, Any]:
        """Summary: Select a message, marking it read.

        Importance: Opens the detail pane for an inquiry.
        Alternatives: Select client-side and post read updates separately.
        """

        try:
            console.select(message_id)
        except SessionRequiredError as exc:
            raise HTTPException(status_code=401, detail=str(exc)) from exc
        return view_payload()

    @app.post("/view/back", dependencies=[Depends(require_api_key)])
    def back() -> dict[str, Any]:
        console.back()
        return view_payload()

    @app.post("/view/resize", dependencies=[Depends(require_api_key)])
    def resize(payload: ResizeRequest) -> dict[str, Any]:
        console.resize(payload.width)
        return view_payload()

    @app.get("/chimes", dependencies=[Depends(require_api_key)])
    def drain_chimes() -> dict[str, Any]:
        """Summary: Return chimes recorded since the last call.

        Importance: The browser plays the arrival sound; the server only decides when.
        Alternatives: Push chimes over server-sent events.
        """

        return {"chimes": chimes.drain()}

    return app


def create_app_from_env() -> FastAPI:
    """Summary: Build the app from environment configuration.

    Importance: Entry point for ASGI servers run with a factory flag.
    Alternatives: Build the app at import time.
    """

    return create_app(AppConfig.from_env())
