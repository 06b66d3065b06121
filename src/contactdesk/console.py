"""Summary: Admin console coordinating session, inbox stream, and view state.

Importance: Wires the session gate, message adapter, reconciler, and view controller into one event-driven screen.
Alternatives: Let the HTTP layer orchestrate each component per request.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from contactdesk.audio import AudioPlayer
from contactdesk.errors import SessionRequiredError, StoreError
from contactdesk.formatting import format_timestamp
from contactdesk.models import LayoutMode, Message, SessionState
from contactdesk.reconciler import InboxReconciler, is_new
from contactdesk.session import SessionGate
from contactdesk.store_adapter import MessageStoreAdapter, Snapshot
from contactdesk.subscription import Subscription
from contactdesk.view_state import ViewStateController


logger = logging.getLogger(__name__)

NO_SELECTION_TEXT = "Select a message to view"


@dataclass(frozen=True)
class MessageListItem:
    """Summary: One row of the chat-style message list.

    Importance: Carries only what the list pane shows, including the "New" badge.
    Alternatives: Send full messages and let the front end pick fields.
    """

    id: str
    name: str
    phone: str
    timestamp_label: str
    is_new: bool
    active: bool


@dataclass(frozen=True)
class MessageDetail:
    id: str
    name: str
    service: str
    message: str
    phone: str
    email: str
    timestamp_label: str


@dataclass(frozen=True)
class ConsoleView:
    """Summary: Render-ready state of the whole console.

    Importance: Gives the presentation layer a pure data model to draw.
    Alternatives: Render HTML on the server.
    """

    session_state: SessionState
    operator_email: str | None
    layout: LayoutMode
    loading: bool
    list_error: str | None
    login_error: str | None
    reset_error: str | None
    show_list: bool
    show_detail: bool
    show_back_button: bool
    items: list[MessageListItem] = field(default_factory=list)
    detail: MessageDetail | None = None
    fallback: str | None = None


class AdminConsole:
    """Summary: Event-driven coordinator for the admin inbox screen.

    Importance: Starts the inbox stream with the session and tears it down with the session.
    Alternatives: Keep separate global listeners for auth, store, and resize events.
    """

    def __init__(
        self,
        gate: SessionGate,
        adapter: MessageStoreAdapter,
        view: ViewStateController,
        audio: AudioPlayer,
        chime_resource: str,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._gate = gate
        self._adapter = adapter
        self._view = view
        self._audio = audio
        self._chime_resource = chime_resource
        self._clock = clock or (lambda: datetime.now().astimezone())
        # Events may arrive from HTTP worker threads; handlers run one at a time.
        self._lock = threading.RLock()
        self.reconciler = InboxReconciler(adapter.set_read)
        self.loading = False
        self.list_error: StoreError | None = None
        self._store_subscription: Subscription | None = None
        self._session_subscription = gate.observe_session(self._on_session_state)

    @property
    def gate(self) -> SessionGate:
        return self._gate

    @property
    def view_state(self) -> ViewStateController:
        return self._view

    @property
    def messages(self) -> tuple[Message, ...]:
        return self.reconciler.messages

    def login(self, email: str, password: str) -> None:
        with self._lock:
            self._gate.login(email, password)

    def request_password_reset(self, email: str) -> None:
        with self._lock:
            self._gate.request_password_reset(email)

    def logout(self) -> None:
        with self._lock:
            self._gate.logout()

    def select(self, message_id: str) -> None:
        """Summary: Select a message and mark it read if needed.

        Importance: Opening an inquiry is what clears its "New" badge.
        Alternatives: Require an explicit "mark read" action.
        """

        with self._lock:
            self._require_session()
            self._view.select(message_id)
            self.reconciler.mark_read(message_id)

    def back(self) -> None:
        with self._lock:
            self._view.back()

    def resize(self, width: int) -> LayoutMode:
        with self._lock:
            return self._view.resize(width)

    def refresh(self) -> None:
        """Summary: Expire stale sessions, then pull fresh snapshots from polling stores.

        Importance: The host's polling tick for stores and providers that do not push.
        Alternatives: Run a background poller thread per subscription.
        """

        with self._lock:
            self._gate.check_expiry()
            self._require_session()
            self._adapter.refresh()

    def render(self) -> ConsoleView:
        """Summary: Build the view model for the current state.

        Importance: Applies the session gate and pane rules in one place.
        Alternatives: Let each front end reimplement the rendering rules.
        """

        with self._lock:
            state = self._gate.state
            session = self._gate.session
            base = dict(
                session_state=state,
                operator_email=session.email if session else None,
                layout=self._view.layout,
                login_error=_error_text(self._gate.login_error),
                reset_error=_error_text(self._gate.reset_error),
            )
            if state is not SessionState.AUTHENTICATED:
                return ConsoleView(
                    **base,
                    loading=state is SessionState.RESOLVING,
                    list_error=None,
                    show_list=False,
                    show_detail=False,
                    show_back_button=False,
                )
            now = self._clock()
            panes = self._view.visible_panes()
            selected = self._view.selected_message(self.reconciler.messages)
            items = [
                MessageListItem(
                    id=message.id,
                    name=message.name,
                    phone=message.phone,
                    timestamp_label=format_timestamp(message.timestamp, now),
                    is_new=is_new(message),
                    active=message.id == self._view.selected_id,
                )
                for message in self.reconciler.messages
            ]
            detail = _detail(selected, now) if selected is not None else None
            return ConsoleView(
                **base,
                loading=self.loading,
                list_error=_error_text(self.list_error),
                show_list=panes.list_pane,
                show_detail=panes.detail_pane,
                show_back_button=self._view.layout is LayoutMode.NARROW and panes.detail_pane,
                items=items,
                detail=detail,
                fallback=None if detail is not None else NO_SELECTION_TEXT,
            )

    def close(self) -> None:
        with self._lock:
            self._session_subscription.close()
            self._stop_stream()
            self._gate.close()

    def _require_session(self) -> None:
        if not self._gate.is_authenticated:
            raise SessionRequiredError()

    def _on_session_state(self, state: SessionState) -> None:
        with self._lock:
            if state is SessionState.AUTHENTICATED:
                self._start_stream()
            elif state is SessionState.UNAUTHENTICATED:
                self._stop_stream()

    def _start_stream(self) -> None:
        if self._store_subscription is not None:
            return
        self.loading = True
        self.list_error = None
        self._store_subscription = self._adapter.subscribe(self._on_snapshot, self._on_store_error)

    def _stop_stream(self) -> None:
        subscription, self._store_subscription = self._store_subscription, None
        if subscription is not None:
            subscription.close()
        self.reconciler.reset()
        self._view.clear()
        self.loading = False
        self.list_error = None

    def _on_snapshot(self, snapshot: Snapshot) -> None:
        with self._lock:
            self.loading = False
            self.list_error = None
            if self.reconciler.apply_snapshot(snapshot):
                self._audio.play(self._chime_resource)

    def _on_store_error(self, error: StoreError) -> None:
        with self._lock:
            logger.warning("Message stream failed: %s", error)
            self.loading = False
            self.list_error = error


def _detail(message: Message, now: datetime) -> MessageDetail:
    return MessageDetail(
        id=message.id,
        name=message.name,
        service=message.service,
        message=message.message,
        phone=message.phone,
        email=message.email,
        timestamp_label=format_timestamp(message.timestamp, now),
    )


def _error_text(error: Exception | None) -> str | None:
    return str(error) if error is not None else None
