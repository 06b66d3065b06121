"""Summary: Message store adapter over the document store.

Importance: Turns raw documents into ordered, normalized message snapshots for an authenticated session.
Alternatives: Let the reconciler read documents from the store directly.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Iterable

from contactdesk.document_store import Document, DocumentStore
from contactdesk.errors import SessionRequiredError, StoreError
from contactdesk.models import Message
from contactdesk.session import SessionGate
from contactdesk.subscription import Subscription


logger = logging.getLogger(__name__)

Snapshot = tuple[Message, ...]

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


class MessageStoreAdapter:
    """Summary: Subscribes to the messages collection while a session is active.

    Importance: Enforces that no message data is fetched without an operator session.
    Alternatives: Check the session in every caller.
    """

    def __init__(
        self,
        store: DocumentStore,
        gate: SessionGate,
        collection: str = "messages",
        order_by: str = "timestamp",
    ) -> None:
        self._store = store
        self._gate = gate
        self._collection = collection
        self._order_by = order_by
        self.last_snapshot: Snapshot = ()

    def subscribe(
        self,
        on_snapshot: Callable[[Snapshot], None],
        on_error: Callable[[StoreError], None],
    ) -> Subscription:
        """Summary: Stream ordered snapshots until the subscription is closed.

        Importance: Feeds the reconciler with live inbox contents.
        Alternatives: Fetch the inbox once per page load.
        """

        if not self._gate.is_authenticated:
            raise SessionRequiredError()
        active = True

        def _deliver(documents: list[Document]) -> None:
            if not active:
                return
            snapshot = to_snapshot(documents)
            self.last_snapshot = snapshot
            on_snapshot(snapshot)

        def _fail(error: StoreError) -> None:
            if active:
                on_error(error)

        query = self._store.query_ordered(self._collection, self._order_by, descending=True)
        logger.info("Subscribing to %s.", self._collection)
        inner = query.subscribe(_deliver, _fail)

        def _stop() -> None:
            nonlocal active
            active = False
            inner.close()
            self.last_snapshot = ()
            logger.info("Unsubscribed from %s.", self._collection)

        return Subscription(_stop)

    def set_read(self, message_id: str) -> None:
        if not self._gate.is_authenticated:
            raise SessionRequiredError()
        self._store.update_field(self._collection, message_id, "read", True)

    def refresh(self) -> None:
        if self._gate.is_authenticated:
            self._store.refresh()


def to_snapshot(documents: Iterable[Document]) -> Snapshot:
    """Summary: Normalize documents and order them newest first.

    Importance: Guarantees descending timestamp order with stable ties regardless of store behavior.
    Alternatives: Trust the store's ordering.
    """

    messages = [Message.from_document(doc_id, data) for doc_id, data in documents]
    # sorted() is stable with reverse=True, so equal timestamps keep store order.
    ordered = sorted(
        messages,
        key=lambda message: (message.timestamp is not None, message.timestamp or _OLDEST),
        reverse=True,
    )
    return tuple(ordered)
