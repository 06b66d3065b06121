"""Summary: Document store interfaces and implementations.

Importance: Encapsulates ordered collection subscriptions and field updates against the hosted database.
Alternatives: Rely solely on a vendor SDK with its own listener threads.
"""

from __future__ import annotations

import json
import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable
import urllib.parse

from contactdesk.errors import StoreError, StoreErrorKind
from contactdesk.models import coerce_timestamp
from contactdesk.rest import RestRequestError, Transport, request_json
from contactdesk.subscription import Subscription


logger = logging.getLogger(__name__)

Document = tuple[str, dict[str, Any]]
SnapshotCallback = Callable[[list[Document]], None]
ErrorCallback = Callable[[StoreError], None]


class OrderedQuery(ABC):
    """Summary: A collection query ordered by one field.

    Importance: Gives the message adapter a subscribable, ordered document stream.
    Alternatives: Fetch the whole collection and sort client-side each time.
    """

    def __init__(self, collection: str, order_by: str, descending: bool) -> None:
        self.collection = collection
        self.order_by = order_by
        self.descending = descending

    @abstractmethod
    def subscribe(self, on_snapshot: SnapshotCallback, on_error: ErrorCallback) -> Subscription:
        """Summary: Deliver the current documents now and again on every change.

        Importance: Drives live inbox updates without manual reloads.
        Alternatives: Re-run the query on a timer from the caller.
        """


class DocumentStore(ABC):
    """Summary: Abstract interface for the hosted document database.

    Importance: Standardizes access across the in-memory and Firestore stores.
    Alternatives: Use store-specific classes directly in the adapter.
    """

    @abstractmethod
    def query_ordered(self, collection: str, order_by: str, descending: bool = True) -> OrderedQuery:
        """Summary: Build an ordered query over a collection."""

    @abstractmethod
    def update_field(self, collection: str, doc_id: str, field: str, value: Any) -> None:
        """Summary: Set one field on an existing document.

        Importance: Supports the read flag, the only mutable message field.
        Alternatives: Replace whole documents on every change.
        """

    def refresh(self) -> None:
        """Pull fresh data for active subscriptions; push-based stores do nothing."""


class InMemoryDocumentStore(DocumentStore):
    """Summary: Process-local document store that pushes snapshots on every write.

    Importance: Supports offline demos and deterministic tests of live updates.
    Alternatives: Run the hosted database emulator.
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._queries: list[_InMemoryQuery] = []
        self.fail_updates = False

    @staticmethod
    def from_fixture(fixture_path: Path, collection: str) -> "InMemoryDocumentStore":
        """Summary: Load documents from a JSON fixture into one collection.

        Importance: Provides predictable inbox data for demos.
        Alternatives: Generate synthetic messages at startup.
        """

        store = InMemoryDocumentStore()
        data = json.loads(fixture_path.read_text(encoding="utf-8"))
        for item in data:
            fields = dict(item)
            doc_id = fields.pop("id", None)
            store.add_document(collection, fields, doc_id=doc_id)
        return store

    def add_document(self, collection: str, data: dict[str, Any], doc_id: str | None = None) -> str:
        doc_id = doc_id or uuid.uuid4().hex
        self._collections.setdefault(collection, {})[doc_id] = dict(data)
        self._publish(collection)
        return doc_id

    def delete_document(self, collection: str, doc_id: str) -> None:
        if self._collections.get(collection, {}).pop(doc_id, None) is not None:
            self._publish(collection)

    def fail_subscriptions(self, collection: str, error: StoreError | None = None) -> None:
        """Summary: Break every live stream on a collection.

        Importance: Simulates a dropped listener for error-state tests.
        Alternatives: Inject a failing transport.
        """

        error = error or StoreError(StoreErrorKind.SUBSCRIPTION_FAILED)
        for query in list(self._queries):
            if query.collection == collection:
                query.fail(error)

    def query_ordered(self, collection: str, order_by: str, descending: bool = True) -> OrderedQuery:
        return _InMemoryQuery(self, collection, order_by, descending)

    def update_field(self, collection: str, doc_id: str, field: str, value: Any) -> None:
        if self.fail_updates:
            raise StoreError(StoreErrorKind.UPDATE_FAILED)
        document = self._collections.get(collection, {}).get(doc_id)
        if document is None:
            raise StoreError(StoreErrorKind.UPDATE_FAILED, f"Document {doc_id} not found")
        if field in document and document[field] == value:
            return
        document[field] = value
        self._publish(collection)

    def documents(self, collection: str, order_by: str, descending: bool) -> list[Document]:
        items = [(doc_id, dict(data)) for doc_id, data in self._collections.get(collection, {}).items()]
        # Stored values mix ISO strings and datetimes; compare them as aware datetimes.
        keyed = [(coerce_timestamp(data.get(order_by)), (doc_id, data)) for doc_id, data in items]
        present = [entry for entry in keyed if entry[0] is not None]
        missing = [item for key, item in keyed if key is None]
        present.sort(key=lambda entry: entry[0], reverse=descending)
        return [item for _, item in present] + missing

    def _publish(self, collection: str) -> None:
        for query in list(self._queries):
            if query.collection == collection:
                query.emit()

    def _register(self, query: "_InMemoryQuery") -> None:
        self._queries.append(query)

    def _unregister(self, query: "_InMemoryQuery") -> None:
        if query in self._queries:
            self._queries.remove(query)


class _InMemoryQuery(OrderedQuery):
    def __init__(self, store: InMemoryDocumentStore, collection: str, order_by: str, descending: bool) -> None:
        super().__init__(collection, order_by, descending)
        self._store = store
        self._on_snapshot: SnapshotCallback | None = None
        self._on_error: ErrorCallback | None = None

    def subscribe(self, on_snapshot: SnapshotCallback, on_error: ErrorCallback) -> Subscription:
        self._on_snapshot = on_snapshot
        self._on_error = on_error
        self._store._register(self)
        subscription = Subscription(self._stop)
        self.emit()
        return subscription

    def emit(self) -> None:
        if self._on_snapshot is not None:
            self._on_snapshot(self._store.documents(self.collection, self.order_by, self.descending))

    def fail(self, error: StoreError) -> None:
        on_error = self._on_error
        self._stop()
        if on_error is not None:
            on_error(error)

    def _stop(self) -> None:
        self._on_snapshot = None
        self._on_error = None
        self._store._unregister(self)


class FirestoreRestDocumentStore(DocumentStore):
    """Summary: Document store backed by the Firestore REST API.

    Importance: Reads and updates the hosted collection with the operator's token.
    Alternatives: Use the google-cloud-firestore client with streaming listeners.
    """

    def __init__(
        self,
        project_id: str,
        base_url: str,
        token_supplier: Callable[[], str | None],
        transport: Transport = request_json,
    ) -> None:
        if not project_id:
            raise ValueError("Missing Firebase project id")
        self._project_id = project_id
        self._base_url = base_url.rstrip("/")
        self._token_supplier = token_supplier
        self._transport = transport
        self._queries: list[_FirestoreQuery] = []

    @property
    def documents_root(self) -> str:
        return f"{self._base_url}/projects/{self._project_id}/databases/(default)/documents"

    def query_ordered(self, collection: str, order_by: str, descending: bool = True) -> OrderedQuery:
        return _FirestoreQuery(self, collection, order_by, descending)

    def update_field(self, collection: str, doc_id: str, field: str, value: Any) -> None:
        url = _update_url(self.documents_root, collection, doc_id, field)
        try:
            self._transport(url, _update_payload(field, value), method="PATCH", token=self._token_supplier())
        except RestRequestError as exc:
            raise StoreError(StoreErrorKind.UPDATE_FAILED, str(exc)) from exc

    def refresh(self) -> None:
        for query in list(self._queries):
            query.poll()

    def run_query(self, collection: str, order_by: str, descending: bool) -> list[Document]:
        """Summary: Execute a structured query and decode the documents.

        Importance: Shared by the initial subscription fetch and each refresh.
        Alternatives: List the collection and sort client-side.
        """

        url = f"{self.documents_root}:runQuery"
        try:
            response = self._transport(
                url,
                _query_payload(collection, order_by, descending),
                token=self._token_supplier(),
            )
        except RestRequestError as exc:
            raise StoreError(StoreErrorKind.SUBSCRIPTION_FAILED, str(exc)) from exc
        return [
            _decode_document(item["document"])
            for item in response or []
            if isinstance(item, dict) and item.get("document")
        ]

    def _register(self, query: "_FirestoreQuery") -> None:
        self._queries.append(query)

    def _unregister(self, query: "_FirestoreQuery") -> None:
        if query in self._queries:
            self._queries.remove(query)


class _FirestoreQuery(OrderedQuery):
    def __init__(self, store: FirestoreRestDocumentStore, collection: str, order_by: str, descending: bool) -> None:
        super().__init__(collection, order_by, descending)
        self._store = store
        self._on_snapshot: SnapshotCallback | None = None
        self._on_error: ErrorCallback | None = None
        self._last: list[Document] | None = None

    def subscribe(self, on_snapshot: SnapshotCallback, on_error: ErrorCallback) -> Subscription:
        self._on_snapshot = on_snapshot
        self._on_error = on_error
        self._last = None
        self._store._register(self)
        subscription = Subscription(self._stop)
        self.poll()
        return subscription

    def poll(self) -> None:
        if self._on_snapshot is None:
            return
        try:
            documents = self._store.run_query(self.collection, self.order_by, self.descending)
        except StoreError as exc:
            logger.warning("Snapshot query failed for %s: %s", self.collection, exc)
            # The next successful poll must emit even if the documents are unchanged.
            self._last = None
            if self._on_error is not None:
                self._on_error(exc)
            return
        if documents == self._last:
            return
        self._last = documents
        # The callback may have been cleared by a teardown during the request.
        if self._on_snapshot is not None:
            self._on_snapshot(documents)

    def _stop(self) -> None:
        self._on_snapshot = None
        self._on_error = None
        self._store._unregister(self)


def _query_payload(collection: str, order_by: str, descending: bool) -> dict[str, Any]:
    return {
        "structuredQuery": {
            "from": [{"collectionId": collection}],
            "orderBy": [
                {
                    "field": {"fieldPath": order_by},
                    "direction": "DESCENDING" if descending else "ASCENDING",
                }
            ],
        }
    }


def _update_url(documents_root: str, collection: str, doc_id: str, field: str) -> str:
    params = urllib.parse.urlencode(
        {"updateMask.fieldPaths": field, "currentDocument.exists": "true"}
    )
    return f"{documents_root}/{collection}/{urllib.parse.quote(doc_id, safe='')}?{params}"


def _update_payload(field: str, value: Any) -> dict[str, Any]:
    return {"fields": {field: encode_value(value)}}


def _decode_document(document: dict[str, Any]) -> Document:
    """Summary: Convert a REST document into an id and plain field dictionary.

    Importance: Keeps the typed-value wire format out of the domain layer.
    Alternatives: Decode lazily when each field is read.
    """

    doc_id = document["name"].rsplit("/", 1)[-1]
    fields = {name: decode_value(value) for name, value in (document.get("fields") or {}).items()}
    return doc_id, fields


def decode_value(value: dict[str, Any]) -> Any:
    """Summary: Decode one typed Firestore REST value.

    Importance: Maps the wire representation onto Python types.
    Alternatives: Depend on the vendor client library for decoding.
    """

    if "stringValue" in value:
        return value["stringValue"]
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "timestampValue" in value:
        return _parse_timestamp(value["timestampValue"])
    if "nullValue" in value:
        return None
    if "mapValue" in value:
        fields = value["mapValue"].get("fields") or {}
        return {name: decode_value(item) for name, item in fields.items()}
    if "arrayValue" in value:
        return [decode_value(item) for item in value["arrayValue"].get("values") or []]
    if "referenceValue" in value:
        return value["referenceValue"]
    return None


def encode_value(value: Any) -> dict[str, Any]:
    if value is None:
        return {"nullValue": None}
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, datetime):
        return {"timestampValue": value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")}
    return {"stringValue": str(value)}


def _parse_timestamp(raw: str) -> datetime:
    # RFC 3339 with up to nanosecond precision; datetime keeps microseconds.
    text = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
    if "." in text:
        head, rest = text.split(".", 1)
        offset_at = max(rest.find("+"), rest.find("-"))
        fraction, offset = (rest[:offset_at], rest[offset_at:]) if offset_at >= 0 else (rest, "")
        text = f"{head}.{fraction[:6].ljust(6, '0')}{offset}"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
