"""Summary: Application factory wiring the console components.

Importance: Centralizes provider construction for the API and tests.
Alternatives: Instantiate providers manually in each entrypoint.
"""

from __future__ import annotations

from pathlib import Path

from contactdesk.audio import AudioPlayer, RecordingAudioPlayer
from contactdesk.config import AppConfig
from contactdesk.console import AdminConsole
from contactdesk.document_store import DocumentStore, FirestoreRestDocumentStore, InMemoryDocumentStore
from contactdesk.identity import FirebaseIdentityProvider, IdentityProvider, MockIdentityProvider
from contactdesk.session import SessionGate
from contactdesk.store_adapter import MessageStoreAdapter
from contactdesk.view_state import ViewStateController


def build_identity_provider(config: AppConfig) -> IdentityProvider:
    """Summary: Select the identity provider named in configuration.

    Importance: Lets demos run offline while production uses the hosted service.
    Alternatives: Always use the hosted provider.
    """

    if config.identity_provider == "firebase":
        return FirebaseIdentityProvider(config.firebase_api_key, config.identity_base_url)
    if config.identity_provider == "mock":
        return MockIdentityProvider.from_fixture(Path(config.mock_users_path))
    raise ValueError(f"Unknown identity provider: {config.identity_provider}")


def build_document_store(config: AppConfig, identity: IdentityProvider) -> DocumentStore:
    """Summary: Select the document store named in configuration.

    Importance: The hosted store authenticates with the operator's identity token.
    Alternatives: Use a service account for store access.
    """

    if config.document_store == "firestore":
        return FirestoreRestDocumentStore(
            config.firebase_project_id,
            config.firestore_base_url,
            token_supplier=identity.current_token,
        )
    if config.document_store == "memory":
        fixture = Path(config.mock_messages_path)
        if fixture.exists():
            return InMemoryDocumentStore.from_fixture(fixture, config.collection_name)
        return InMemoryDocumentStore()
    raise ValueError(f"Unknown document store: {config.document_store}")


def build_console(
    config: AppConfig,
    identity: IdentityProvider | None = None,
    store: DocumentStore | None = None,
    audio: AudioPlayer | None = None,
) -> AdminConsole:
    """Summary: Build the admin console from configuration.

    Importance: Provides a single construction path; tests pass their own providers.
    Alternatives: Use a dependency injection container.
    """

    identity = identity or build_identity_provider(config)
    store = store or build_document_store(config, identity)
    gate = SessionGate(identity)
    adapter = MessageStoreAdapter(
        store,
        gate,
        collection=config.collection_name,
        order_by=config.order_by_field,
    )
    view = ViewStateController(narrow_threshold=config.narrow_width_threshold)
    return AdminConsole(
        gate=gate,
        adapter=adapter,
        view=view,
        audio=audio or RecordingAudioPlayer(),
        chime_resource=config.chime_resource,
    )
