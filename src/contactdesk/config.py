"""Summary: Application configuration for ContactDesk.

Importance: Centralizes environment, .env, and config defaults for consistent behavior.
Alternatives: Use a dedicated settings library like Pydantic Settings.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from dataclasses import dataclass


@dataclass(frozen=True)
class AppConfig:
    """Summary: Holds configuration values for providers, view rules, and the API.

    Importance: Ensures all components derive settings from a single source of truth.
    Alternatives: Store settings in a shared config file and parse at startup.
    """

    identity_provider: str
    document_store: str
    firebase_api_key: str
    firebase_project_id: str
    identity_base_url: str
    firestore_base_url: str
    collection_name: str
    order_by_field: str
    narrow_width_threshold: int
    chime_resource: str
    mock_users_path: str
    mock_messages_path: str
    api_host: str
    api_port: int
    api_key: str

    @staticmethod
    def from_env() -> "AppConfig":
        """Summary: Build configuration from defaults, .env, and environment.

        Importance: Keeps all variables defined in config defaults while allowing overrides.
        Alternatives: Parse only environment variables without a defaults file.
        """

        defaults = load_defaults(Path("config") / "defaults.json")
        load_dotenv(Path(".env"))
        return AppConfig(
            identity_provider=os.getenv(
                "CONTACTDESK_IDENTITY_PROVIDER", defaults["identity_provider"]
            ),
            document_store=os.getenv("CONTACTDESK_DOCUMENT_STORE", defaults["document_store"]),
            firebase_api_key=os.getenv("FIREBASE_API_KEY", defaults["firebase_api_key"]),
            firebase_project_id=os.getenv("FIREBASE_PROJECT_ID", defaults["firebase_project_id"]),
            identity_base_url=os.getenv(
                "CONTACTDESK_IDENTITY_BASE_URL", defaults["identity_base_url"]
            ),
            firestore_base_url=os.getenv(
                "CONTACTDESK_FIRESTORE_BASE_URL", defaults["firestore_base_url"]
            ),
            collection_name=os.getenv("CONTACTDESK_COLLECTION", defaults["collection_name"]),
            order_by_field=os.getenv("CONTACTDESK_ORDER_BY", defaults["order_by_field"]),
            narrow_width_threshold=int(
                os.getenv("CONTACTDESK_NARROW_WIDTH", defaults["narrow_width_threshold"])
            ),
            chime_resource=os.getenv("CONTACTDESK_CHIME_RESOURCE", defaults["chime_resource"]),
            mock_users_path=os.getenv("CONTACTDESK_MOCK_USERS", defaults["mock_users_path"]),
            mock_messages_path=os.getenv(
                "CONTACTDESK_MOCK_MESSAGES", defaults["mock_messages_path"]
            ),
            api_host=os.getenv("CONTACTDESK_API_HOST", defaults["api_host"]),
            api_port=int(os.getenv("CONTACTDESK_API_PORT", defaults["api_port"])),
            api_key=os.getenv("CONTACTDESK_API_KEY", defaults["api_key"]),
        )


def load_defaults(path: Path) -> dict[str, str]:
    """Summary: Read the JSON defaults file as a flat string mapping.

    Importance: Every setting AppConfig reads has a baseline value on disk.
    Alternatives: Inline defaults in the AppConfig initializer.
    """

    if not path.exists():
        raise FileNotFoundError(f"Defaults file not found: {path}")
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Defaults file must hold a JSON object: {path}")
    return {key: "" if value is None else str(value) for key, value in data.items()}


def load_dotenv(path: Path) -> list[str]:
    """Summary: Export KEY=VALUE lines from a .env file, returning the keys that were set.

    Importance: Keeps the Firebase web key out of the repository for local runs.
    Alternatives: Use python-dotenv or OS-specific secret stores.
    """

    if not path.exists():
        return []
    exported: list[str] = []
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = (part.strip() for part in line.split("=", 1))
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        # Variables already present in the process environment win.
        if key and key not in os.environ:
            os.environ[key] = value
            exported.append(key)
    return exported
