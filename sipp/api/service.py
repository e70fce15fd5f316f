"""Service-layer helpers behind the snippet HTTP routes."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import FrozenSet, List, Tuple

from ..constants import DEFAULT_PUBLIC_URL
from ..errors import SnippetNotFound
from ..snippet import SnippetStore, StoreConfig
from ..snippet.config import DEFAULT_DB_PATH, DEFAULT_MAX_CONTENT_SIZE
from ..snippet.short_id import DEFAULT_LENGTH
from .auth import DEFAULT_PROTECTED, AuthGate, parse_protected_operations
from .model import (
    DeleteResponse,
    SnippetCreateRequest,
    SnippetResponse,
    SnippetUpdateRequest,
)

logger = logging.getLogger("sipp")

DEFAULT_RAW_CLIENTS: Tuple[str, ...] = ("curl", "wget", "httpie", "xh", "aria2", "libfetch")


@dataclass(slots=True)
class ServerSettings:
    """Runtime configuration for the API server."""

    api_key: str | None = None
    protected_operations: FrozenSet[str] = field(default=DEFAULT_PROTECTED)
    max_content_size: int = DEFAULT_MAX_CONTENT_SIZE
    db_path: str = DEFAULT_DB_PATH
    short_id_length: int = DEFAULT_LENGTH
    raw_clients: Tuple[str, ...] = DEFAULT_RAW_CLIENTS
    public_url: str = DEFAULT_PUBLIC_URL
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ServerSettings":
        def _int_env(name: str, default: int) -> int:
            raw = os.getenv(name)
            if not raw:
                return default
            try:
                value = int(raw)
            except ValueError:
                logger.warning("Invalid integer for %s: %s", name, raw)
                return default
            if value <= 0:
                logger.warning("Ignoring non-positive %s: %s", name, raw)
                return default
            return value

        def _list_env(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
            raw = os.getenv(name)
            if raw is None:
                return default
            return tuple(item.strip().lower() for item in raw.split(",") if item.strip())

        return cls(
            api_key=os.getenv("SIPP_API_KEY") or None,
            protected_operations=parse_protected_operations(os.getenv("SIPP_AUTH_ENDPOINTS")),
            max_content_size=_int_env("SIPP_MAX_CONTENT_SIZE", DEFAULT_MAX_CONTENT_SIZE),
            db_path=os.getenv("SIPP_DB_PATH") or DEFAULT_DB_PATH,
            short_id_length=_int_env("SIPP_SHORT_ID_LENGTH", DEFAULT_LENGTH),
            raw_clients=_list_env("SIPP_RAW_CLIENTS", DEFAULT_RAW_CLIENTS),
            public_url=os.getenv("SIPP_PUBLIC_URL") or DEFAULT_PUBLIC_URL,
            log_level=os.getenv("SIPP_LOG_LEVEL", "INFO"),
        )

    def store_config(self) -> StoreConfig:
        return StoreConfig(
            db_path=self.db_path,
            max_content_size=self.max_content_size,
            short_id_length=self.short_id_length,
        )

    def auth_gate(self) -> AuthGate:
        return AuthGate(secret=self.api_key, protected=self.protected_operations)

    def describe(self) -> str:
        if self.api_key:
            protected = ", ".join(sorted(self.protected_operations)) or "nothing"
            auth = f"API key set, protecting {protected}"
        else:
            auth = "no API key, all operations open"
        return (
            f"db={self.db_path} max_content_size={self.max_content_size} "
            f"short_id_length={self.short_id_length} ({auth})"
        )


def list_snippets_service(store: SnippetStore, query: str | None = None) -> List[SnippetResponse]:
    return [SnippetResponse.from_snippet(snippet) for snippet in store.list(query)]


def create_snippet_service(store: SnippetStore, payload: SnippetCreateRequest) -> SnippetResponse:
    snippet = store.create(payload.name, payload.content, language=payload.language)
    return SnippetResponse.from_snippet(snippet)


def get_snippet_service(store: SnippetStore, short_id: str) -> SnippetResponse:
    return SnippetResponse.from_snippet(store.get(short_id))


def update_snippet_service(
    store: SnippetStore,
    short_id: str,
    payload: SnippetUpdateRequest,
) -> SnippetResponse:
    snippet = store.update(short_id, name=payload.name, content=payload.content)
    return SnippetResponse.from_snippet(snippet)


def delete_snippet_service(store: SnippetStore, short_id: str) -> DeleteResponse:
    if not store.delete(short_id):
        raise SnippetNotFound(short_id)
    return DeleteResponse(deleted=True)


__all__ = [
    "DEFAULT_RAW_CLIENTS",
    "ServerSettings",
    "create_snippet_service",
    "delete_snippet_service",
    "get_snippet_service",
    "list_snippets_service",
    "update_snippet_service",
]
