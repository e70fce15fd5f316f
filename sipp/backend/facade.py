"""Uniform snippet operations over a local database or a remote server."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, List

import httpx
from pydantic import ValidationError

from ..constants import API_KEY_HEADER, DEFAULT_PUBLIC_URL
from ..errors import (
    RemoteRejected,
    RemoteUnavailable,
    SnippetNotFound,
    SnippetValidationError,
    Unauthorized,
)
from ..snippet import Snippet, SnippetStore, StoreConfig
from ..snippet.config import DEFAULT_DB_PATH
from .config import ClientConfig, load_client_config

logger = logging.getLogger("sipp")

DEFAULT_TIMEOUT = 10.0


class LocalBackend:
    """Runs every operation in-process against a :class:`SnippetStore`."""

    is_remote = False

    def __init__(self, store: SnippetStore, public_url: str = DEFAULT_PUBLIC_URL) -> None:
        self.store = store
        self.public_url = public_url.rstrip("/")

    def create(self, name: str, content: str, language: str | None = None) -> Snippet:
        return self.store.create(name, content, language=language)

    def get(self, short_id: str) -> Snippet:
        return self.store.get(short_id)

    def list(self, query: str | None = None) -> List[Snippet]:
        return self.store.list(query)

    def update(self, short_id: str, *, name: str | None = None, content: str | None = None) -> Snippet:
        return self.store.update(short_id, name=name, content=content)

    def delete(self, short_id: str) -> bool:
        return self.store.delete(short_id)

    def close(self) -> None:
        self.store.close()


class RemoteBackend:
    """Talks to a sipp server over HTTP.

    Status codes are mapped back onto the local error taxonomy so callers
    handle both variants the same way:

    * 400, 413, 422 -> :class:`SnippetValidationError`
    * 401, 403 -> :class:`Unauthorized`
    * 404 with the server's ``{"error": ...}`` body on an id-addressed call
      -> :class:`SnippetNotFound` (``delete`` returns ``False`` instead)
    * anything else non-2xx, including a bare 404 from a proxy or the wrong
      host -> :class:`RemoteRejected`
    * connection and timeout failures -> :class:`RemoteUnavailable`
    """

    is_remote = True

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    @property
    def public_url(self) -> str:
        return self.base_url

    def create(self, name: str, content: str, language: str | None = None) -> Snippet:
        payload: dict[str, Any] = {"name": name, "content": content}
        if language is not None:
            payload["language"] = language
        response = self._request("POST", "/api/snippets", json=payload)
        return self._snippet(response)

    def get(self, short_id: str) -> Snippet:
        response = self._request("GET", f"/api/snippets/{short_id}", short_id=short_id)
        return self._snippet(response)

    def list(self, query: str | None = None) -> List[Snippet]:
        params = {"q": query} if query else None
        response = self._request("GET", "/api/snippets", params=params)
        data = self._json(response)
        if not isinstance(data, list):
            raise RemoteRejected("Unexpected listing from server", status_code=response.status_code)
        return [self._parse(item, response) for item in data]

    def update(self, short_id: str, *, name: str | None = None, content: str | None = None) -> Snippet:
        payload = {key: value for key, value in (("name", name), ("content", content)) if value is not None}
        response = self._request("PUT", f"/api/snippets/{short_id}", json=payload, short_id=short_id)
        return self._snippet(response)

    def delete(self, short_id: str) -> bool:
        try:
            self._request("DELETE", f"/api/snippets/{short_id}", short_id=short_id)
        except SnippetNotFound:
            return False
        return True

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, str] | None = None,
        short_id: str | None = None,
    ) -> httpx.Response:
        headers = {API_KEY_HEADER: self.api_key} if self.api_key else {}
        url = f"{self.base_url}{path}"
        try:
            response = self._client.request(method, url, json=json, params=params, headers=headers)
        except httpx.TransportError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise RemoteUnavailable(f"Could not reach {self.base_url}: {exc}") from exc

        self._raise_for_status(response, short_id)
        return response

    @staticmethod
    def _raise_for_status(response: httpx.Response, short_id: str | None) -> None:
        code = response.status_code
        if 200 <= code < 300:
            return
        message = _error_message(response)
        if code in (400, 413, 422):
            raise SnippetValidationError(message)
        if code in (401, 403):
            raise Unauthorized(message)
        if code == 404 and short_id is not None and message is not None:
            raise SnippetNotFound(short_id, message)
        raise RemoteRejected(message or f"Server responded with HTTP {code}", status_code=code)

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteRejected("Server sent an unreadable response", status_code=response.status_code) from exc

    def _snippet(self, response: httpx.Response) -> Snippet:
        return self._parse(self._json(response), response)

    @staticmethod
    def _parse(data: Any, response: httpx.Response) -> Snippet:
        try:
            return Snippet.model_validate(data)
        except ValidationError as exc:
            raise RemoteRejected("Server sent a malformed snippet", status_code=response.status_code) from exc


def _error_message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return None


class AccessFacade:
    """One interface over whichever backend was chosen at startup."""

    def __init__(self, backend: LocalBackend | RemoteBackend) -> None:
        self.backend = backend
        self._last_listing: List[Snippet] | None = None

    @property
    def is_remote(self) -> bool:
        return self.backend.is_remote

    def create(self, name: str, content: str, language: str | None = None) -> Snippet:
        snippet = self.backend.create(name, content, language)
        self._last_listing = None
        return snippet

    def get(self, short_id: str) -> Snippet:
        return self.backend.get(short_id)

    def list(self, query: str | None = None, *, refresh: bool = True) -> List[Snippet]:
        """List snippets newest first.

        With ``refresh=False`` the previous unfiltered listing is reused and
        filtered locally, if there is one.
        """
        query = query or None
        if not refresh and self._last_listing is not None:
            if query is None:
                return list(self._last_listing)
            return [snippet for snippet in self._last_listing if snippet.matches(query)]

        snippets = self.backend.list(query)
        if query is None:
            self._last_listing = list(snippets)
        return snippets

    def update(self, short_id: str, *, name: str | None = None, content: str | None = None) -> Snippet:
        snippet = self.backend.update(short_id, name=name, content=content)
        self._last_listing = None
        return snippet

    def delete(self, short_id: str) -> bool:
        removed = self.backend.delete(short_id)
        self._last_listing = None
        return removed

    def share_link(self, short_id: str) -> str:
        return f"{self.backend.public_url}/s/{short_id}"

    def close(self) -> None:
        self.backend.close()


def resolve_backend(
    remote_url: str | None,
    api_key: str | None,
    *,
    config: ClientConfig | None = None,
    db_path: str | Path = DEFAULT_DB_PATH,
    public_url: str = DEFAULT_PUBLIC_URL,
    timeout: float = DEFAULT_TIMEOUT,
) -> AccessFacade:
    """Pick the backend once, in this order:

    1. an explicit remote URL;
    2. an existing local database file;
    3. the remote URL from the saved client config;
    4. a new local database.
    """
    if remote_url:
        logger.debug("Using remote backend %s", remote_url)
        return AccessFacade(RemoteBackend(remote_url, api_key, timeout=timeout))

    if not Path(db_path).exists() and config is not None and config.remote_url:
        logger.debug("Using saved remote backend %s", config.remote_url)
        key = api_key or config.api_key
        return AccessFacade(RemoteBackend(config.remote_url, key, timeout=timeout))

    store = SnippetStore.open(StoreConfig(db_path=str(db_path)))
    return AccessFacade(LocalBackend(store, public_url=public_url))


def open_client_facade(remote_url: str | None = None, api_key: str | None = None) -> AccessFacade:
    """Resolve the backend for a command-line client from flags, env and saved config."""
    return resolve_backend(
        remote_url or os.getenv("SIPP_REMOTE_URL"),
        api_key or os.getenv("SIPP_API_KEY"),
        config=load_client_config(),
        db_path=os.getenv("SIPP_DB_PATH") or DEFAULT_DB_PATH,
        public_url=os.getenv("SIPP_PUBLIC_URL") or DEFAULT_PUBLIC_URL,
    )


__all__ = ["AccessFacade", "LocalBackend", "RemoteBackend", "open_client_facade", "resolve_backend"]
