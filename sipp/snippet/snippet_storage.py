"""SQLite-backed snippet storage keyed by short identifier."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, List

from sqlalchemy import Engine, create_engine, delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..errors import SnippetNotFound, SnippetValidationError, StorageError, StorageExhausted
from .config import StoreConfig
from .model import Base, Snippet, SnippetRow
from .short_id import generate_short_id, is_short_id

logger = logging.getLogger("sipp")

MAX_CREATE_ATTEMPTS = 5

IdGenerator = Callable[[int], str]


class SnippetStore:
    """Create, read, list, update and delete snippets in a single SQLite table.

    Every operation runs in a session of its own. Mutations are serialized
    with an in-process lock; the ``UNIQUE`` constraint on ``short_id`` keeps
    identifiers unique across processes sharing the same file.
    """

    def __init__(
        self,
        config: StoreConfig | None = None,
        *,
        id_generator: IdGenerator = generate_short_id,
        engine: Engine | None = None,
    ) -> None:
        self.config = config or StoreConfig()
        self._id_generator = id_generator
        if engine is None:
            self.config.ensure_parent()
            engine = create_engine(self.config.url, **self.config.engine_kwargs())
        self._engine = engine
        self._session_factory = sessionmaker(engine, expire_on_commit=False)
        self._write_lock = threading.Lock()

    @classmethod
    def open(cls, config: StoreConfig | None = None, **kwargs) -> "SnippetStore":
        store = cls(config, **kwargs)
        store.initialize()
        return store

    def initialize(self) -> None:
        """Create the schema if it does not exist yet. Never drops data."""
        try:
            Base.metadata.create_all(self._engine)
        except SQLAlchemyError as exc:
            logger.exception("Failed to initialise snippet database at %s", self.config.db_path)
            raise StorageError("Failed to initialise snippet database") from exc

    def close(self) -> None:
        self._engine.dispose()

    def create(self, name: str | None, content: str | None, language: str | None = None) -> Snippet:
        """Persist a new snippet under a freshly generated short id."""
        self._validate_name(name)
        self._validate_content(content)
        language = (language or "").strip() or None

        with self._write_lock:
            for attempt in range(1, MAX_CREATE_ATTEMPTS + 1):
                short_id = self._id_generator(self.config.short_id_length)
                row = SnippetRow(
                    short_id=short_id,
                    name=name,
                    content=content,
                    language=language,
                    created_at=datetime.now(timezone.utc),
                )
                try:
                    with self._session_factory() as session, session.begin():
                        session.add(row)
                        session.flush()
                        snippet = Snippet.from_row(row)
                except IntegrityError:
                    logger.warning(
                        "Short id collision on %s (attempt %d/%d)",
                        short_id,
                        attempt,
                        MAX_CREATE_ATTEMPTS,
                    )
                    continue
                except SQLAlchemyError as exc:
                    logger.exception("Failed to insert snippet %r", name)
                    raise StorageError("Failed to store snippet") from exc

                logger.info("Created snippet %s (%d bytes)", short_id, _byte_size(content))
                return snippet

        logger.error("Gave up allocating a short id after %d attempts", MAX_CREATE_ATTEMPTS)
        raise StorageExhausted()

    def get(self, short_id: str) -> Snippet:
        # Length is not checked; ids from an older length setting stay valid.
        if not is_short_id(short_id):
            raise SnippetNotFound(short_id)
        try:
            with self._session_factory() as session:
                row = session.scalars(self._by_short_id(short_id)).first()
                if row is None:
                    raise SnippetNotFound(short_id)
                return Snippet.from_row(row)
        except SQLAlchemyError as exc:
            logger.exception("Failed to load snippet %s", short_id)
            raise StorageError("Failed to load snippet") from exc

    def list(self, query: str | None = None) -> List[Snippet]:
        """Return all snippets, newest first, optionally filtered by substring."""
        try:
            with self._session_factory() as session:
                rows = session.scalars(select(SnippetRow).order_by(SnippetRow.id.desc())).all()
                snippets = [Snippet.from_row(row) for row in rows]
        except SQLAlchemyError as exc:
            logger.exception("Failed to list snippets")
            raise StorageError("Failed to list snippets") from exc

        if query and query.strip():
            # SQLite's lower() only folds ASCII, so matching happens here.
            snippets = [snippet for snippet in snippets if snippet.matches(query.strip())]
        return snippets

    def update(
        self,
        short_id: str,
        *,
        name: str | None = None,
        content: str | None = None,
    ) -> Snippet:
        """Change ``name`` and/or ``content``; omitted fields are left alone."""
        if name is None and content is None:
            return self.get(short_id)
        if name is not None:
            self._validate_name(name)
        if content is not None:
            self._validate_content(content)

        with self._write_lock:
            try:
                with self._session_factory() as session, session.begin():
                    row = session.scalars(self._by_short_id(short_id)).first()
                    if row is None:
                        raise SnippetNotFound(short_id)
                    if name is not None:
                        row.name = name
                    if content is not None:
                        row.content = content
                    session.flush()
                    snippet = Snippet.from_row(row)
            except SQLAlchemyError as exc:
                logger.exception("Failed to update snippet %s", short_id)
                raise StorageError("Failed to update snippet") from exc

        logger.info("Updated snippet %s", short_id)
        return snippet

    def delete(self, short_id: str) -> bool:
        """Remove a snippet. Returns whether anything was removed."""
        with self._write_lock:
            try:
                with self._session_factory() as session, session.begin():
                    result = session.execute(
                        delete(SnippetRow).where(SnippetRow.short_id == short_id)
                    )
                    removed = (result.rowcount or 0) > 0
            except SQLAlchemyError as exc:
                logger.exception("Failed to delete snippet %s", short_id)
                raise StorageError("Failed to delete snippet") from exc

        if removed:
            logger.info("Deleted snippet %s", short_id)
        return removed

    def count(self) -> int:
        try:
            with self._session_factory() as session:
                return int(session.scalar(select(func.count()).select_from(SnippetRow)) or 0)
        except SQLAlchemyError as exc:
            logger.exception("Failed to count snippets")
            raise StorageError("Failed to count snippets") from exc

    @staticmethod
    def _by_short_id(short_id: str):
        return select(SnippetRow).where(SnippetRow.short_id == short_id)

    @staticmethod
    def _validate_name(name: str | None) -> None:
        if name is None or not name.strip():
            raise SnippetValidationError("Missing required field: name")

    def _validate_content(self, content: str | None) -> None:
        if content is None or content == "":
            raise SnippetValidationError("Missing required field: content")
        size = _byte_size(content)
        if size > self.config.max_content_size:
            raise SnippetValidationError(
                f"Content is {size} bytes; the maximum is {self.config.max_content_size} bytes"
            )


def _byte_size(content: str) -> int:
    return len(content.encode("utf-8"))


__all__ = ["SnippetStore", "MAX_CREATE_ATTEMPTS"]
