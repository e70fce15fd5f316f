from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .short_id import DEFAULT_LENGTH

DEFAULT_DB_PATH = "sipp.sqlite"
DEFAULT_MAX_CONTENT_SIZE = 500_000


@dataclass(slots=True)
class StoreConfig:
    """Location and limits of the SQLite snippet database."""

    db_path: str = DEFAULT_DB_PATH
    max_content_size: int = DEFAULT_MAX_CONTENT_SIZE
    short_id_length: int = DEFAULT_LENGTH
    busy_timeout: float = 30.0

    @property
    def url(self) -> str:
        return f"sqlite:///{self.db_path}"

    def engine_kwargs(self) -> dict[str, Any]:
        # Handlers run on threadpool workers, so the sqlite3 same-thread check is off.
        return {
            "connect_args": {
                "check_same_thread": False,
                "timeout": self.busy_timeout,
            },
        }

    def ensure_parent(self) -> None:
        parent = Path(self.db_path).expanduser().parent
        parent.mkdir(parents=True, exist_ok=True)


__all__ = ["StoreConfig", "DEFAULT_DB_PATH", "DEFAULT_MAX_CONTENT_SIZE"]
