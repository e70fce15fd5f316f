from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for the snippet tables."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SnippetRow(Base):
    __tablename__ = "snippets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    short_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    language: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )


class Snippet(BaseModel):
    """Transient copy of a stored snippet, as handed to callers."""

    short_id: str = Field(..., alias="shortId")
    name: str
    content: str
    language: str | None = None
    created_at: datetime | None = Field(None, alias="createdAt")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @classmethod
    def from_row(cls, row: SnippetRow) -> "Snippet":
        created_at = row.created_at
        if created_at is not None and created_at.tzinfo is None:
            # SQLite drops the offset; rows are always written in UTC.
            created_at = created_at.replace(tzinfo=timezone.utc)
        return cls(
            short_id=row.short_id,
            name=row.name,
            content=row.content,
            language=row.language,
            created_at=created_at,
        )

    def matches(self, query: str) -> bool:
        needle = query.lower()
        return needle in self.name.lower() or needle in self.content.lower()

    def created_label(self, fmt: str = "%Y-%m-%d %H:%M UTC") -> str:
        if self.created_at is None:
            return "unknown"
        return self.created_at.astimezone(timezone.utc).strftime(fmt)


__all__ = ["Base", "Snippet", "SnippetRow"]
