"""Pydantic models for the public API surface."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from ..snippet import Snippet


class SnippetCreateRequest(BaseModel):
    name: str = Field(..., description="Display label, usually a file name")
    content: str = Field(..., description="Text payload")
    language: str | None = Field(None, description="Optional highlighting hint")


class SnippetUpdateRequest(BaseModel):
    name: str | None = Field(None, description="New display label")
    content: str | None = Field(None, description="New text payload")


class SnippetResponse(Snippet):
    """Snippet as serialized over HTTP (camelCase keys, no storage id)."""

    @classmethod
    def from_snippet(cls, snippet: Snippet) -> "SnippetResponse":
        return cls.model_validate(snippet.model_dump())


class DeleteResponse(BaseModel):
    deleted: bool


class HealthResponse(BaseModel):
    status: str
    snippets: int


class ErrorResponse(BaseModel):
    error: str

    model_config = ConfigDict(json_schema_extra={"example": {"error": "Snippet not found"}})


__all__ = [
    "DeleteResponse",
    "ErrorResponse",
    "HealthResponse",
    "SnippetCreateRequest",
    "SnippetResponse",
    "SnippetUpdateRequest",
]
