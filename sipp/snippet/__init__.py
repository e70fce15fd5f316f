"""Snippet model, identifiers and storage."""

from .config import StoreConfig
from .model import Snippet
from .short_id import ALPHABET, generate_short_id
from .snippet_storage import MAX_CREATE_ATTEMPTS, SnippetStore

__all__ = [
    "ALPHABET",
    "MAX_CREATE_ATTEMPTS",
    "Snippet",
    "SnippetStore",
    "StoreConfig",
    "generate_short_id",
]
