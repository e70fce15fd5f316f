"""Core package for the sipp snippet sharing service."""

from .backend import AccessFacade, resolve_backend
from .errors import SippError
from .snippet import Snippet, SnippetStore, StoreConfig

__all__ = [
    "AccessFacade",
    "SippError",
    "Snippet",
    "SnippetStore",
    "StoreConfig",
    "resolve_backend",
]
