"""Error taxonomy shared by the store, the HTTP layer and the clients."""

from __future__ import annotations


class SippError(Exception):
    """Base class for every error raised on purpose by sipp."""

    default_message = "Unexpected error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class SnippetValidationError(SippError):
    """Input is missing, blank or larger than the configured limit."""

    default_message = "Invalid snippet"


class SnippetNotFound(SippError):
    default_message = "Snippet not found"

    def __init__(self, short_id: str | None = None, message: str | None = None) -> None:
        self.short_id = short_id
        super().__init__(message)


class Unauthorized(SippError):
    default_message = "Invalid or missing API key"


class StorageExhausted(SippError):
    """No unused short identifier was found within the retry budget."""

    default_message = "Could not allocate a unique short identifier"


class StorageError(SippError):
    """The database failed underneath an operation."""

    default_message = "Storage failure"


class RemoteError(SippError):
    default_message = "Remote server error"


class RemoteUnavailable(RemoteError):
    """The remote server could not be reached or did not answer in time."""

    default_message = "Remote server unavailable"


class RemoteRejected(RemoteError):
    """The remote server answered with an unexpected status or body."""

    default_message = "Remote server rejected the request"

    def __init__(self, message: str | None = None, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


__all__ = [
    "SippError",
    "SnippetValidationError",
    "SnippetNotFound",
    "Unauthorized",
    "StorageExhausted",
    "StorageError",
    "RemoteError",
    "RemoteUnavailable",
    "RemoteRejected",
]
