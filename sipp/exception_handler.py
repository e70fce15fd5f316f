import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .errors import (
    SippError,
    SnippetNotFound,
    SnippetValidationError,
    StorageError,
    StorageExhausted,
    Unauthorized,
)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger("sipp")


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure the ``sipp`` logger once; repeated calls only adjust the level."""
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger


def error_body(message: str) -> Dict[str, str]:
    return {"error": message}


_STATUS_BY_ERROR = (
    (SnippetValidationError, status.HTTP_400_BAD_REQUEST),
    (SnippetNotFound, status.HTTP_404_NOT_FOUND),
    (Unauthorized, status.HTTP_401_UNAUTHORIZED),
    (StorageExhausted, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def status_for(error: SippError) -> int:
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def _handle_sipp_error(request: Request, exc: SippError) -> JSONResponse:
    code = status_for(exc)
    if isinstance(exc, StorageExhausted):
        logger.error("%s %s: %s", request.method, request.url.path, exc.message)
    elif code >= 500:
        logger.error(
            "%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc
        )
        # Storage internals stay server-side.
        return JSONResponse(status_code=code, content=error_body("Internal server error"))
    return JSONResponse(status_code=code, content=error_body(exc.message))


async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(describe_validation_errors(exc.errors())),
    )


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal server error"),
    )


def describe_validation_errors(errors: List[Dict[str, Any]]) -> str:
    missing: List[str] = []
    other: List[str] = []
    for error in errors:
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        field = ".".join(location) or "body"
        if error.get("type") == "missing":
            missing.append(field)
        else:
            other.append(f"{field}: {error.get('msg', 'invalid value')}")
    if missing:
        return "Missing required fields: " + ", ".join(missing)
    if other:
        return "Invalid request: " + "; ".join(other)
    return "Invalid request"


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SippError, _handle_sipp_error)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_exception_handler(Exception, _handle_unexpected)


class ErrorHandler:
    """Collects per-file failures from batch client operations."""

    def __init__(self) -> None:
        self.errors: List[Dict[str, Any]] = []

    def handle_error(self, error: Exception, context: Dict[str, Any]) -> Dict[str, Any]:
        message = error.message if isinstance(error, SippError) else str(error)
        error_info = {
            "type": type(error).__name__,
            "message": message or type(error).__name__,
            "context": context,
        }
        logger.debug("%s: %s | Context: %s", error_info["type"], error_info["message"], context)
        self.errors.append(error_info)
        return error_info

    def collect_file_error(self, error: Exception, file_path: str, operation: str) -> Dict[str, Any]:
        context = {
            "file_path": file_path,
            "operation": operation,
            "file_name": Path(file_path).name if file_path else "unknown",
        }
        return self.handle_error(error, context)

    def get_error_summary(self) -> Dict[str, Any]:
        if not self.errors:
            return {"total_errors": 0, "error_types": {}, "failed_files": []}

        error_types: Dict[str, int] = {}
        failed_files = []
        for error in self.errors:
            error_types[error["type"]] = error_types.get(error["type"], 0) + 1
            context = error.get("context", {})
            if "file_path" in context:
                failed_files.append(
                    {
                        "file": context["file_path"],
                        "error": error["message"],
                        "operation": context.get("operation", "unknown"),
                    }
                )

        return {
            "total_errors": len(self.errors),
            "error_types": error_types,
            "failed_files": failed_files,
        }

    def format_error_report(self) -> str:
        summary = self.get_error_summary()
        if summary["total_errors"] == 0:
            return ""

        lines = [f"Error Summary: {summary['total_errors']} errors occurred"]
        for failure in summary["failed_files"][:5]:
            lines.append(f"  • {Path(failure['file']).name}: {failure['error']}")
        if len(summary["failed_files"]) > 5:
            lines.append(f"  ... and {len(summary['failed_files']) - 5} more")
        return "\n".join(lines)

    def clear_errors(self) -> None:
        self.errors.clear()


__all__ = [
    "ErrorHandler",
    "LOG_FORMAT",
    "describe_validation_errors",
    "error_body",
    "install_exception_handlers",
    "setup_logging",
    "status_for",
]
