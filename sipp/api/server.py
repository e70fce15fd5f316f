"""FastAPI application factory for the sipp service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from ..exception_handler import install_exception_handlers, setup_logging
from ..snippet import SnippetStore
from .route import router
from .service import ServerSettings

logger = logging.getLogger("sipp")


def create_app(
    settings: ServerSettings | None = None,
    store: SnippetStore | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    A store passed in by the caller is left open on shutdown; one opened
    here from ``settings`` is closed with the app.
    """

    settings = settings or ServerSettings.from_env()
    setup_logging(settings.log_level)

    owns_store = store is None
    if store is None:
        store = SnippetStore.open(settings.store_config())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Serving snippets: %s", settings.describe())
        try:
            yield
        finally:
            if owns_store:
                store.close()

    app = FastAPI(
        title="sipp",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.gate = settings.auth_gate()
    install_exception_handlers(app)
    app.include_router(router)

    return app


__all__ = ["create_app"]
