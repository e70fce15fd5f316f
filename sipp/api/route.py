"""FastAPI routes for snippet CRUD, share pages and the browser form."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Form, Header, Query, Request, status
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse
from starlette.concurrency import run_in_threadpool

from ..constants import API_KEY_HEADER
from ..errors import SnippetNotFound
from ..snippet import SnippetStore
from .auth import (
    OP_CREATE,
    OP_DELETE,
    OP_GET,
    OP_LIST,
    OP_UPDATE,
    AuthGate,
)
from .model import (
    DeleteResponse,
    ErrorResponse,
    HealthResponse,
    SnippetCreateRequest,
    SnippetResponse,
    SnippetUpdateRequest,
)
from .render import (
    is_script_client,
    render_index_page,
    render_not_found_page,
    render_snippet_page,
)
from .service import (
    ServerSettings,
    create_snippet_service,
    delete_snippet_service,
    get_snippet_service,
    list_snippets_service,
    update_snippet_service,
)


def get_settings(request: Request) -> ServerSettings:
    settings = getattr(request.app.state, "settings", None)
    if not isinstance(settings, ServerSettings):
        raise RuntimeError("Server settings have not been initialised")
    return settings


def get_store(request: Request) -> SnippetStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise RuntimeError("Snippet store has not been initialised")
    return store


def get_gate(request: Request) -> AuthGate:
    gate = getattr(request.app.state, "gate", None)
    if gate is None:
        gate = get_settings(request).auth_gate()
        request.app.state.gate = gate
    return gate


def get_credential(api_key: str | None = Header(None, alias=API_KEY_HEADER)) -> str | None:
    return api_key


_ERRORS = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
}

router = APIRouter()


@router.get("/api/snippets", response_model=List[SnippetResponse], responses=_ERRORS)
async def list_snippets(
    q: str | None = Query(None, description="Case-insensitive substring filter on name and content"),
    store: SnippetStore = Depends(get_store),
    gate: AuthGate = Depends(get_gate),
    credential: str | None = Depends(get_credential),
) -> List[SnippetResponse]:
    gate.require(OP_LIST, credential)
    return await run_in_threadpool(list_snippets_service, store, q or None)


@router.post(
    "/api/snippets",
    response_model=SnippetResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_ERRORS,
)
async def create_snippet(
    payload: SnippetCreateRequest,
    store: SnippetStore = Depends(get_store),
    gate: AuthGate = Depends(get_gate),
    credential: str | None = Depends(get_credential),
) -> SnippetResponse:
    gate.require(OP_CREATE, credential)
    return await run_in_threadpool(create_snippet_service, store, payload)


@router.get("/api/snippets/{short_id}", response_model=SnippetResponse, responses=_ERRORS)
async def get_snippet(
    short_id: str,
    store: SnippetStore = Depends(get_store),
    gate: AuthGate = Depends(get_gate),
    credential: str | None = Depends(get_credential),
) -> SnippetResponse:
    gate.require(OP_GET, credential)
    return await run_in_threadpool(get_snippet_service, store, short_id)


@router.put("/api/snippets/{short_id}", response_model=SnippetResponse, responses=_ERRORS)
async def update_snippet(
    short_id: str,
    payload: SnippetUpdateRequest,
    store: SnippetStore = Depends(get_store),
    gate: AuthGate = Depends(get_gate),
    credential: str | None = Depends(get_credential),
) -> SnippetResponse:
    gate.require(OP_UPDATE, credential)
    return await run_in_threadpool(update_snippet_service, store, short_id, payload)


@router.delete("/api/snippets/{short_id}", response_model=DeleteResponse, responses=_ERRORS)
async def delete_snippet(
    short_id: str,
    store: SnippetStore = Depends(get_store),
    gate: AuthGate = Depends(get_gate),
    credential: str | None = Depends(get_credential),
) -> DeleteResponse:
    """Delete a snippet; repeating the call yields 404."""

    gate.require(OP_DELETE, credential)
    return await run_in_threadpool(delete_snippet_service, store, short_id)


@router.get("/s/{short_id}", responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}})
async def share_snippet(
    short_id: str,
    user_agent: str | None = Header(None),
    store: SnippetStore = Depends(get_store),
    settings: ServerSettings = Depends(get_settings),
):
    script_client = is_script_client(user_agent, settings.raw_clients)
    try:
        snippet = await run_in_threadpool(store.get, short_id)
    except SnippetNotFound:
        if script_client:
            raise
        return HTMLResponse(render_not_found_page(short_id), status_code=status.HTTP_404_NOT_FOUND)
    if script_client:
        return PlainTextResponse(snippet.content)
    return HTMLResponse(render_snippet_page(snippet))


@router.get("/s/{short_id}/raw", response_class=PlainTextResponse)
async def share_snippet_raw(
    short_id: str,
    store: SnippetStore = Depends(get_store),
) -> PlainTextResponse:
    snippet = await run_in_threadpool(store.get, short_id)
    return PlainTextResponse(snippet.content)


@router.get("/", response_class=HTMLResponse)
async def index() -> HTMLResponse:
    return HTMLResponse(render_index_page())


@router.post("/snippets", response_class=RedirectResponse)
async def create_snippet_from_form(
    name: str = Form(...),
    content: str = Form(...),
    store: SnippetStore = Depends(get_store),
    gate: AuthGate = Depends(get_gate),
    credential: str | None = Depends(get_credential),
) -> RedirectResponse:
    gate.require(OP_CREATE, credential)
    snippet = await run_in_threadpool(store.create, name, content)
    return RedirectResponse(f"/s/{snippet.short_id}", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/health", response_model=HealthResponse)
async def health(store: SnippetStore = Depends(get_store)) -> HealthResponse:
    count = await run_in_threadpool(store.count)
    return HealthResponse(status="ok", snippets=count)


__all__ = ["get_credential", "get_gate", "get_settings", "get_store", "router"]
