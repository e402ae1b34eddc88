"""Application factory for the Vibe Check FastAPI backend."""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from . import __version__
from .completion import CompletionClient
from .config import Settings, require_settings
from .errors import ResultNotFoundError, StorageError, ValidationError, VibeCheckError
from .pipeline import AnalysisPipeline, Completer
from .routers import analysis
from .store import ResultStore, build_store

logger = logging.getLogger(__name__)

DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

ERROR_STATUS = {
    ValidationError: 400,
    ResultNotFoundError: 404,
    StorageError: 503,
}


def _resolve_allowed_origins(settings: Settings) -> list[str]:
    """Return allowed origins, optionally sourced from an env override."""

    return settings.allowed_origins or DEFAULT_ALLOWED_ORIGINS


def _describe_invalid_body(exc: RequestValidationError) -> str:
    """Summarize a malformed request body in one line."""

    errors = exc.errors()
    if not errors or any("idea" in error.get("loc", ()) for error in errors):
        return "idea is required"
    field = ".".join(str(part) for part in errors[0]["loc"] if part != "body") or "body"
    return f"{field}: {errors[0]['msg']}"


def _register_error_handlers(app: FastAPI) -> None:
    async def render_error(request: Request, exc: VibeCheckError) -> JSONResponse:
        status_code = ERROR_STATUS.get(type(exc), 500)
        if status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status_code, content={"error": str(exc)})

    for exc_class in ERROR_STATUS:
        app.add_exception_handler(exc_class, render_error)

    async def render_invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": _describe_invalid_body(exc)})

    app.add_exception_handler(RequestValidationError, render_invalid_body)


def create_app(
    settings: Settings | None = None,
    *,
    store: ResultStore | None = None,
    client: Completer | None = None,
) -> FastAPI:
    """Create and configure a FastAPI application instance.

    Raises :class:`~vibe_check.errors.ConfigurationError` when required
    environment variables are missing, so the server never starts half
    configured.
    """

    settings = require_settings(settings)
    if store is None:
        store = build_store(settings)
    if client is None:
        client = CompletionClient(settings)

    app = FastAPI(
        title="Vibe Check Backend",
        version=__version__,
        description="Streams a multi-stage LLM analysis of a product idea.",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_resolve_allowed_origins(settings),
        allow_origin_regex=r"http://localhost:\d+$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.settings = settings
    app.state.store = store
    app.state.pipeline = AnalysisPipeline(client, store, settings.extraction_policy)

    _register_error_handlers(app)
    app.include_router(analysis.router)

    static_dir = Path(settings.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
    return app
