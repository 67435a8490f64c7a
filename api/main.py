"""FastAPI service for the Contact List."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from api.dependencies import build_contact_service, get_contact_service, get_settings
from api.middleware import BodySizeLimitMiddleware
from api.routers import contacts_router
from contact_list import __version__
from contact_list.config import Settings, ensure_directories
from contact_list.contacts import ContactService
from contact_list.errors import (
    ContactError,
    ContactNotFound,
    StorageUnavailable,
)
from contact_list.logs import configure_logging

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _validation_errors(exc: RequestValidationError) -> list[dict]:
    errors = []
    for err in exc.errors():
        # loc is ("body" | "query" | "path", field, ...)
        location = [str(part) for part in err.get("loc", ())]
        errors.append({
            "location": location[0] if location else "",
            "field": ".".join(location[1:]),
            "message": err.get("msg", "Invalid value"),
        })
    return errors


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create the FastAPI application."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level, settings.logs_dir)
        ensure_directories(settings)
        if getattr(app.state, "contact_service", None) is None:
            app.state.contact_service = build_contact_service(settings)
        logger.info(
            "Contact List API started (environment=%s, storage=%s)",
            settings.environment,
            app.state.contact_service.repository.backend,
        )
        yield
        logger.info("Contact List API stopped")

    app = FastAPI(
        title="Contact List API",
        version=__version__,
        description="CRUD service for contacts with optional avatar images.",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Added first so CORS wraps it and 413 responses carry CORS headers.
    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=settings.max_body_bytes)

    origins = [origin for origin in settings.allowed_origins if origin]
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # ── Exception handlers ──────────────────────────────────────────
    @app.exception_handler(RequestValidationError)
    async def _validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = _validation_errors(exc)
        logger.warning("Validation error on %s %s: %s", request.method, request.url.path, errors)
        return JSONResponse(status_code=400, content={"errors": errors})

    @app.exception_handler(StorageUnavailable)
    async def _storage_handler(request: Request, exc: StorageUnavailable) -> JSONResponse:
        logger.error("Storage failure on %s %s", request.method, request.url.path, exc_info=exc)
        return _error(500, "Internal server error")

    @app.exception_handler(ContactNotFound)
    async def _not_found_handler(request: Request, exc: ContactNotFound) -> JSONResponse:
        return _error(404, exc.detail)

    @app.exception_handler(ContactError)
    async def _contact_error_handler(request: Request, exc: ContactError) -> JSONResponse:
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.detail)
        return _error(400, exc.detail)

    @app.exception_handler(Exception)
    async def _global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled API error: %s", exc)
        return _error(500, "Internal server error")

    # ── Routes ──────────────────────────────────────────────────────
    @app.get("/health")
    def health_check(service: ContactService = Depends(get_contact_service)) -> dict:
        """Health check endpoint reporting the storage backend in use."""
        return {
            "status": "ok",
            "time": datetime.now(timezone.utc).isoformat(),
            "environment": settings.environment,
            "storage": service.repository.backend,
        }

    app.include_router(contacts_router, prefix="/contacts", tags=["contacts"])
    app.mount(
        "/uploads",
        StaticFiles(directory=str(settings.uploads_dir), check_dir=False),
        name="uploads",
    )

    return app


app = create_app()
