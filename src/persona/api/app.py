"""FastAPI application with lifespan, router mounting and error envelopes."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from persona.api.routes import entities, files, health, steps
from persona.api.schemas import ErrorResponse
from persona.core.config import AppSettings
from persona.core.exceptions import PersonaError, ValidationError
from persona.core.observability import setup_json_logging
from persona.services.container import ServiceContainer, build_production_services

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialize and tear down application resources."""
    if getattr(app.state, "services", None) is None:
        settings = AppSettings()
        setup_json_logging(settings.log_level)
        app.state.settings = settings
        app.state.services = build_production_services(settings)
    yield
    # Deliver anything still queued before shutdown.
    app.state.services.outbox.drain()


async def persona_error_handler(request: Request, exc: PersonaError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
    body = ErrorResponse(kind=exc.kind, message=str(exc))
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"field": ".".join(str(p) for p in err["loc"][1:]), "message": err["msg"]}
        for err in exc.errors()
    ]
    body = ErrorResponse(kind=ValidationError.kind, message="Validation failed", details=errors)
    return JSONResponse(status_code=ValidationError.status_code, content=body.model_dump())


def create_app(services: ServiceContainer | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    ``services`` lets callers (tests, embedding apps) supply pre-wired engines;
    otherwise production backends are built from ``AppSettings`` at startup.
    """
    app = FastAPI(
        title="Persona Entity Management API",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.services = services
    app.add_exception_handler(PersonaError, persona_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.include_router(health.router)
    app.include_router(entities.router, prefix="/api")
    app.include_router(steps.router, prefix="/api")
    app.include_router(files.router, prefix="/api")
    return app
