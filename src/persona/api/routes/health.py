"""Health check endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from persona.api.dependencies import get_services
from persona.core.exceptions import PersonaError
from persona.services.container import ServiceContainer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "healthy"}


@router.get("/ready")
def ready(services: ServiceContainer = Depends(get_services)):
    ping = getattr(services.cache, "ping", None)
    try:
        if ping is not None:
            ping()
    except PersonaError as exc:
        logger.warning("Readiness check failed: %s", exc)
        return JSONResponse(status_code=503, content={"status": "unavailable", "cache": str(exc)})
    return {"status": "ready"}
