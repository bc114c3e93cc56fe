"""
Health check route, mounted at /health and /api/health.
"""
from datetime import datetime, timezone
from typing import Callable, ContextManager
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from mindcare.api.dependencies import get_storage_factory, get_chat_relay
from mindcare.core.errors import AppError
from mindcare.services.chat_service import ChatRelay
from mindcare.stores.base import StorageBackend

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(
    storage_factory: Callable[[], ContextManager[StorageBackend]] = Depends(get_storage_factory),
    relay: ChatRelay = Depends(get_chat_relay)
):
    """Report database and Gemini status; 503 when either is unhealthy."""
    report = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": "unknown",
        "gemini": "unknown",
    }

    try:
        with storage_factory() as storage:
            storage.ping()
        report["database"] = "connected"
    except AppError as e:
        report["status"] = "unhealthy"
        report["database"] = "disconnected"
        report["database_error"] = e.message

    if relay.configured:
        # No provider call here; configuration is all that is checked
        report["gemini"] = "configured"
    else:
        report["gemini"] = "not_configured"
        report["status"] = "unhealthy"

    status_code = 200 if report["status"] == "healthy" else 503
    return JSONResponse(report, status_code=status_code)
