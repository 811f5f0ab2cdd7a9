"""Simple health and readiness endpoints."""

from __future__ import annotations

import logging
import time
from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from catalog.api.dependencies.service import get_app_settings, get_product_service
from catalog.core.config import Settings
from catalog.core.errors import StoreError
from catalog.services.product_service import ProductService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/health", tags=["health"])


@router.get("", summary="Liveness probe")
async def health(settings: Settings = Depends(get_app_settings)) -> dict[str, Any]:
    """Fixed status payload; ``timestamp`` is epoch milliseconds."""
    return {
        "status": "UP",
        "version": settings.app_version,
        "timestamp": int(time.time() * 1000),
    }


@router.get("/ready", summary="Readiness probe")
def ready(service: ProductService = Depends(get_product_service)):
    """Check that the product store can be reached.

    Used by load balancers to determine if traffic should be routed to this instance.
    """
    try:
        service.store.ping()
    except StoreError as e:
        logger.error(f"Store readiness check failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "DOWN",
                "error": "Product store unavailable",
                "checks": {"store": "unhealthy"},
            },
        )
    return {"status": "UP", "checks": {"store": "healthy"}}
