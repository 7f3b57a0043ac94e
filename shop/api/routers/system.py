"""
System API router.

Routes defined at root level:
- GET /health - Health check endpoint
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from shop.api.responses import HealthCheckResponse

logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"

router = APIRouter()


@router.get("/health", response_model=HealthCheckResponse)
async def health_check() -> HealthCheckResponse:
    """Health check endpoint."""
    logger.debug("Health check requested")
    return HealthCheckResponse(
        status="healthy",
        version=API_VERSION,
        timestamp=datetime.now(timezone.utc),
    )
