import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from sora.config import get_settings
from sora.schemas.health import HealthResponse
from sora.services.risk_tables import TABLE_VERSION

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    settings = get_settings()
    return HealthResponse(
        status="healthy",
        service=settings.service_name,
        version=settings.service_version,
        db_type=settings.db_type,
        table_version=TABLE_VERSION,
        reassessment_enabled=settings.reassessment_enabled,
    )


@router.get("/internal/metrics")
async def internal_metrics():
    """Connection pool figures for the monitoring service."""
    from sora.database import sync_engine

    pool = sync_engine.pool
    return {
        "service": get_settings().service_name,
        "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S"),
        "dbPool": {
            "status": pool.status(),
        },
    }
