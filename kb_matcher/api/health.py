"""Health check and monitoring API endpoints."""

import time
from typing import Any, Dict

from fastapi import APIRouter, Depends

from ..config import get_settings
from ..core.engine import MatchingEngine
from ..dependencies import get_engine
from ..models.response import HealthResponse
from ..repository.loader import SEED_SOURCE

router = APIRouter(prefix="/api/v1", tags=["health"])
settings = get_settings()

# Track application start time
app_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check the health status of the matching service"
)
async def health_check(engine: MatchingEngine = Depends(get_engine)) -> HealthResponse:
    """
    Report service health.
    
    Serving the bundled seed set instead of the entry store is reported
    as degraded.
    """
    snapshot = engine.snapshot
    
    dependencies = {
        "matching_engine": "healthy" if snapshot is not None else "unhealthy",
        "usage_tracker": "healthy" if engine.usage_tracker.get_stats()["failed"] == 0 else "degraded",
        "entry_store": "unknown"
    }
    if snapshot is not None:
        dependencies["entry_store"] = "degraded" if snapshot.source == SEED_SOURCE else "healthy"
    
    if all(status == "healthy" for status in dependencies.values()):
        status = "healthy"
    elif any(status == "unhealthy" for status in dependencies.values()):
        status = "unhealthy"
    else:
        status = "degraded"
    
    return HealthResponse(
        status=status,
        version=settings.app_version,
        uptime=time.time() - app_start_time,
        entries_loaded=len(snapshot.entries) if snapshot else 0,
        entry_source=snapshot.source if snapshot else None,
        dependencies=dependencies
    )


@router.get(
    "/metrics",
    summary="Engine metrics",
    description="Query counters and timings of the matching engine"
)
async def engine_metrics(engine: MatchingEngine = Depends(get_engine)) -> Dict[str, Any]:
    return engine.get_stats()
