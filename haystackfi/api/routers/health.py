"""
Health Check Endpoints
Endpoints for health checks and status monitoring.
"""

import logging
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import APISettings, get_settings
from ..dependencies import get_cache, get_db
from ..middleware.timing import get_latency_tracker
from ..services.cache_service import CacheService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check() -> Dict[str, str]:
    """
    Basic health check.

    Returns:
        Simple health status
    """
    return {"status": "healthy", "timestamp": datetime.utcnow().isoformat()}


@router.get("/status", status_code=status.HTTP_200_OK)
async def status_check(
    settings: APISettings = Depends(get_settings),
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
) -> Dict[str, Any]:
    """
    Detailed status check.

    Checks status of:
    - Database connection
    - Redis connection (when caching is enabled)
    - Request latency

    Returns:
        Detailed status information
    """
    status_info = {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "version": settings.version,
        "environment": settings.environment,
        "components": {},
    }

    # Check database
    try:
        db.execute(text("SELECT 1"))
        status_info["components"]["database"] = {
            "status": "healthy",
            "url": settings.database_url.split("@")[-1],  # Hide credentials
        }
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        status_info["components"]["database"] = {"status": "unhealthy", "error": str(e)}
        status_info["status"] = "degraded"

    # Check Redis
    if cache.enabled:
        redis_healthy = cache.is_healthy()
        status_info["components"]["redis"] = {"status": "healthy" if redis_healthy else "unhealthy"}
        if not redis_healthy:
            status_info["status"] = "degraded"
    else:
        status_info["components"]["redis"] = {"status": "disabled"}

    latency_stats = get_latency_tracker().get_stats()
    status_info["performance"] = {
        "request_count": latency_stats["count"],
        "latency_p50_ms": round(latency_stats["p50"], 2),
        "latency_p95_ms": round(latency_stats["p95"], 2),
        "latency_p99_ms": round(latency_stats["p99"], 2),
        "target_p95_ms": settings.target_p95_latency_ms,
        "meets_target": latency_stats["p95"] <= settings.target_p95_latency_ms,
    }

    cache_stats = cache.get_statistics()
    status_info["cache"] = {
        "enabled": cache_stats["enabled"],
        "hit_rate_percent": round(cache_stats["hit_rate_percent"], 2),
    }

    return status_info


@router.get("/metrics", status_code=status.HTTP_200_OK)
async def get_metrics() -> Dict[str, Any]:
    """
    Get performance metrics.

    Returns:
        Latency statistics and response counts by status class
    """
    tracker = get_latency_tracker()
    stats = tracker.get_stats()

    return {
        "requests": {
            "total": stats["count"],
            "by_status": tracker.get_status_counts(),
            "by_area": tracker.get_area_counts(),
        },
        "latency": {
            "p50_ms": round(stats["p50"], 2),
            "p95_ms": round(stats["p95"], 2),
            "p99_ms": round(stats["p99"], 2),
            "mean_ms": round(stats["mean"], 2),
            "min_ms": round(stats["min"], 2),
            "max_ms": round(stats["max"], 2),
        },
        "timestamp": datetime.utcnow().isoformat(),
    }


@router.get("/cache/stats", status_code=status.HTTP_200_OK)
async def get_cache_stats(cache: CacheService = Depends(get_cache)) -> Dict[str, Any]:
    """
    Get cache statistics.

    Returns:
        Cache hit rate and operation counts
    """
    return {"cache": cache.get_statistics(), "timestamp": datetime.utcnow().isoformat()}


@router.get("/ready", status_code=status.HTTP_200_OK)
async def readiness_check(db: Session = Depends(get_db)) -> Dict[str, str]:
    """
    Readiness probe.

    Checks if the service is ready to accept traffic.
    """
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Readiness check failed: {e}")
        return {"status": "not_ready", "reason": "database unavailable"}

    return {"status": "ready", "timestamp": datetime.utcnow().isoformat()}


@router.get("/live", status_code=status.HTTP_200_OK)
async def liveness_check() -> Dict[str, str]:
    """
    Liveness probe.

    Checks if the service is alive and responsive.
    """
    return {"status": "alive", "timestamp": datetime.utcnow().isoformat()}
