"""
Admin Endpoints
GET /admin/metrics - Marketplace totals, growth and recent activity
GET /admin/vendor-performance - Per-vendor engagement metrics
POST /admin/clear-cache - Clear cached vendor searches
"""

import logging
from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ...db.models import User
from ..dependencies import get_cache, get_db, require_admin
from ..schemas.admin import AdminMetrics, VendorPerformanceMetrics
from ..services.cache_service import CacheService
from ..services.metrics_service import compute_admin_metrics, compute_vendor_performance

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


class ClearCacheResponse(BaseModel):
    status: str = Field(..., description="Status")
    keys_cleared: int = Field(..., description="Number of keys cleared")


@router.get("/metrics", response_model=AdminMetrics)
async def admin_metrics(
    admin: User = Depends(require_admin), db: Session = Depends(get_db)
) -> AdminMetrics:
    """
    Marketplace-wide metrics.

    Growth figures compare the last 30 days with the 30 days before.
    """
    return AdminMetrics.model_validate(compute_admin_metrics(db))


@router.get("/vendor-performance", response_model=List[VendorPerformanceMetrics])
async def vendor_performance(
    admin: User = Depends(require_admin), db: Session = Depends(get_db)
) -> List[VendorPerformanceMetrics]:
    """Views, demo requests, conversion and ratings per vendor."""
    return [VendorPerformanceMetrics.model_validate(m) for m in compute_vendor_performance(db)]


@router.post("/clear-cache", response_model=ClearCacheResponse)
async def clear_cache(
    admin: User = Depends(require_admin), cache: CacheService = Depends(get_cache)
) -> ClearCacheResponse:
    cleared = cache.invalidate_vendor_caches()
    logger.info(f"Admin {admin.id} cleared {cleared} cached vendor searches")
    return ClearCacheResponse(status="success", keys_cleared=cleared)
