"""
Vendor routes.
Search, detail, creation and editing of marketplace vendor listings.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session, joinedload, selectinload

from ...db.enums import UserRole, VerificationStatus, VendorStatus
from ...db.models import User, Vendor, VendorProfile, VendorView
from ..dependencies import (
    get_cache,
    get_current_user_optional,
    get_db,
    require_admin,
    require_roles,
)
from ..errors import PermissionDeniedError
from ..schemas.admin import DashboardAnalytics
from ..schemas.common import ErrorResponse
from ..schemas.vendor import (
    VendorCreateRequest,
    VendorResponse,
    VendorSearchResponse,
    VendorUpdateRequest,
)
from ..services.cache_service import CacheService
from ..services.metrics_service import compute_dashboard_analytics
from ..services.vendor_service import (
    SORT_OPTIONS,
    ensure_can_manage_vendor,
    get_vendor_or_404,
    is_admin,
    search_vendors,
    touch_vendor_activity,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/vendor", tags=["Vendors"])

ADMIN_ONLY_PROFILE_FIELDS = ("status", "verification_status")


@router.get("/search", response_model=VendorSearchResponse)
async def search(
    q: Optional[str] = Query(None, max_length=200, description="Free-text query"),
    category: Optional[str] = Query(None),
    size: Optional[str] = Query(None),
    vendor_status: Optional[str] = Query(None, alias="status"),
    location: Optional[str] = Query(None),
    tags: Optional[List[str]] = Query(None, description="Repeat or comma-separate"),
    min_rating: Optional[float] = Query(None, alias="minRating", ge=0, le=5),
    sort_by: str = Query("compatibility", alias="sortBy", pattern="^(" + "|".join(SORT_OPTIONS) + ")$"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
):
    """
    Search vendor listings.

    Results are cached per parameter set and invalidated on vendor writes.
    """
    params = {
        "q": q,
        "category": category,
        "size": size,
        "status": vendor_status,
        "location": location,
        "tags": sorted(tags) if tags else None,
        "min_rating": min_rating,
        "sort_by": sort_by,
        "page": page,
        "limit": limit,
    }

    cached = cache.get_search_results(params)
    if cached is not None:
        return cached

    result = search_vendors(
        db,
        q=q,
        category=category,
        size=size,
        status=vendor_status,
        location=location,
        tags=tags,
        min_rating=min_rating,
        sort_by=sort_by,
        page=page,
        limit=limit,
    )
    response = VendorSearchResponse.model_validate(result)

    cache.set_search_results(params, response.model_dump(mode="json", by_alias=True))

    logger.info(
        f"Vendor search q={q!r} returned {response.total} results",
        extra={"query": q, "total": response.total, "page": page},
    )
    return response


@router.get("/verification-requests", response_model=List[VendorResponse])
async def verification_requests(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> List[VendorResponse]:
    """Vendors whose verification is pending (admin)."""
    vendors = (
        db.query(Vendor)
        .join(VendorProfile, VendorProfile.vendor_id == Vendor.id)
        .options(joinedload(Vendor.profile), selectinload(Vendor.reviews))
        .filter(VendorProfile.verification_status == VerificationStatus.PENDING.value)
        .order_by(Vendor.created_at.desc())
        .all()
    )
    return [VendorResponse.model_validate(v) for v in vendors]


@router.get("/dashboard", response_model=DashboardAnalytics)
async def vendor_dashboard(
    current_user: User = Depends(require_roles(UserRole.VENDOR, UserRole.ADMIN)),
    db: Session = Depends(get_db),
) -> DashboardAnalytics:
    """
    Lead analytics for the caller's listings.

    Admins see the whole marketplace.
    """
    query = db.query(Vendor).options(
        joinedload(Vendor.profile),
        selectinload(Vendor.reviews),
        selectinload(Vendor.demo_requests),
        selectinload(Vendor.views),
    )
    if not is_admin(current_user):
        query = query.filter(Vendor.owner_id == current_user.id)

    analytics = compute_dashboard_analytics(db, query.all())
    return DashboardAnalytics.model_validate(analytics)


@router.post(
    "",
    response_model=VendorResponse,
    status_code=status.HTTP_201_CREATED,
    responses={403: {"model": ErrorResponse, "description": "Admin only"}},
)
async def create_vendor(
    request: VendorCreateRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
) -> VendorResponse:
    """Create a vendor listing (admin). New listings start pending verification."""
    vendor = Vendor(
        company_name=request.name,
        website=request.website,
        is_active=True,
        profile=VendorProfile(
            summary=request.description or None,
            detailed_description=request.description or None,
            category=request.category,
            location=request.location or None,
            size=request.size.value if request.size else None,
            founded=request.founded or None,
            website=request.website or None,
            status=VendorStatus.PENDING.value,
            verification_status=VerificationStatus.PENDING.value,
        ),
    )
    db.add(vendor)
    db.commit()
    db.refresh(vendor)

    cache.invalidate_vendor_caches()
    logger.info(f"Vendor created: {vendor.id} ({vendor.company_name}) by admin {admin.id}")

    return VendorResponse.model_validate(vendor)


@router.get(
    "/{vendor_id}",
    response_model=VendorResponse,
    responses={404: {"model": ErrorResponse, "description": "Vendor not found"}},
)
async def get_vendor(
    vendor_id: int,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
) -> VendorResponse:
    """Get a vendor listing and record a profile view."""
    vendor = get_vendor_or_404(db, vendor_id)

    db.add(VendorView(vendor_id=vendor.id, user_id=current_user.id if current_user else None))
    db.commit()
    db.refresh(vendor)

    return VendorResponse.model_validate(vendor)


@router.put(
    "/{vendor_id}",
    response_model=VendorResponse,
    responses={
        403: {"model": ErrorResponse, "description": "Not allowed to manage this vendor"},
        404: {"model": ErrorResponse, "description": "Vendor not found"},
    },
)
async def update_vendor(
    vendor_id: int,
    request: VendorUpdateRequest,
    current_user: User = Depends(require_roles(UserRole.ADMIN, UserRole.VENDOR)),
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
) -> VendorResponse:
    """
    Partially update a vendor listing.

    Owners may edit descriptive fields; only admins change status or
    verification status.
    """
    vendor = get_vendor_or_404(db, vendor_id)
    ensure_can_manage_vendor(current_user, vendor)

    updates = request.model_dump(exclude_unset=True, exclude={"profile"})
    for field, value in updates.items():
        if value is None:
            # Clearing the website stores an empty string; other nulls are ignored
            if field != "website":
                continue
            value = ""
        setattr(vendor, field, value)

    if request.profile is not None:
        profile_updates = request.profile.model_dump(exclude_unset=True, mode="json")
        restricted = [f for f in ADMIN_ONLY_PROFILE_FIELDS if f in profile_updates]
        if restricted and not is_admin(current_user):
            raise PermissionDeniedError("Only administrators can change vendor status")

        if vendor.profile is None:
            vendor.profile = VendorProfile()
        for field, value in profile_updates.items():
            column = VendorProfile.__table__.columns.get(field)
            if value is None and column is not None and not column.nullable:
                continue
            setattr(vendor.profile, field, value)

    touch_vendor_activity(vendor)
    db.commit()
    db.refresh(vendor)

    cache.invalidate_vendor_caches()
    logger.info(f"Vendor {vendor.id} updated by user {current_user.id}")

    return VendorResponse.model_validate(vendor)
