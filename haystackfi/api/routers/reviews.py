"""
Vendor rating routes.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...db.enums import INSTITUTION_ROLES, NotificationType
from ...db.models import Review, User
from ..dependencies import get_cache, get_current_user, get_db
from ..errors import ConflictError, PermissionDeniedError
from ..schemas.common import ErrorResponse
from ..schemas.review import ReviewCreateRequest, ReviewResponse
from ..services.cache_service import CacheService
from ..services.notification_service import notify
from ..services.vendor_service import get_vendor_or_404, recompute_vendor_rating

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/vendor", tags=["Reviews"])


def _reviewer_title(user: User) -> str:
    parts = [p for p in (user.title, user.institution_name) if p]
    return ", ".join(parts)


@router.get("/{vendor_id}/ratings", response_model=List[ReviewResponse])
async def list_ratings(vendor_id: int, db: Session = Depends(get_db)) -> List[ReviewResponse]:
    """Reviews for a vendor, newest first."""
    vendor = get_vendor_or_404(db, vendor_id)
    return [ReviewResponse.model_validate(r) for r in vendor.reviews]


@router.post(
    "/{vendor_id}/ratings",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse, "description": "Already reviewed"}},
)
async def create_rating(
    vendor_id: int,
    request: ReviewCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
) -> ReviewResponse:
    """
    Review a vendor (one review per user per vendor).

    The vendor's profile rating becomes the mean of its reviews.
    """
    vendor = get_vendor_or_404(db, vendor_id)

    if vendor.owner_id == current_user.id:
        raise PermissionDeniedError("You cannot review your own vendor listing")

    existing = (
        db.query(Review)
        .filter(Review.vendor_id == vendor.id, Review.user_id == current_user.id)
        .first()
    )
    if existing:
        raise ConflictError("You have already reviewed this vendor", details={"review_id": existing.id})

    review = Review(
        vendor_id=vendor.id,
        user_id=current_user.id,
        reviewer="Anonymous" if request.is_anonymous else current_user.display_name,
        reviewer_title=None if request.is_anonymous else (_reviewer_title(current_user) or None),
        title=request.title,
        rating=request.rating,
        content=request.content,
        is_verified=current_user.role in INSTITUTION_ROLES,
        is_anonymous=request.is_anonymous,
        tags=request.tags,
    )
    db.add(review)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise ConflictError("You have already reviewed this vendor")

    recompute_vendor_rating(db, vendor)
    notify(
        db,
        vendor.owner_id,
        NotificationType.REVIEW_SUBMITTED,
        title="New review",
        message=f"{vendor.company_name} received a {request.rating}-star review",
        action_url=f"/vendor/{vendor.id}",
    )
    db.commit()
    db.refresh(review)

    cache.invalidate_vendor_caches()
    logger.info(f"Review {review.id} created for vendor {vendor.id} by user {current_user.id}")
    return ReviewResponse.model_validate(review)
