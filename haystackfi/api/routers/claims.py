"""
Vendor claim routes.
Vendor representatives claim unclaimed listings; admins approve or reject.
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...db.enums import ClaimStatus, NotificationType, UserRole, VerificationStatus
from ...db.models import User, VendorClaim, VendorProfile
from ..dependencies import get_cache, get_db, require_admin, require_roles
from ..errors import ConflictError, InvalidRequestError, ResourceNotFoundError
from ..schemas.claim import ClaimDecisionRequest, VendorClaimCreate, VendorClaimResponse
from ..schemas.common import ErrorResponse
from ..services.cache_service import CacheService
from ..services.notification_service import notify
from ..services.vendor_service import get_vendor_or_404, touch_vendor_activity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/vendor", tags=["Vendor Claims"])

SUPERSEDED_REASON = "Another claim for this listing was approved"


@router.get("/claims", response_model=List[VendorClaimResponse])
async def list_claims(
    claim_status: Optional[ClaimStatus] = Query(None, alias="status"),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> List[VendorClaimResponse]:
    """All claims, newest first (admin)."""
    query = db.query(VendorClaim)
    if claim_status is not None:
        query = query.filter(VendorClaim.status == claim_status.value)
    claims = query.order_by(VendorClaim.submitted_at.desc(), VendorClaim.id.desc()).all()
    return [VendorClaimResponse.model_validate(c) for c in claims]


@router.post(
    "/claims/{claim_id}/decision",
    response_model=VendorClaimResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Rejection reason missing"},
        409: {"model": ErrorResponse, "description": "Claim already decided or vendor owned"},
    },
)
async def decide_claim(
    claim_id: int,
    decision: ClaimDecisionRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
) -> VendorClaimResponse:
    """
    Approve or reject a pending claim (admin).

    Rejection requires a reason. Approval hands the listing to the claimant,
    marks it verified and rejects any other pending claims for it.
    """
    claim = db.query(VendorClaim).filter(VendorClaim.id == claim_id).first()
    if claim is None:
        raise ResourceNotFoundError("Claim", claim_id)

    if claim.status != ClaimStatus.PENDING.value:
        raise ConflictError(f"Claim has already been {claim.status}", details={"status": claim.status})

    reason = (decision.rejection_reason or "").strip()
    if not decision.approve and not reason:
        raise InvalidRequestError("A rejection reason is required")

    now = datetime.utcnow()
    vendor = claim.vendor

    if decision.approve:
        if vendor.owner_id is not None and vendor.owner_id != claim.user_id:
            raise ConflictError("Vendor has already been claimed", details={"vendor_id": vendor.id})

        claim.status = ClaimStatus.APPROVED.value
        vendor.owner_id = claim.user_id
        vendor.claimed_at = now
        if vendor.profile is None:
            vendor.profile = VendorProfile()
        vendor.profile.verification_status = VerificationStatus.VERIFIED.value
        touch_vendor_activity(vendor)

        others = (
            db.query(VendorClaim)
            .filter(
                VendorClaim.vendor_id == vendor.id,
                VendorClaim.id != claim.id,
                VendorClaim.status == ClaimStatus.PENDING.value,
            )
            .all()
        )
        for other in others:
            other.status = ClaimStatus.REJECTED.value
            other.reviewed_at = now
            other.reviewed_by = admin.id
            other.rejection_reason = SUPERSEDED_REASON
            notify(
                db,
                other.user_id,
                NotificationType.CLAIM_REJECTED,
                title="Vendor claim rejected",
                message=f"Your claim for {vendor.company_name} was rejected: {SUPERSEDED_REASON}",
            )

        notify(
            db,
            claim.user_id,
            NotificationType.CLAIM_APPROVED,
            title="Vendor claim approved",
            message=f"You now manage {vendor.company_name}",
            action_url="/vendor/dashboard",
        )
    else:
        claim.status = ClaimStatus.REJECTED.value
        claim.rejection_reason = reason
        notify(
            db,
            claim.user_id,
            NotificationType.CLAIM_REJECTED,
            title="Vendor claim rejected",
            message=f"Your claim for {vendor.company_name} was rejected: {reason}",
        )

    claim.reviewed_at = now
    claim.reviewed_by = admin.id
    db.commit()
    db.refresh(claim)

    cache.invalidate_vendor_caches()
    logger.info(f"Claim {claim.id} for vendor {vendor.id} {claim.status} by admin {admin.id}")
    return VendorClaimResponse.model_validate(claim)


@router.post(
    "/{vendor_id}/claims",
    response_model=VendorClaimResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        403: {"model": ErrorResponse, "description": "Only vendor accounts can claim listings"},
        409: {"model": ErrorResponse, "description": "Vendor owned or claim pending"},
    },
)
async def create_claim(
    vendor_id: int,
    request: VendorClaimCreate,
    current_user: User = Depends(require_roles(UserRole.VENDOR)),
    db: Session = Depends(get_db),
) -> VendorClaimResponse:
    """
    Submit a claim for an unclaimed vendor listing.

    Only vendor accounts can claim; on approval the claimant manages the listing.
    """
    vendor = get_vendor_or_404(db, vendor_id)

    if vendor.owner_id is not None:
        raise ConflictError("Vendor has already been claimed", details={"vendor_id": vendor.id})

    pending = (
        db.query(VendorClaim)
        .filter(
            VendorClaim.vendor_id == vendor.id,
            VendorClaim.user_id == current_user.id,
            VendorClaim.status == ClaimStatus.PENDING.value,
        )
        .first()
    )
    if pending:
        raise ConflictError(
            "You already have a pending claim for this vendor", details={"claim_id": pending.id}
        )

    claim = VendorClaim(
        vendor_id=vendor.id,
        user_id=current_user.id,
        status=ClaimStatus.PENDING.value,
        first_name=request.first_name.strip(),
        last_name=request.last_name.strip(),
        email=request.email,
        phone=request.phone.strip(),
        title=request.title.strip(),
        company_email=request.company_email,
        verification_method=request.verification_method.value,
        message=request.message,
    )
    db.add(claim)
    db.commit()
    db.refresh(claim)

    logger.info(f"Claim {claim.id} submitted for vendor {vendor.id} by user {current_user.id}")
    return VendorClaimResponse.model_validate(claim)
