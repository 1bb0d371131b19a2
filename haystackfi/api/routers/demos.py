"""
Demo request routes.
Institutions book demos with vendors; vendor owners move them through
scheduled/completed/cancelled.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from ...db.enums import DEMO_TRANSITIONS, DemoStatus, NotificationType, UserRole
from ...db.models import DemoRequest, User, Vendor
from ..dependencies import get_current_user, get_db
from ..errors import InvalidRequestError, PermissionDeniedError, ResourceNotFoundError
from ..schemas.demo import DemoRequestCreate, DemoRequestResponse, DemoRequestUpdate
from ..services.notification_service import notify
from ..services.vendor_service import (
    can_manage_vendor,
    get_vendor_or_404,
    is_admin,
    touch_vendor_activity,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/demo-requests", tags=["Demo Requests"])


@router.post("", response_model=DemoRequestResponse, status_code=status.HTTP_201_CREATED)
async def create_demo_request(
    request: DemoRequestCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> DemoRequestResponse:
    """
    Book a demo with a vendor.

    Missing contact fields are filled from the caller's profile. The vendor
    owner (if the listing is claimed) is notified.
    """
    vendor = get_vendor_or_404(db, request.vendor_id)

    demo = DemoRequest(
        vendor_id=vendor.id,
        user_id=current_user.id,
        status=DemoStatus.PENDING.value,
        first_name=request.first_name or current_user.first_name,
        last_name=request.last_name or current_user.last_name,
        email=request.email or current_user.email,
        phone=request.phone or current_user.phone or None,
        bank_name=request.bank_name or current_user.institution_name or "",
        title=request.title or current_user.title or "",
        assets_under_management=request.assets_under_management or "",
        current_provider=request.current_provider,
        timeline=request.timeline,
        preferred_time=request.preferred_time,
        message=request.message,
    )
    db.add(demo)
    touch_vendor_activity(vendor)
    db.flush()

    notify(
        db,
        vendor.owner_id,
        NotificationType.DEMO_REQUEST,
        title="New demo request",
        message=f"{demo.bank_name or current_user.display_name} requested a demo of {vendor.company_name}",
        action_url="/vendor/dashboard",
    )
    db.commit()
    db.refresh(demo)

    logger.info(f"Demo request {demo.id} created for vendor {vendor.id} by user {current_user.id}")
    return DemoRequestResponse.model_validate(demo)


@router.get("", response_model=List[DemoRequestResponse])
async def list_demo_requests(
    vendor_id: Optional[int] = Query(None, alias="vendorId"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> List[DemoRequestResponse]:
    """
    Demo requests visible to the caller.

    Admins see all; vendor users see requests for listings they own;
    institutions see their own requests.
    """
    query = db.query(DemoRequest)

    if is_admin(current_user):
        pass
    elif current_user.role == UserRole.VENDOR.value:
        owned = select(Vendor.id).where(Vendor.owner_id == current_user.id)
        query = query.filter(DemoRequest.vendor_id.in_(owned))
    else:
        query = query.filter(DemoRequest.user_id == current_user.id)

    if vendor_id is not None:
        query = query.filter(DemoRequest.vendor_id == vendor_id)

    demos = query.order_by(DemoRequest.created_at.desc(), DemoRequest.id.desc()).all()
    return [DemoRequestResponse.model_validate(d) for d in demos]


@router.patch("/{demo_id}", response_model=DemoRequestResponse)
async def update_demo_request(
    demo_id: int,
    request: DemoRequestUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> DemoRequestResponse:
    """
    Move a demo request to a new status.

    Allowed: pending -> scheduled|cancelled, scheduled -> completed|cancelled.
    """
    demo = db.query(DemoRequest).filter(DemoRequest.id == demo_id).first()
    if demo is None:
        raise ResourceNotFoundError("Demo request", demo_id)

    if not can_manage_vendor(current_user, demo.vendor):
        raise PermissionDeniedError("Only the vendor owner or an admin can update this demo request")

    new_status = request.status.value
    if new_status not in DEMO_TRANSITIONS.get(demo.status, set()):
        raise InvalidRequestError(
            f"Cannot change demo request from {demo.status} to {new_status}",
            details={"from": demo.status, "to": new_status},
        )

    now = datetime.utcnow()
    demo.status = new_status
    if new_status == DemoStatus.SCHEDULED.value:
        scheduled_at = request.scheduled_at
        if scheduled_at is not None and scheduled_at.tzinfo is not None:
            scheduled_at = scheduled_at.astimezone(timezone.utc).replace(tzinfo=None)
        demo.scheduled_at = scheduled_at or now
    elif new_status == DemoStatus.COMPLETED.value:
        demo.completed_at = now

    touch_vendor_activity(demo.vendor)
    db.commit()
    db.refresh(demo)

    logger.info(f"Demo request {demo.id} moved to {new_status} by user {current_user.id}")
    return DemoRequestResponse.model_validate(demo)
