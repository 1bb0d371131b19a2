"""
Vendor Research Endpoints
POST /vendor/{id}/research - Queue a research run (Celery)
GET /vendor/{id}/research - Research history, newest first
GET /vendor/{id}/research/{research_id} - Single research run
POST /vendor/{id}/research/{research_id}/apply - Merge results into the profile
"""

import logging
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...db.enums import ResearchStatus
from ...db.models import User, VendorResearchRecord
from ..dependencies import get_cache, get_db, require_admin
from ..errors import ConflictError, ResearchDispatchError, ResourceNotFoundError
from ..schemas.research import ResearchRecordResponse
from ..schemas.vendor import VendorResponse
from ..services.cache_service import CacheService
from ..services.vendor_service import apply_research_to_vendor, get_vendor_or_404

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/vendor", tags=["Research"])


def _get_record_or_404(db: Session, vendor_id: int, research_id: int) -> VendorResearchRecord:
    record = (
        db.query(VendorResearchRecord)
        .filter(
            VendorResearchRecord.id == research_id,
            VendorResearchRecord.vendor_id == vendor_id,
        )
        .first()
    )
    if record is None:
        raise ResourceNotFoundError("Research record", research_id)
    return record


@router.post(
    "/{vendor_id}/research",
    response_model=ResearchRecordResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def start_research(
    vendor_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> ResearchRecordResponse:
    """
    Queue a research run for a vendor.

    Returns immediately with the pending record; poll the record for results.
    """
    vendor = get_vendor_or_404(db, vendor_id)

    record = VendorResearchRecord(
        vendor_id=vendor.id,
        status=ResearchStatus.PENDING.value,
        website_url=vendor.website or (vendor.profile.website if vendor.profile else None),
        research_metadata={"requested_by": admin.id},
    )
    db.add(record)
    db.commit()
    db.refresh(record)

    try:
        from ...tasks.research import run_vendor_research

        result = run_vendor_research.delay(record.id)
    except Exception as e:
        logger.error(f"Failed to queue research {record.id}: {e}", exc_info=True)
        record.status = ResearchStatus.FAILED.value
        record.error_message = "Research could not be queued"
        record.completed_at = datetime.utcnow()
        db.commit()
        raise ResearchDispatchError(
            "Failed to queue vendor research", details={"research_id": record.id}
        )

    db.refresh(record)
    if record.task_id is None:
        record.task_id = result.id
        db.commit()
        db.refresh(record)

    logger.info(f"Research queued for vendor {vendor.id}: record={record.id}, task_id={result.id}")
    return ResearchRecordResponse.model_validate(record)


@router.get("/{vendor_id}/research", response_model=List[ResearchRecordResponse])
async def research_history(
    vendor_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> List[ResearchRecordResponse]:
    """All research runs for a vendor, newest first."""
    get_vendor_or_404(db, vendor_id)
    records = (
        db.query(VendorResearchRecord)
        .filter(VendorResearchRecord.vendor_id == vendor_id)
        .order_by(VendorResearchRecord.requested_at.desc(), VendorResearchRecord.id.desc())
        .all()
    )
    return [ResearchRecordResponse.model_validate(r) for r in records]


@router.get("/{vendor_id}/research/{research_id}", response_model=ResearchRecordResponse)
async def get_research(
    vendor_id: int,
    research_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> ResearchRecordResponse:
    return ResearchRecordResponse.model_validate(_get_record_or_404(db, vendor_id, research_id))


@router.post("/{vendor_id}/research/{research_id}/apply", response_model=VendorResponse)
async def apply_research(
    vendor_id: int,
    research_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
) -> VendorResponse:
    """
    Merge a completed research run into the vendor profile.

    Only empty profile fields are filled in.
    """
    vendor = get_vendor_or_404(db, vendor_id)
    record = _get_record_or_404(db, vendor_id, research_id)

    if record.status != ResearchStatus.COMPLETED.value:
        raise ConflictError(
            f"Research {research_id} is {record.status}; only completed research can be applied",
            details={"status": record.status},
        )

    apply_research_to_vendor(vendor, record)
    db.commit()
    db.refresh(vendor)

    cache.invalidate_vendor_caches()
    return VendorResponse.model_validate(vendor)
