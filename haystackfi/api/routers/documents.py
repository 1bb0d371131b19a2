"""
Compliance document routes.
Vendors publish compliance documents; institutions request access to
restricted ones and vendor owners decide.
"""

import logging
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...db.enums import AccessRequestStatus, NotificationType
from ...db.models import ComplianceDocument, DocumentAccessRequest, User
from ..dependencies import get_current_user, get_db
from ..errors import ConflictError, PermissionDeniedError, ResourceNotFoundError
from ..schemas.document import (
    ComplianceDocumentResponse,
    DocumentAccessDecision,
    DocumentAccessRequestCreate,
    DocumentAccessRequestResponse,
)
from ..services.notification_service import notify
from ..services.vendor_service import can_manage_vendor, get_vendor_or_404

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Compliance Documents"])


@router.get("/vendor/{vendor_id}/documents", response_model=List[ComplianceDocumentResponse])
async def list_documents(
    vendor_id: int, db: Session = Depends(get_db)
) -> List[ComplianceDocumentResponse]:
    vendor = get_vendor_or_404(db, vendor_id)
    documents = sorted(vendor.documents, key=lambda d: d.last_updated, reverse=True)
    return [ComplianceDocumentResponse.model_validate(d) for d in documents]


@router.post(
    "/documents/{document_id}/access-requests",
    response_model=DocumentAccessRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
async def request_access(
    document_id: int,
    request: DocumentAccessRequestCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> DocumentAccessRequestResponse:
    """
    Request access to a compliance document.

    Documents that do not require approval are granted immediately.
    """
    document = db.query(ComplianceDocument).filter(ComplianceDocument.id == document_id).first()
    if document is None:
        raise ResourceNotFoundError("Document", document_id)

    pending = (
        db.query(DocumentAccessRequest)
        .filter(
            DocumentAccessRequest.document_id == document.id,
            DocumentAccessRequest.user_id == current_user.id,
            DocumentAccessRequest.status == AccessRequestStatus.PENDING.value,
        )
        .first()
    )
    if pending:
        raise ConflictError(
            "An access request for this document is already pending",
            details={"access_request_id": pending.id},
        )

    access = DocumentAccessRequest(
        document_id=document.id,
        user_id=current_user.id,
        justification=request.justification,
    )

    if document.required_approval:
        access.status = AccessRequestStatus.PENDING.value
        notify(
            db,
            document.vendor.owner_id,
            NotificationType.DOCUMENT_REQUEST,
            title="Document access requested",
            message=f"{current_user.display_name} requested access to {document.title}",
            action_url=f"/compliance/{document.vendor_id}",
        )
    else:
        access.status = AccessRequestStatus.APPROVED.value
        access.approved_at = datetime.utcnow()
        document.download_count = (document.download_count or 0) + 1

    db.add(access)
    db.commit()
    db.refresh(access)

    logger.info(
        f"Access request {access.id} for document {document.id} by user {current_user.id}: {access.status}"
    )
    return DocumentAccessRequestResponse.model_validate(access)


@router.post(
    "/documents/access-requests/{request_id}/decision",
    response_model=DocumentAccessRequestResponse,
)
async def decide_access_request(
    request_id: int,
    decision: DocumentAccessDecision,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> DocumentAccessRequestResponse:
    """Approve or reject a pending access request (vendor owner or admin)."""
    access = db.query(DocumentAccessRequest).filter(DocumentAccessRequest.id == request_id).first()
    if access is None:
        raise ResourceNotFoundError("Access request", request_id)

    document = access.document
    if not can_manage_vendor(current_user, document.vendor):
        raise PermissionDeniedError("Only the vendor owner or an admin can decide access requests")

    if access.status != AccessRequestStatus.PENDING.value:
        raise ConflictError(f"Access request has already been {access.status}")

    now = datetime.utcnow()
    if decision.approve:
        access.status = AccessRequestStatus.APPROVED.value
        access.approved_at = now
        access.approved_by = current_user.id
        document.download_count = (document.download_count or 0) + 1
    else:
        access.status = AccessRequestStatus.REJECTED.value
        access.rejected_at = now
        access.rejection_reason = (decision.rejection_reason or "").strip() or None

    db.commit()
    db.refresh(access)

    logger.info(f"Access request {access.id} {access.status} by user {current_user.id}")
    return DocumentAccessRequestResponse.model_validate(access)
