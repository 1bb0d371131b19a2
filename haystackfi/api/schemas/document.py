"""
Compliance document schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from ...db.enums import AccessRequestStatus, Confidentiality, DocumentStatus, DocumentType
from .common import CamelModel


class ComplianceDocumentResponse(CamelModel):
    id: int
    vendor_id: int
    title: str
    description: str
    type: DocumentType
    confidentiality: Confidentiality
    status: DocumentStatus
    last_updated: datetime
    expires_at: Optional[datetime] = None
    size: str
    file_url: str
    required_approval: bool
    download_count: int
    created_at: datetime
    updated_at: datetime


class DocumentAccessRequestCreate(CamelModel):
    justification: Optional[str] = Field(None, max_length=2000)


class DocumentAccessDecision(CamelModel):
    approve: bool
    rejection_reason: Optional[str] = None


class DocumentAccessRequestResponse(CamelModel):
    id: int
    document_id: int
    user_id: Optional[int] = None
    justification: Optional[str] = None
    status: AccessRequestStatus
    requested_at: datetime
    approved_at: Optional[datetime] = None
    approved_by: Optional[int] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
