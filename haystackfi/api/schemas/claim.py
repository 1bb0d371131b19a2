"""
Vendor claim schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from ...db.enums import ClaimStatus, VerificationMethod
from .common import CamelModel


class VendorClaimCreate(CamelModel):
    """Request schema for claiming an unclaimed vendor listing."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=50)
    title: str = Field(..., min_length=1, max_length=255)
    company_email: EmailStr
    verification_method: VerificationMethod
    message: Optional[str] = None


class ClaimDecisionRequest(CamelModel):
    """Admin decision on a pending claim."""

    approve: bool
    rejection_reason: Optional[str] = None


class VendorClaimResponse(CamelModel):
    id: int
    vendor_id: int
    user_id: Optional[int] = None
    status: ClaimStatus
    first_name: str
    last_name: str
    email: str
    phone: str
    title: str
    company_email: str
    verification_method: VerificationMethod
    message: Optional[str] = None
    submitted_at: datetime
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[int] = None
    rejection_reason: Optional[str] = None
