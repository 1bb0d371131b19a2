"""
Vendor request/response schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator

from ...db.enums import PricingModel, VendorSize, VendorStatus, VerificationStatus
from .common import CamelModel
from .review import ReviewResponse


class VendorProfileSchema(CamelModel):
    """Descriptive marketplace profile of a vendor."""

    summary: Optional[str] = None
    detailed_description: Optional[str] = None
    category: Optional[str] = None
    subcategories: List[str] = Field(default_factory=list)
    location: Optional[str] = None
    size: Optional[VendorSize] = None
    founded: Optional[str] = None
    employees: Optional[str] = None
    rating: Optional[float] = None
    compatibility: Optional[float] = None
    website: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    logo_url: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    features: List[str] = Field(default_factory=list)
    integrations: List[str] = Field(default_factory=list)
    certifications: List[str] = Field(default_factory=list)
    client_size: List[str] = Field(default_factory=list)
    pricing_model: Optional[PricingModel] = None
    price_range: Optional[str] = None
    status: VendorStatus = VendorStatus.PENDING
    verification_status: VerificationStatus = VerificationStatus.PENDING
    last_activity_at: Optional[datetime] = None
    target_customers: List[str] = Field(default_factory=list)
    search_hints_keywords: List[str] = Field(default_factory=list)
    compliance_certifications: List[str] = Field(default_factory=list)
    integrations_core_support: List[str] = Field(default_factory=list)
    digital_banking_partners: List[str] = Field(default_factory=list)
    notable_customers: List[str] = Field(default_factory=list)
    pricing_notes: Optional[str] = None
    source_url: Optional[str] = None
    confidence: Optional[float] = None
    last_verified: Optional[datetime] = None
    notes: Optional[str] = None


class VendorResponse(CamelModel):
    """Vendor listing with its profile and reviews."""

    id: int
    company_name: str
    website: str
    is_active: bool
    owner_id: Optional[int] = None
    claimed_at: Optional[datetime] = None
    profile: Optional[VendorProfileSchema] = None
    ratings: List[ReviewResponse] = Field(
        default_factory=list, validation_alias=AliasChoices("reviews", "ratings")
    )
    created_at: datetime
    updated_at: datetime


class VendorSearchResponse(CamelModel):
    """Paginated vendor search results."""

    vendors: List[VendorResponse]
    total: int
    page: int
    limit: int
    total_pages: int
    has_more: bool


class VendorCreateRequest(CamelModel):
    """Request schema for creating a vendor listing (admin)."""

    name: str = Field(..., min_length=1, max_length=255)
    category: str = Field(..., min_length=1, max_length=100)
    description: str = ""
    website: str = ""
    location: str = ""
    size: Optional[VendorSize] = None
    founded: str = ""

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Vendor name is required")
        return v.strip()


class VendorProfileUpdate(CamelModel):
    """Partial update of profile fields; unset fields are left untouched."""

    summary: Optional[str] = None
    detailed_description: Optional[str] = None
    category: Optional[str] = None
    subcategories: Optional[List[str]] = None
    location: Optional[str] = None
    size: Optional[VendorSize] = None
    founded: Optional[str] = None
    employees: Optional[str] = None
    compatibility: Optional[float] = Field(None, ge=0, le=100)
    website: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    logo_url: Optional[str] = None
    tags: Optional[List[str]] = None
    features: Optional[List[str]] = None
    integrations: Optional[List[str]] = None
    certifications: Optional[List[str]] = None
    client_size: Optional[List[str]] = None
    pricing_model: Optional[PricingModel] = None
    price_range: Optional[str] = None
    status: Optional[VendorStatus] = None
    verification_status: Optional[VerificationStatus] = None
    target_customers: Optional[List[str]] = None
    search_hints_keywords: Optional[List[str]] = None
    compliance_certifications: Optional[List[str]] = None
    integrations_core_support: Optional[List[str]] = None
    digital_banking_partners: Optional[List[str]] = None
    notable_customers: Optional[List[str]] = None
    pricing_notes: Optional[str] = None
    source_url: Optional[str] = None
    confidence: Optional[float] = Field(None, ge=0, le=1)
    notes: Optional[str] = None


class VendorUpdateRequest(CamelModel):
    """Request schema for updating a vendor listing."""

    company_name: Optional[str] = Field(None, min_length=1, max_length=255)
    website: Optional[str] = None
    is_active: Optional[bool] = None
    profile: Optional[VendorProfileUpdate] = None
