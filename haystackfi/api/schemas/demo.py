"""
Demo request schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from ...db.enums import DemoStatus
from .common import CamelModel


class DemoRequestCreate(CamelModel):
    """
    Request schema for booking a demo.

    Contact fields default to the caller's profile when omitted.
    """

    vendor_id: int
    timeline: str = Field(..., min_length=1, max_length=100)
    preferred_time: str = Field(..., min_length=1, max_length=100)
    message: Optional[str] = None
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    bank_name: Optional[str] = Field(None, max_length=255)
    title: Optional[str] = Field(None, max_length=255)
    assets_under_management: Optional[str] = Field(None, max_length=100)
    current_provider: Optional[str] = Field(None, max_length=255)

    @field_validator("vendor_id", mode="before")
    @classmethod
    def coerce_vendor_id(cls, v):
        """Vendor ids may arrive as strings from route parameters."""
        if isinstance(v, str) and v.strip().isdigit():
            return int(v)
        return v


class DemoRequestUpdate(CamelModel):
    """Request schema for moving a demo request to a new status."""

    status: DemoStatus
    scheduled_at: Optional[datetime] = None


class DemoRequestResponse(CamelModel):
    """Demo request as seen by the institution and the vendor."""

    id: int
    vendor_id: int
    user_id: Optional[int] = None
    status: DemoStatus
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    bank_name: str
    title: str
    assets_under_management: str
    current_provider: Optional[str] = None
    timeline: str
    preferred_time: str
    message: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
