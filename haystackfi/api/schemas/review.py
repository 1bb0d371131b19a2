"""
Review (vendor rating) schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator

from .common import CamelModel


class ReviewResponse(CamelModel):
    """A published vendor review."""

    id: int
    vendor_id: int
    user_id: Optional[int] = None
    reviewer: str
    reviewer_title: Optional[str] = None
    title: str
    rating: int
    content: str
    is_verified: bool
    is_anonymous: bool
    date: datetime = Field(..., validation_alias=AliasChoices("created_at", "date"))
    helpful_count: int
    tags: List[str] = Field(default_factory=list)


class ReviewCreateRequest(CamelModel):
    """Request schema for submitting a review."""

    rating: int = Field(..., ge=1, le=5, description="Star rating (1-5)")
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    is_anonymous: bool = False
    tags: List[str] = Field(default_factory=list)

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Field cannot be blank")
        return v.strip()
