"""
Product schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from ...db.enums import ProductStatus
from .common import CamelModel


class ProductResponse(CamelModel):
    """Product offered by a vendor."""

    id: int
    vendor_id: int
    name: str
    slug: str
    category: Optional[str] = None
    subcategories: List[str] = Field(default_factory=list)
    description: str
    long_description: str
    version: str
    rating: float
    review_count: int
    logo_url: Optional[str] = None
    integrations: List[str] = Field(default_factory=list)
    pricing_model: Optional[str] = None
    price_range: Optional[str] = None
    supported_client_sizes: List[str] = Field(default_factory=list)
    certifications: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    status: ProductStatus
    release_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
