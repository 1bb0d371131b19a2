"""
Shared schema helpers.
"""

from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base schema serialized with camelCase field names, accepting either form on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    message: str = Field(..., description="Error message")
    error: Optional[dict] = Field(None, description="Error type and details")


class PaginatedResponse(CamelModel, Generic[T]):
    """Generic paginated list."""

    items: List[T]
    total: int
    page: int
    limit: int
    has_more: bool
