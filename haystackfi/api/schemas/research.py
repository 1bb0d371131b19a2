"""
Vendor research schemas.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import AliasChoices, Field

from ...db.enums import ResearchStatus
from .common import CamelModel


class ResearchRecordResponse(CamelModel):
    """A research run and its (possibly partial) results."""

    id: int
    vendor_id: int
    status: ResearchStatus
    website_url: Optional[str] = None
    website_snapshot: Optional[Dict[str, Any]] = None
    extracted_profile: Optional[Dict[str, Any]] = None
    discovered_logo_url: Optional[str] = None
    deep_research_insights: Optional[Dict[str, Any]] = None
    raw_research_artifacts: Optional[Dict[str, Any]] = None
    error_message: Optional[str] = None
    llm_model: Optional[str] = None
    task_id: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = Field(
        None, validation_alias=AliasChoices("research_metadata", "metadata")
    )
    requested_at: datetime
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
