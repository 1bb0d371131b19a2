"""
Vendor Service
Search, access checks and profile maintenance for vendor listings.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload, selectinload

from ...db.enums import UserRole
from ...db.models import Review, User, Vendor, VendorProfile, VendorResearchRecord
from ..errors import PermissionDeniedError, ResourceNotFoundError

logger = logging.getLogger(__name__)

SORT_OPTIONS = ("compatibility", "rating", "name", "recent")

# Profile columns a research run may fill in
RESEARCH_MERGE_FIELDS = (
    "summary",
    "detailed_description",
    "category",
    "subcategories",
    "location",
    "size",
    "founded",
    "employees",
    "website",
    "phone",
    "email",
    "logo_url",
    "tags",
    "features",
    "integrations",
    "certifications",
    "client_size",
    "pricing_model",
    "price_range",
    "target_customers",
    "search_hints_keywords",
    "compliance_certifications",
    "integrations_core_support",
    "digital_banking_partners",
    "notable_customers",
    "pricing_notes",
    "source_url",
    "confidence",
)


def get_vendor_or_404(db: Session, vendor_id: int) -> Vendor:
    vendor = (
        db.query(Vendor)
        .options(joinedload(Vendor.profile), selectinload(Vendor.reviews))
        .filter(Vendor.id == vendor_id)
        .first()
    )
    if vendor is None:
        raise ResourceNotFoundError("Vendor", vendor_id)
    return vendor


def is_admin(user: Optional[User]) -> bool:
    return user is not None and user.role == UserRole.ADMIN.value


def can_manage_vendor(user: Optional[User], vendor: Vendor) -> bool:
    """Admins manage every listing; vendor users manage the listings they own."""
    if user is None:
        return False
    if is_admin(user):
        return True
    return user.role == UserRole.VENDOR.value and vendor.owner_id == user.id


def ensure_can_manage_vendor(user: User, vendor: Vendor) -> None:
    if not can_manage_vendor(user, vendor):
        raise PermissionDeniedError("You do not have permission to manage this vendor")


def _normalize_tags(tags: Optional[Iterable[str]]) -> List[str]:
    normalized = []
    for raw in tags or []:
        for part in raw.split(","):
            part = part.strip().lower()
            if part:
                normalized.append(part)
    return normalized


def _sort_key(sort_by: str):
    if sort_by == "rating":
        return lambda v: (-(v.profile.rating or 0.0) if v.profile else 0.0, v.company_name.lower())
    if sort_by == "name":
        return lambda v: v.company_name.lower()
    if sort_by == "recent":
        return lambda v: -v.created_at.timestamp()
    return lambda v: (
        -(v.profile.compatibility or 0.0) if v.profile else 0.0,
        v.company_name.lower(),
    )


def search_vendors(
    db: Session,
    q: Optional[str] = None,
    category: Optional[str] = None,
    size: Optional[str] = None,
    status: Optional[str] = None,
    location: Optional[str] = None,
    tags: Optional[List[str]] = None,
    min_rating: Optional[float] = None,
    sort_by: str = "compatibility",
    page: int = 1,
    limit: int = 20,
) -> Dict[str, Any]:
    """
    Search active vendor listings.

    Scalar filters run in SQL; tag matching and ordering run over the
    filtered rows. Returns a dict shaped like VendorSearchResponse.
    """
    query = (
        db.query(Vendor)
        .outerjoin(VendorProfile, VendorProfile.vendor_id == Vendor.id)
        .options(joinedload(Vendor.profile), selectinload(Vendor.reviews))
        .filter(Vendor.is_active.is_(True))
    )

    if q and q.strip():
        pattern = f"%{q.strip().lower()}%"
        query = query.filter(
            or_(
                func.lower(Vendor.company_name).like(pattern),
                func.lower(VendorProfile.summary).like(pattern),
                func.lower(VendorProfile.detailed_description).like(pattern),
                func.lower(VendorProfile.category).like(pattern),
            )
        )
    if category:
        query = query.filter(func.lower(VendorProfile.category) == category.lower())
    if size:
        query = query.filter(VendorProfile.size == size)
    if status:
        query = query.filter(VendorProfile.status == status)
    if location:
        query = query.filter(func.lower(VendorProfile.location).like(f"%{location.lower()}%"))
    if min_rating is not None:
        query = query.filter(VendorProfile.rating >= min_rating)

    vendors = query.all()

    wanted_tags = _normalize_tags(tags)
    if wanted_tags:
        vendors = [
            v
            for v in vendors
            if v.profile and set(wanted_tags) & {t.lower() for t in (v.profile.tags or [])}
        ]

    if sort_by not in SORT_OPTIONS:
        sort_by = "compatibility"
    vendors.sort(key=_sort_key(sort_by))

    total = len(vendors)
    total_pages = (total + limit - 1) // limit if total else 0
    start = (page - 1) * limit
    page_items = vendors[start:start + limit]

    return {
        "vendors": page_items,
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": total_pages,
        "has_more": start + len(page_items) < total,
    }


def recompute_vendor_rating(db: Session, vendor: Vendor) -> Optional[float]:
    """Set the profile rating to the mean review rating (one decimal)."""
    average = db.query(func.avg(Review.rating)).filter(Review.vendor_id == vendor.id).scalar()
    rating = round(float(average), 1) if average is not None else None
    if vendor.profile is not None:
        vendor.profile.rating = rating
        vendor.profile.last_activity_at = datetime.utcnow()
    return rating


def touch_vendor_activity(vendor: Vendor) -> None:
    if vendor.profile is not None:
        vendor.profile.last_activity_at = datetime.utcnow()


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def apply_research_to_vendor(vendor: Vendor, record: VendorResearchRecord) -> List[str]:
    """
    Merge a completed research run into the vendor profile.

    Only empty profile fields are filled; curated values are never
    overwritten. Returns the names of the fields that changed.
    """
    if vendor.profile is None:
        vendor.profile = VendorProfile()

    profile = vendor.profile
    extracted = dict(record.extracted_profile or {})
    if record.discovered_logo_url and not extracted.get("logo_url"):
        extracted["logo_url"] = record.discovered_logo_url

    updated = []
    for field in RESEARCH_MERGE_FIELDS:
        value = extracted.get(field)
        if _is_empty(value):
            continue
        if _is_empty(getattr(profile, field)):
            setattr(profile, field, value)
            updated.append(field)

    if not vendor.website and extracted.get("website"):
        vendor.website = extracted["website"]
        updated.append("website")

    if updated:
        profile.last_verified = datetime.utcnow()
        touch_vendor_activity(vendor)

    logger.info(
        f"Applied research {record.id} to vendor {vendor.id}: {len(updated)} fields updated",
        extra={"vendor_id": vendor.id, "research_id": record.id, "fields": updated},
    )
    return updated
