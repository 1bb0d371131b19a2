"""
Metrics Service
Computes admin marketplace metrics, per-vendor performance and vendor
dashboard analytics from the operational tables.
"""

import logging
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.orm import Session, joinedload, selectinload

from ...db.enums import DemoStatus, INSTITUTION_ROLES, VerificationStatus, VendorStatus
from ...db.models import DemoRequest, Review, User, Vendor

logger = logging.getLogger(__name__)

GROWTH_WINDOW_DAYS = 30
TREND_MONTHS = 6
LEAD_GENERATION_DAYS = 30
TOP_CATEGORY_LIMIT = 5
RECENT_ACTIVITY_LIMIT = 10


def percent_change(current: int, previous: int) -> float:
    """
    Growth of `current` over `previous` as a percentage (one decimal).

    With no previous activity, any current activity counts as 100% growth.
    """
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return round((current - previous) / previous * 100, 1)


def _window_counts(timestamps: Sequence[datetime], now: datetime) -> Dict[str, int]:
    current_start = now - timedelta(days=GROWTH_WINDOW_DAYS)
    previous_start = now - timedelta(days=2 * GROWTH_WINDOW_DAYS)
    current = sum(1 for ts in timestamps if ts is not None and current_start <= ts <= now)
    previous = sum(
        1 for ts in timestamps if ts is not None and previous_start <= ts < current_start
    )
    return {"current": current, "previous": previous}


def _growth(timestamps: Sequence[datetime], now: datetime) -> float:
    counts = _window_counts(timestamps, now)
    return percent_change(counts["current"], counts["previous"])


def _month_starts(now: datetime, months: int) -> List[datetime]:
    """First day of each of the last `months` months, oldest first."""
    starts = []
    year, month = now.year, now.month
    for _ in range(months):
        starts.append(datetime(year, month, 1))
        month -= 1
        if month == 0:
            month = 12
            year -= 1
    return list(reversed(starts))


def _month_key(ts: datetime) -> str:
    return ts.strftime("%Y-%m")


def _conversion_rate(demos: Sequence[DemoRequest]) -> float:
    if not demos:
        return 0.0
    completed = sum(1 for d in demos if d.status == DemoStatus.COMPLETED.value)
    return round(completed / len(demos) * 100, 1)


def _average_rating(reviews: Sequence[Review]) -> float:
    if not reviews:
        return 0.0
    return round(sum(r.rating for r in reviews) / len(reviews), 1)


def _state_of(location: Optional[str]) -> Optional[str]:
    """Extract the state from a "City, ST" location string."""
    if not location:
        return None
    state = location.split(",")[-1].strip()
    return state or None


def _load_vendors(db: Session) -> List[Vendor]:
    return (
        db.query(Vendor)
        .options(
            joinedload(Vendor.profile),
            selectinload(Vendor.reviews),
            selectinload(Vendor.demo_requests),
            selectinload(Vendor.views),
            selectinload(Vendor.documents),
        )
        .all()
    )


def compute_admin_metrics(db: Session, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Marketplace totals, 30-day growth, top categories and recent activity."""
    now = now or datetime.utcnow()

    vendors = _load_vendors(db)
    institutions = db.query(User).filter(User.role.in_(INSTITUTION_ROLES)).all()
    demos = db.query(DemoRequest).all()
    reviews = db.query(Review).all()

    active_vendors = [
        v for v in vendors if v.profile and v.profile.status == VendorStatus.ACTIVE.value
    ]
    pending = [
        v
        for v in vendors
        if v.profile and v.profile.verification_status == VerificationStatus.PENDING.value
    ]

    by_category: Dict[str, List[Vendor]] = defaultdict(list)
    for vendor in vendors:
        category = vendor.profile.category if vendor.profile and vendor.profile.category else None
        if category:
            by_category[category].append(vendor)

    top_categories = sorted(
        (
            {
                "category": category,
                "count": len(members),
                "growth": _growth([v.created_at for v in members], now),
            }
            for category, members in by_category.items()
        ),
        key=lambda c: (-c["count"], c["category"]),
    )[:TOP_CATEGORY_LIMIT]

    vendor_names = {v.id: v.company_name for v in vendors}
    activity = []
    for vendor in vendors:
        activity.append(
            {
                "id": f"vendor-{vendor.id}",
                "type": "vendor_signup",
                "description": f"{vendor.company_name} joined the marketplace",
                "timestamp": vendor.created_at,
                "related_id": str(vendor.id),
            }
        )
    for vendor in pending:
        activity.append(
            {
                "id": f"verification-{vendor.id}",
                "type": "verification_pending",
                "description": f"{vendor.company_name} is awaiting verification",
                "timestamp": vendor.updated_at,
                "related_id": str(vendor.id),
            }
        )
    for demo in demos:
        bank = demo.bank_name or "An institution"
        activity.append(
            {
                "id": f"demo-{demo.id}",
                "type": "demo_request",
                "description": f"{bank} requested a demo from {vendor_names.get(demo.vendor_id, 'a vendor')}",
                "timestamp": demo.created_at,
                "related_id": str(demo.vendor_id),
            }
        )
    for review in reviews:
        activity.append(
            {
                "id": f"review-{review.id}",
                "type": "review_submitted",
                "description": f"New {review.rating}-star review for {vendor_names.get(review.vendor_id, 'a vendor')}",
                "timestamp": review.created_at,
                "related_id": str(review.vendor_id),
            }
        )
    activity.sort(key=lambda a: a["timestamp"], reverse=True)

    return {
        "total_vendors": len(vendors),
        "active_vendors": len(active_vendors),
        "pending_verifications": len(pending),
        "total_banks": len(institutions),
        "total_demo_requests": len(demos),
        "total_reviews": len(reviews),
        "monthly_growth": {
            "vendors": _growth([v.created_at for v in vendors], now),
            "banks": _growth([u.created_at for u in institutions], now),
            "demo_requests": _growth([d.created_at for d in demos], now),
        },
        "top_categories": top_categories,
        "recent_activity": activity[:RECENT_ACTIVITY_LIMIT],
    }


def _vendor_performance(vendor: Vendor, months: List[datetime]) -> Dict[str, Any]:
    demos = list(vendor.demo_requests)
    reviews = list(vendor.reviews)
    views = list(vendor.views)

    trend = {
        _month_key(start): {"month": _month_key(start), "views": 0, "demos": 0, "conversions": 0}
        for start in months
    }
    for view in views:
        bucket = trend.get(_month_key(view.viewed_at))
        if bucket:
            bucket["views"] += 1
    for demo in demos:
        bucket = trend.get(_month_key(demo.created_at))
        if bucket:
            bucket["demos"] += 1
        if demo.completed_at is not None:
            bucket = trend.get(_month_key(demo.completed_at))
            if bucket:
                bucket["conversions"] += 1

    candidates = [vendor.profile.last_activity_at if vendor.profile else None]
    candidates += [d.created_at for d in demos]
    candidates += [r.created_at for r in reviews]
    candidates += [v.viewed_at for v in views]
    candidates = [c for c in candidates if c is not None]

    return {
        "vendor_id": vendor.id,
        "vendor_name": vendor.company_name,
        "profile_views": len(views),
        "demo_requests": len(demos),
        "conversion_rate": _conversion_rate(demos),
        "average_rating": _average_rating(reviews),
        "review_count": len(reviews),
        "documents_downloaded": sum(doc.download_count for doc in vendor.documents),
        "last_activity_at": max(candidates) if candidates else None,
        "monthly_trend": list(trend.values()),
    }


def compute_vendor_performance(db: Session, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """Per-vendor engagement metrics with a six-month trend."""
    now = now or datetime.utcnow()
    months = _month_starts(now, TREND_MONTHS)
    results = [_vendor_performance(vendor, months) for vendor in _load_vendors(db)]
    results.sort(key=lambda r: (-r["demo_requests"], -r["profile_views"], r["vendor_name"]))
    return results


def compute_dashboard_analytics(
    db: Session, vendors: List[Vendor], now: Optional[datetime] = None
) -> Dict[str, Any]:
    """
    Lead and category analytics for a set of vendors (the caller's listings).

    Args:
        db: Database session
        vendors: Vendors the dashboard covers
        now: Reference time (defaults to utcnow)
    """
    now = now or datetime.utcnow()
    demos = [demo for vendor in vendors for demo in vendor.demo_requests]

    # Hours from request to scheduled slot
    lead_times = [
        (d.scheduled_at - d.created_at).total_seconds() / 3600
        for d in demos
        if d.scheduled_at is not None and d.created_at is not None
    ]
    avg_lead_time = round(sum(lead_times) / len(lead_times), 1) if lead_times else 0.0

    leads_by_category: Dict[str, int] = defaultdict(int)
    vendors_by_category: Dict[str, List[Vendor]] = defaultdict(list)
    for vendor in vendors:
        category = (vendor.profile.category if vendor.profile else None) or "Uncategorized"
        vendors_by_category[category].append(vendor)
        leads_by_category[category] += len(vendor.demo_requests)

    top_category = ""
    if leads_by_category:
        top_category = sorted(leads_by_category.items(), key=lambda kv: (-kv[1], kv[0]))[0][0]

    start_day = (now - timedelta(days=LEAD_GENERATION_DAYS - 1)).date()
    daily = {
        (start_day + timedelta(days=i)).isoformat(): {
            "date": (start_day + timedelta(days=i)).isoformat(),
            "leads": 0,
            "demos": 0,
            "conversions": 0,
        }
        for i in range(LEAD_GENERATION_DAYS)
    }
    for demo in demos:
        bucket = daily.get(demo.created_at.date().isoformat())
        if bucket:
            bucket["leads"] += 1
        if demo.scheduled_at is not None:
            bucket = daily.get(demo.scheduled_at.date().isoformat())
            if bucket:
                bucket["demos"] += 1
        if demo.completed_at is not None:
            bucket = daily.get(demo.completed_at.date().isoformat())
            if bucket:
                bucket["conversions"] += 1

    category_performance = [
        {
            "category": category,
            "vendors": len(members),
            "leads": leads_by_category[category],
            "avg_rating": _average_rating([r for v in members for r in v.reviews]),
        }
        for category, members in sorted(vendors_by_category.items())
    ]

    institutions = db.query(User).filter(User.role.in_(INSTITUTION_ROLES)).all()
    banks_by_state: Dict[str, int] = defaultdict(int)
    for user in institutions:
        if user.state:
            banks_by_state[user.state.strip()] += 1

    geo: Dict[str, Dict[str, Any]] = {}
    for vendor in vendors:
        state = _state_of(vendor.profile.location if vendor.profile else None)
        if state is None:
            continue
        entry = geo.setdefault(
            state, {"state": state, "vendors": 0, "banks": banks_by_state.get(state, 0), "activity": 0}
        )
        entry["vendors"] += 1
        entry["activity"] += len(vendor.demo_requests) + len(vendor.views)

    return {
        "overview": {
            "total_leads": len(demos),
            "conversion_rate": _conversion_rate(demos),
            "avg_demo_request_time": avg_lead_time,
            "top_performing_category": top_category,
        },
        "lead_generation": list(daily.values()),
        "category_performance": category_performance,
        "geographic_distribution": sorted(geo.values(), key=lambda g: g["state"]),
    }
