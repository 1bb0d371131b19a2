"""
Analytics read models for the admin and vendor dashboards.
"""

from datetime import datetime
from typing import List, Optional

from .common import CamelModel


class MonthlyGrowth(CamelModel):
    vendors: float
    banks: float
    demo_requests: float


class CategoryCount(CamelModel):
    category: str
    count: int
    growth: float


class ActivityItem(CamelModel):
    id: str
    type: str  # vendor_signup, demo_request, review_submitted, verification_pending
    description: str
    timestamp: datetime
    related_id: Optional[str] = None


class AdminMetrics(CamelModel):
    total_vendors: int
    active_vendors: int
    pending_verifications: int
    total_banks: int
    total_demo_requests: int
    total_reviews: int
    monthly_growth: MonthlyGrowth
    top_categories: List[CategoryCount]
    recent_activity: List[ActivityItem]


class MonthlyTrendPoint(CamelModel):
    month: str
    views: int
    demos: int
    conversions: int


class VendorPerformanceMetrics(CamelModel):
    vendor_id: int
    vendor_name: str
    profile_views: int
    demo_requests: int
    conversion_rate: float
    average_rating: float
    review_count: int
    documents_downloaded: int
    last_activity_at: Optional[datetime] = None
    monthly_trend: List[MonthlyTrendPoint]


class DashboardOverview(CamelModel):
    total_leads: int
    conversion_rate: float
    avg_demo_request_time: float
    top_performing_category: str


class LeadGenerationPoint(CamelModel):
    date: str
    leads: int
    demos: int
    conversions: int


class CategoryPerformance(CamelModel):
    category: str
    vendors: int
    leads: int
    avg_rating: float


class GeographicDistribution(CamelModel):
    state: str
    vendors: int
    banks: int
    activity: int


class DashboardAnalytics(CamelModel):
    overview: DashboardOverview
    lead_generation: List[LeadGenerationPoint]
    category_performance: List[CategoryPerformance]
    geographic_distribution: List[GeographicDistribution]
