"""
Database ORM Models
SQLAlchemy ORM models and session helpers.
"""

from .models import (
    Base,
    ComplianceDocument,
    DemoRequest,
    DocumentAccessRequest,
    Notification,
    Product,
    Review,
    User,
    Vendor,
    VendorClaim,
    VendorProfile,
    VendorResearchRecord,
    VendorView,
)
from .session import get_engine, get_session_factory, reset_engine

__all__ = [
    "Base",
    "ComplianceDocument",
    "DemoRequest",
    "DocumentAccessRequest",
    "Notification",
    "Product",
    "Review",
    "User",
    "Vendor",
    "VendorClaim",
    "VendorProfile",
    "VendorResearchRecord",
    "VendorView",
    "get_engine",
    "get_session_factory",
    "reset_engine",
]
