"""
API Routers
FastAPI route handlers for different endpoints.
"""

from .admin import router as admin_router
from .auth import router as auth_router
from .claims import router as claims_router
from .demos import router as demos_router
from .documents import router as documents_router
from .health import router as health_router
from .notifications import router as notifications_router
from .products import router as products_router
from .research import router as research_router
from .reviews import router as reviews_router
from .vendors import router as vendors_router

__all__ = [
    "health_router",
    "auth_router",
    "claims_router",
    "vendors_router",
    "research_router",
    "reviews_router",
    "documents_router",
    "products_router",
    "demos_router",
    "notifications_router",
    "admin_router",
]
