"""
FastAPI Main Application
Entry point for the Haystack FI marketplace API.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from .config import get_settings
from .errors import setup_error_handlers
from .middleware import RequestLoggingMiddleware, RequestTimingMiddleware
from .routers import (
    health_router,
    auth_router,
    claims_router,
    vendors_router,
    research_router,
    reviews_router,
    documents_router,
    products_router,
    demos_router,
    notifications_router,
    admin_router,
)
from ..db.models import Base
from ..db.seed import seed_marketplace
from ..db.session import get_engine, get_session_factory

# Configure logging
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Creates tables on startup and seeds the mock marketplace into an empty
    database when SEED_MOCK_DATA is set.
    """
    logger.info("Starting Haystack FI API...")

    settings = get_settings()
    Base.metadata.create_all(bind=get_engine())

    if settings.seed_mock_data:
        SessionLocal = get_session_factory()
        with SessionLocal() as session:
            counts = seed_marketplace(session)
        if counts:
            logger.info(f"Seeded mock marketplace: {counts}")

    logger.info("Haystack FI API started successfully")

    yield

    logger.info("Shutting down Haystack FI API...")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description=settings.description,
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Set up CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    # Add GZip compression
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Add custom middleware
    app.add_middleware(RequestTimingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    # Set up error handlers
    setup_error_handlers(app)

    # Include routers. Claims before vendors: /vendor/claims must not match /vendor/{vendor_id}
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(claims_router)
    app.include_router(vendors_router)
    app.include_router(research_router)
    app.include_router(reviews_router)
    app.include_router(documents_router)
    app.include_router(products_router)
    app.include_router(demos_router)
    app.include_router(notifications_router)
    app.include_router(admin_router)

    @app.get("/")
    async def root():
        """
        Root endpoint.

        Returns:
            API information
        """
        return {
            "name": settings.app_name,
            "version": settings.version,
            "description": settings.description,
            "endpoints": {
                "health": "/health",
                "status": "/status",
                "metrics": "/metrics",
                "docs": "/docs",
                "redoc": "/redoc",
            },
        }

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "haystackfi.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )
