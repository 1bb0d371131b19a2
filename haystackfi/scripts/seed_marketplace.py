#!/usr/bin/env python3
"""
Marketplace Seeding Script
Creates the database tables and loads the mock marketplace dataset.

Usage:
    python -m haystackfi.scripts.seed_marketplace
    python -m haystackfi.scripts.seed_marketplace --database-url sqlite:///./demo.db --drop
"""

import argparse
import logging
import os
import sys

from sqlalchemy.exc import SQLAlchemyError

from haystackfi.api.config import reset_settings
from haystackfi.db.models import Base
from haystackfi.db.seed import DEMO_PASSWORD, seed_marketplace
from haystackfi.db.session import get_engine, get_session_factory, reset_engine

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def main():
    """Create tables and seed mock data."""
    parser = argparse.ArgumentParser(description="Seed the Haystack FI marketplace database")
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="Database URL (default: DATABASE_URL or sqlite:///./haystackfi.db)",
    )
    parser.add_argument(
        "--drop", action="store_true", help="Drop all tables before creating them"
    )
    parser.add_argument(
        "--schema-only", action="store_true", help="Create tables without loading mock data"
    )

    args = parser.parse_args()

    if args.database_url:
        os.environ["DATABASE_URL"] = args.database_url
        reset_settings()
        reset_engine()

    try:
        engine = get_engine()
        if args.drop:
            logger.info("Dropping existing tables")
            Base.metadata.drop_all(bind=engine)
        Base.metadata.create_all(bind=engine)
        logger.info("Tables created")

        if args.schema_only:
            return

        SessionLocal = get_session_factory()
        with SessionLocal() as session:
            counts = seed_marketplace(session)

        if not counts:
            logger.info("Database already contains data; nothing seeded")
            return

        logger.info("=" * 60)
        logger.info("SEEDING COMPLETE")
        logger.info("=" * 60)
        for name, count in counts.items():
            logger.info(f"{name}: {count}")
        logger.info(f"All seeded accounts use the password {DEMO_PASSWORD!r}")

    except SQLAlchemyError as e:
        logger.error(f"Seeding failed: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
