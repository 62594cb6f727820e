#!/usr/bin/env python3
"""Setup script for the travel booking API: migrate and seed."""

import asyncio
import logging
import os
from decimal import Decimal
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import func, select

from travel_booking.core.config import settings
from travel_booking.core.database import Database
from travel_booking.models import Admin, Package, PackageStatus
from travel_booking.services.admin_service import AdminService
from travel_booking.services.package_service import PackageService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DB_DIR = Path(__file__).resolve().parent.parent / "db"


def migrate_database():
    """Run Alembic migrations up to head."""
    alembic_cfg = Config(str(DB_DIR / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(DB_DIR / "alembic"))

    logger.info("Running database migrations...")
    command.upgrade(alembic_cfg, "head")
    logger.info("Database migrations completed")


async def create_sample_data(database: Database):
    """Create the first admin and a published package if the database is empty."""
    admin_email = os.environ.get("SEED_ADMIN_EMAIL", "admin@trustyou-go.com")
    admin_password = os.environ.get("SEED_ADMIN_PASSWORD")
    if not admin_password:
        raise SystemExit("SEED_ADMIN_PASSWORD must be set to create the initial admin")

    async with database.transaction() as db:
        existing = (await db.execute(select(func.count()).select_from(Admin))).scalar_one()
        if existing:
            logger.info("Admin accounts already exist, skipping sample data")
            return

        admin = await AdminService(db).create(
            email=admin_email, password=admin_password, name="Administrator"
        )

        packages = (await db.execute(select(func.count()).select_from(Package))).scalar_one()
        if not packages:
            await PackageService(db).create_package(
                title="Cultural Triangle Explorer",
                no_of_days=5,
                description="Ancient cities, cave temples and rock fortresses",
                base_price=Decimal("85000.00"),
                status=PackageStatus.PUBLISHED,
                created_by=admin.admin_id,
            )

    logger.info("Sample data created", extra={"admin_email": admin_email})


async def seed():
    database = Database(settings.database_url)
    try:
        await create_sample_data(database)
    finally:
        await database.dispose()


def main():
    """Main setup function."""
    logger.info("Starting travel booking API setup...")

    migrate_database()
    asyncio.run(seed())

    logger.info("Setup completed successfully!")
    logger.info("You can now start the API server with: uvicorn travel_booking.main:app --reload")


if __name__ == "__main__":
    main()
