"""Package service: catalog lookups used by the booking workflow."""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError, PackageNotBookableError
from ..models.package import Package, PackageStatus

logger = logging.getLogger(__name__)


def parse_uuid(value: str | UUID) -> UUID | None:
    """Return the UUID for a path or body value, or None when malformed."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


class PackageService:
    """Service for package-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_package(
        self,
        title: str,
        no_of_days: int,
        description: Optional[str] = None,
        base_price: Optional[Decimal] = None,
        status: PackageStatus = PackageStatus.DRAFT,
        created_by: Optional[UUID] = None,
    ) -> Package:
        """Create a package; used by seeding and tests."""
        package = Package(
            title=title,
            no_of_days=no_of_days,
            description=description,
            base_price=base_price,
            status=status.value,
            created_by=created_by,
        )
        self.db.add(package)
        await self.db.flush()

        logger.info(
            "Package created",
            extra={"package_id": str(package.package_id), "title": title, "status": package.status}
        )
        return package

    async def get_package_by_id(self, package_id: str | UUID) -> Package | None:
        """Get package by ID; malformed IDs match nothing."""
        package_uuid = parse_uuid(package_id)
        if package_uuid is None:
            return None
        stmt = (
            select(Package)
            .where(Package.package_id == package_uuid)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_package_by_id_or_raise(self, package_id: str | UUID) -> Package:
        """Get package by ID or raise NotFoundError."""
        package = await self.get_package_by_id(package_id)
        if not package:
            logger.warning("Package not found", extra={"package_id": str(package_id)})
            raise NotFoundError(resource_type="package", resource_id=str(package_id))
        return package

    async def get_bookable_package(self, package_id: str | UUID) -> Package:
        """
        Get a package that can be booked.

        Raises:
            NotFoundError: If the package does not exist
            PackageNotBookableError: If the package is not published
        """
        package = await self.get_package_by_id_or_raise(package_id)
        if not package.is_bookable:
            logger.warning(
                "Package is not bookable",
                extra={"package_id": str(package.package_id), "status": package.status}
            )
            raise PackageNotBookableError()
        return package

    async def set_status(self, package_id: str | UUID, status: PackageStatus) -> Package:
        """Publish or unpublish a package."""
        package = await self.get_package_by_id_or_raise(package_id)
        package.status = status.value
        self.db.add(package)
        await self.db.flush()
        await self.db.refresh(package)

        logger.info(
            "Package status updated",
            extra={"package_id": str(package.package_id), "status": package.status}
        )
        return package
