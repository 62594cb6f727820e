"""Package router: public package reads and admin publishing."""

import logging
from typing import Optional

from fastapi import APIRouter
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import AdminUser, DatabaseSession, OptionalUser
from ..core.exceptions import NotFoundError
from ..schemas.auth import CurrentUser
from ..schemas.common import ApiResponse
from ..schemas.package import Package, UpdatePackageStatusRequest
from ..services.package_service import PackageService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/packages", tags=["packages"])


def _convert_package_to_schema(package_model) -> Package:
    """Convert package model to schema."""
    return Package(
        package_id=str(package_model.package_id),
        title=package_model.title,
        description=package_model.description,
        no_of_days=package_model.no_of_days,
        base_price=float(package_model.base_price) if package_model.base_price is not None else None,
        status=package_model.status,
        is_active=package_model.is_active,
        is_template=package_model.is_template,
        created_at=package_model.created_at,
    )


@router.get("/{package_id}", response_model=ApiResponse[Package])
async def get_package(
    package_id: str,
    db: AsyncSession = DatabaseSession,
    user: Optional[CurrentUser] = OptionalUser,
) -> ApiResponse[Package]:
    """
    Get a package.

    Unpublished packages are visible to admins only; everyone else gets 404.
    """
    package = await PackageService(db).get_package_by_id_or_raise(package_id)
    if not package.is_bookable and not (user and user.is_admin):
        raise NotFoundError(resource_type="package", resource_id=package_id)
    return ApiResponse(data=_convert_package_to_schema(package))


@router.patch("/{package_id}/status", response_model=ApiResponse[Package])
async def update_package_status(
    package_id: str,
    request: UpdatePackageStatusRequest,
    db: AsyncSession = DatabaseSession,
    admin: CurrentUser = AdminUser,
) -> ApiResponse[Package]:
    package = await PackageService(db).set_status(package_id, request.status)
    await db.commit()

    logger.info(
        "Package status changed by admin",
        extra={"package_id": package_id, "status": request.status.value, "admin_id": admin.id}
    )
    return ApiResponse(message="Package status updated successfully", data=_convert_package_to_schema(package))
