"""Traveler administration router."""

import logging
from typing import Optional

from fastapi import APIRouter, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import AdminUser, DatabaseSession
from ..core.exceptions import NotFoundError
from ..schemas.auth import CurrentUser
from ..schemas.common import ApiResponse, PaginatedResponse
from ..schemas.traveler import Traveler
from ..services.package_service import parse_uuid
from ..services.traveler_service import TravelerService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/travelers", tags=["travelers"])


def _convert_traveler_to_schema(traveler_model) -> Traveler:
    """Convert traveler model to schema."""
    return Traveler(
        traveler_id=str(traveler_model.traveler_id),
        email=traveler_model.email,
        name=traveler_model.name,
        contact=traveler_model.contact,
        is_active=traveler_model.is_active,
        created_at=traveler_model.created_at,
        last_login=traveler_model.last_login,
    )


@router.get("", response_model=PaginatedResponse[Traveler])
async def list_travelers(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    is_active: Optional[bool] = Query(None),
    search: Optional[str] = Query(None, max_length=255),
    db: AsyncSession = DatabaseSession,
    admin: CurrentUser = AdminUser,
) -> PaginatedResponse[Traveler]:
    travelers, total = await TravelerService(db).list_travelers(
        page=page, limit=limit, is_active=is_active, search=search
    )
    items = [_convert_traveler_to_schema(t) for t in travelers]
    return PaginatedResponse.build(items, page, limit, total)


@router.patch("/{traveler_id}/activate", response_model=ApiResponse[Traveler])
async def activate_traveler(
    traveler_id: str,
    db: AsyncSession = DatabaseSession,
    admin: CurrentUser = AdminUser,
) -> ApiResponse[Traveler]:
    """Activate a traveler account without confirming a booking. Idempotent."""
    traveler_uuid = parse_uuid(traveler_id)
    if traveler_uuid is None:
        raise NotFoundError(resource_type="traveler", resource_id=traveler_id)

    service = TravelerService(db)
    await service.get_by_id_or_raise(traveler_uuid)
    activated = await service.activate(traveler_uuid)
    await db.commit()

    logger.info(
        "Traveler activation requested by admin",
        extra={"traveler_id": traveler_id, "admin_id": admin.id, "changed": activated}
    )
    traveler = await service.get_by_id_or_raise(traveler_uuid)
    message = "Traveler activated successfully" if activated else "Traveler is already active"
    return ApiResponse(message=message, data=_convert_traveler_to_schema(traveler))
