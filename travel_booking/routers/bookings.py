"""Booking router: public submission and admin/traveler booking operations."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import AdminUser, CurrentUserDep, DatabaseSession, Workflow
from ..models.booking import BookingStatus, PaymentStatus
from ..schemas.auth import CurrentUser
from ..schemas.booking import (
    BookingDetail,
    BookingStats,
    SubmitBookingRequest,
    SubmitBookingResult,
    UpdateBookingRequest,
    UpdateBookingStatusRequest,
)
from ..schemas.common import ApiResponse, PaginatedResponse
from ..services.booking_service import BookingService
from ..services.booking_workflow import BookingWorkflow
from ..services.package_service import parse_uuid

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])


def _convert_bookings_to_schema(bookings) -> List[BookingDetail]:
    return [BookingDetail.from_booking(booking) for booking in bookings]


@router.post(
    "/submit",
    response_model=ApiResponse[SubmitBookingResult],
    status_code=201,
)
async def submit_booking(
    request: SubmitBookingRequest,
    workflow: BookingWorkflow = Workflow,
) -> ApiResponse[SubmitBookingResult]:
    """
    Submit a booking request without an account.

    A traveler account is created for unknown emails and stays inactive
    until an admin confirms the booking.
    """
    result = await workflow.submit(request)
    return ApiResponse(
        message="Booking submitted successfully",
        data=SubmitBookingResult(booking=result.booking, is_new_account=result.is_new_account),
    )


@router.get("/stats", response_model=ApiResponse[BookingStats])
async def get_booking_stats(
    db: AsyncSession = DatabaseSession,
    admin: CurrentUser = AdminUser,
) -> ApiResponse[BookingStats]:
    stats = await BookingService(db).get_stats()
    return ApiResponse(data=stats)


@router.get("/traveler/{traveler_id}", response_model=ApiResponse[List[BookingDetail]])
async def get_traveler_bookings(
    traveler_id: str,
    db: AsyncSession = DatabaseSession,
    user: CurrentUser = CurrentUserDep,
) -> ApiResponse[List[BookingDetail]]:
    """List every booking of one traveler; travelers may only list their own."""
    traveler_uuid = parse_uuid(traveler_id)
    BookingWorkflow.ensure_can_view(traveler_uuid or traveler_id, user)
    if traveler_uuid is None:
        return ApiResponse(data=[])

    bookings = await BookingService(db).list_bookings_for_traveler(traveler_uuid)
    return ApiResponse(data=_convert_bookings_to_schema(bookings))


@router.get("", response_model=PaginatedResponse[BookingDetail])
async def list_bookings(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[BookingStatus] = Query(None),
    payment_status: Optional[PaymentStatus] = Query(None),
    search: Optional[str] = Query(None, max_length=255),
    db: AsyncSession = DatabaseSession,
    admin: CurrentUser = AdminUser,
) -> PaginatedResponse[BookingDetail]:
    bookings, total = await BookingService(db).list_bookings(
        page=page,
        limit=limit,
        status=status,
        payment_status=payment_status,
        search=search,
    )
    return PaginatedResponse.build(_convert_bookings_to_schema(bookings), page, limit, total)


@router.get("/{booking_id}", response_model=ApiResponse[BookingDetail])
async def get_booking(
    booking_id: str,
    user: CurrentUser = CurrentUserDep,
    workflow: BookingWorkflow = Workflow,
) -> ApiResponse[BookingDetail]:
    booking = await workflow.get(booking_id, user)
    return ApiResponse(data=booking)


@router.put("/{booking_id}", response_model=ApiResponse[BookingDetail])
async def update_booking(
    booking_id: str,
    request: UpdateBookingRequest,
    admin: CurrentUser = AdminUser,
    workflow: BookingWorkflow = Workflow,
) -> ApiResponse[BookingDetail]:
    """Update mutable booking fields; only fields present in the body change."""
    booking = await workflow.update(booking_id, request.model_dump(exclude_unset=True))
    return ApiResponse(message="Booking updated successfully", data=booking)


@router.post("/{booking_id}/confirm", response_model=ApiResponse[BookingDetail])
async def confirm_booking(
    booking_id: str,
    admin: CurrentUser = AdminUser,
    workflow: BookingWorkflow = Workflow,
) -> ApiResponse[BookingDetail]:
    """
    Confirm a temporary booking.

    Activates the traveler account and emails the traveler. Email failure
    does not affect the response.
    """
    booking = await workflow.confirm(booking_id, admin.id)
    return ApiResponse(message="Booking confirmed successfully", data=booking)


@router.post("/{booking_id}/cancel", response_model=ApiResponse[BookingDetail])
async def cancel_booking(
    booking_id: str,
    user: CurrentUser = CurrentUserDep,
    workflow: BookingWorkflow = Workflow,
) -> ApiResponse[BookingDetail]:
    booking = await workflow.cancel(booking_id, user)
    return ApiResponse(message="Booking cancelled successfully", data=booking)


@router.patch("/{booking_id}/status", response_model=ApiResponse[BookingDetail])
async def update_booking_status(
    booking_id: str,
    request: UpdateBookingStatusRequest,
    admin: CurrentUser = AdminUser,
    workflow: BookingWorkflow = Workflow,
) -> ApiResponse[BookingDetail]:
    """Administrative status change. Use the confirm endpoint to confirm."""
    booking = await workflow.update_status(booking_id, request.status)

    logger.info(
        "Booking status updated via API",
        extra={"booking_id": booking_id, "status": request.status.value, "admin_id": admin.id}
    )
    return ApiResponse(message="Booking status updated successfully", data=booking)
