"""Concurrency tests for booking confirmation."""

from types import SimpleNamespace
from uuid import UUID

import pytest

from travel_booking.core.exceptions import BookingAlreadyConfirmedError
from travel_booking.models import BookingStatus
from travel_booking.schemas.booking import SubmitBookingRequest
from travel_booking.services.booking_service import BookingService
from travel_booking.services.booking_workflow import BookingWorkflow


async def _submit(workflow, package_id):
    return await workflow.submit(
        SubmitBookingRequest(
            package_id=str(package_id),
            traveler={"name": "Race Tester", "email": "race@example.com", "contact": "1"},
        )
    )


@pytest.mark.asyncio
@pytest.mark.concurrency
async def test_confirm_loses_race_after_stale_read(test_session, notifier, published_package, admin):
    """
    Two admins read the booking as temporary; the second write must fail.

    The competing request is simulated by confirming directly between the
    workflow's read and its conditional update.
    """
    workflow = BookingWorkflow(test_session, notifier)
    submitted = await _submit(workflow, published_package.package_id)
    booking_id = submitted.booking.booking_id

    real_read = workflow.bookings.get_booking_by_id_or_raise
    competitor = BookingService(test_session)

    async def read_then_lose_race(booking_uuid):
        booking = await real_read(booking_uuid)
        snapshot = SimpleNamespace(status=booking.status, traveler=booking.traveler)
        assert await competitor.mark_confirmed(booking_uuid, admin.admin_id) is True
        return snapshot

    workflow.bookings.get_booking_by_id_or_raise = read_then_lose_race

    with pytest.raises(BookingAlreadyConfirmedError):
        await workflow.confirm(booking_id, admin.admin_id)

    assert notifier.sent == []


@pytest.mark.asyncio
@pytest.mark.concurrency
async def test_only_one_conditional_confirm_succeeds(test_session, notifier, published_package, admin):
    workflow = BookingWorkflow(test_session, notifier)
    submitted = await _submit(workflow, published_package.package_id)
    service = BookingService(test_session)
    booking_id = UUID(submitted.booking.booking_id)

    results = [await service.mark_confirmed(booking_id, admin.admin_id) for _ in range(5)]

    assert results.count(True) == 1
    stored = await service.get_booking_by_id_or_raise(booking_id)
    assert stored.status == BookingStatus.CONFIRMED.value
