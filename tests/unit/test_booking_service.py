"""Unit tests for booking service."""

from decimal import Decimal
from uuid import uuid4

import pytest
import pytest_asyncio

from travel_booking.core.exceptions import InvalidStatusTransitionError, NotFoundError, ValidationError
from travel_booking.models import BookingStatus, PaymentStatus
from travel_booking.services.booking_service import BookingService


@pytest.fixture
def booking_service(test_session):
    return BookingService(test_session)


@pytest_asyncio.fixture
async def booking(booking_service, published_package, active_traveler, test_session):
    booking = await booking_service.create_booking(
        package_id=published_package.package_id,
        traveler_id=active_traveler.traveler_id,
        no_of_travelers=2,
    )
    await test_session.commit()
    return booking


@pytest.mark.asyncio
async def test_create_booking_defaults(booking, published_package, active_traveler):
    """New bookings start temporary and pending, with relations loaded."""
    assert booking.status == BookingStatus.TEMPORARY.value
    assert booking.payment_status == PaymentStatus.PENDING.value
    assert booking.total_amount is None
    assert booking.confirmation_date is None
    assert booking.confirmed_by is None
    assert booking.package.title == published_package.title
    assert booking.traveler.email == active_traveler.email


@pytest.mark.asyncio
async def test_create_booking_with_unknown_agent(booking_service, published_package, active_traveler):
    with pytest.raises(ValidationError) as exc_info:
        await booking_service.create_booking(
            package_id=published_package.package_id,
            traveler_id=active_traveler.traveler_id,
            agent_id=str(uuid4()),
        )
    assert exc_info.value.errors[0]["field"] == "agent_id"


@pytest.mark.asyncio
async def test_get_missing_booking(booking_service):
    with pytest.raises(NotFoundError):
        await booking_service.get_booking_by_id_or_raise(uuid4())


@pytest.mark.asyncio
async def test_mark_confirmed_only_once(booking_service, booking, admin):
    """The conditional update affects a row only while the booking is temporary."""
    assert await booking_service.mark_confirmed(booking.booking_id, admin.admin_id) is True
    assert await booking_service.mark_confirmed(booking.booking_id, admin.admin_id) is False

    confirmed = await booking_service.get_booking_by_id_or_raise(booking.booking_id)
    assert confirmed.status == BookingStatus.CONFIRMED.value
    assert confirmed.confirmed_by == admin.admin_id
    assert confirmed.confirmation_date is not None
    assert confirmed.confirmed_by_admin.name == admin.name


@pytest.mark.asyncio
async def test_cancel_twice_is_rejected(booking_service, booking):
    cancelled = await booking_service.cancel_booking(booking.booking_id)
    assert cancelled.status == BookingStatus.CANCELLED.value

    with pytest.raises(InvalidStatusTransitionError):
        await booking_service.cancel_booking(booking.booking_id)


@pytest.mark.asyncio
async def test_status_back_to_temporary_clears_confirmation(booking_service, booking, admin):
    await booking_service.mark_confirmed(booking.booking_id, admin.admin_id)

    reverted = await booking_service.update_status(booking.booking_id, BookingStatus.TEMPORARY)

    assert reverted.status == BookingStatus.TEMPORARY.value
    assert reverted.confirmation_date is None
    assert reverted.confirmed_by is None


@pytest.mark.asyncio
async def test_status_same_value_is_noop(booking_service, booking):
    unchanged = await booking_service.update_status(booking.booking_id, BookingStatus.TEMPORARY)
    assert unchanged.status == BookingStatus.TEMPORARY.value


@pytest.mark.asyncio
async def test_update_booking_ignores_owner_fields(booking_service, booking, active_traveler):
    updated = await booking_service.update_booking(
        booking.booking_id,
        {
            "total_amount": 250000,
            "payment_status": "partial",
            "admin_notes": "Deposit received",
            "traveler_id": str(uuid4()),
            "status": "completed",
        },
    )

    assert updated.total_amount == Decimal("250000")
    assert updated.payment_status == PaymentStatus.PARTIAL.value
    assert updated.admin_notes == "Deposit received"
    assert updated.traveler_id == active_traveler.traveler_id
    assert updated.status == BookingStatus.TEMPORARY.value


@pytest.mark.asyncio
async def test_stats(booking_service, booking, published_package, active_traveler, admin, test_session):
    second = await booking_service.create_booking(
        package_id=published_package.package_id,
        traveler_id=active_traveler.traveler_id,
        total_amount=Decimal("1000.00"),
    )
    await booking_service.mark_confirmed(second.booking_id, admin.admin_id)
    await booking_service.update_booking(second.booking_id, {"payment_status": "paid"})
    await test_session.commit()

    stats = await booking_service.get_stats()

    assert stats.total_bookings == 2
    assert stats.temporary_bookings == 1
    assert stats.confirmed_bookings == 1
    assert stats.total_revenue == 1000.0
    assert stats.paid_revenue == 1000.0


@pytest.mark.asyncio
async def test_list_bookings_search_and_filter(booking_service, booking, published_package):
    items, total = await booking_service.list_bookings(search="hill country")
    assert total == 1
    assert items[0].booking_id == booking.booking_id

    items, total = await booking_service.list_bookings(status=BookingStatus.CONFIRMED)
    assert total == 0
    assert items == []
