"""Unit tests for the booking workflow."""

from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from sqlalchemy import func, select

from travel_booking.core.exceptions import (
    AuthorizationError,
    BookingAlreadyConfirmedError,
    InvalidStatusTransitionError,
    NotFoundError,
    PackageNotBookableError,
)
from travel_booking.core.security import verify_password
from travel_booking.models import Booking, BookingStatus, Traveler
from travel_booking.schemas.auth import CurrentUser, Role
from travel_booking.schemas.booking import SubmitBookingRequest
from travel_booking.services.booking_workflow import BookingWorkflow
from travel_booking.services.traveler_service import TravelerService


@pytest.fixture
def workflow(test_session, notifier):
    return BookingWorkflow(test_session, notifier)


def _submission(package_id, email="asha@example.com", **overrides) -> SubmitBookingRequest:
    payload = {
        "package_id": str(package_id),
        "traveler": {"name": "Asha Perera", "email": email, "contact": "0711234567"},
    }
    payload.update(overrides)
    return SubmitBookingRequest(**payload)


@pytest_asyncio.fixture
async def submitted(workflow, published_package):
    return await workflow.submit(_submission(published_package.package_id, no_of_travelers=2))


@pytest.fixture
def admin_user(admin):
    return CurrentUser(id=str(admin.admin_id), email=admin.email, name=admin.name, role=Role.ADMIN)


async def _count(session, model) -> int:
    return (await session.execute(select(func.count()).select_from(model))).scalar_one()


@pytest.mark.asyncio
async def test_submit_new_traveler(submitted, test_session):
    """Submission with a new email provisions an inactive traveler."""
    assert submitted.is_new_account is True
    assert submitted.generated_password is not None
    assert submitted.booking.status == BookingStatus.TEMPORARY
    assert submitted.booking.payment_status.value == "pending"
    assert submitted.booking.no_of_travelers == 2
    assert submitted.booking.package_title == "Hill Country Escape"
    assert submitted.booking.package_days == 5
    assert submitted.booking.traveler_email == "asha@example.com"

    traveler = await TravelerService(test_session).get_by_email("asha@example.com")
    assert traveler.is_active is False


@pytest.mark.asyncio
async def test_submit_existing_traveler_case_insensitive(workflow, published_package, active_traveler, test_session):
    result = await workflow.submit(
        _submission(published_package.package_id, email="Returning@Example.COM")
    )

    assert result.is_new_account is False
    assert result.generated_password is None
    assert result.booking.traveler_id == str(active_traveler.traveler_id)
    assert await _count(test_session, Traveler) == 1


@pytest.mark.asyncio
async def test_submit_draft_package_creates_nothing(workflow, draft_package, test_session):
    with pytest.raises(PackageNotBookableError):
        await workflow.submit(_submission(draft_package.package_id))

    assert await _count(test_session, Booking) == 0
    assert await _count(test_session, Traveler) == 0


@pytest.mark.asyncio
async def test_submit_unknown_package(workflow, admin):
    with pytest.raises(NotFoundError):
        await workflow.submit(_submission(uuid4()))


@pytest.mark.asyncio
async def test_confirm_activates_and_notifies(workflow, submitted, admin, notifier, test_session):
    """Confirmation stamps the booking, activates the traveler and emails credentials."""
    detail = await workflow.confirm(submitted.booking.booking_id, admin.admin_id)

    assert detail.status == BookingStatus.CONFIRMED
    assert detail.confirmation_date is not None
    assert detail.confirmed_by == str(admin.admin_id)
    assert detail.confirmed_by_name == admin.name

    traveler = await TravelerService(test_session).get_by_email("asha@example.com")
    assert traveler.is_active is True

    assert len(notifier.sent) == 1
    sent_booking, sent_to, sent_password = notifier.sent[0]
    assert sent_booking.booking_id == submitted.booking.booking_id
    assert sent_to == "asha@example.com"
    # A fresh password replaces the discarded submission password
    assert sent_password is not None
    assert verify_password(sent_password, traveler.password_hash)
    assert not verify_password(submitted.generated_password, traveler.password_hash)


@pytest.mark.asyncio
async def test_confirm_for_active_traveler_sends_no_credentials(
    workflow, published_package, active_traveler, admin, notifier
):
    result = await workflow.submit(
        _submission(published_package.package_id, email=active_traveler.email)
    )

    await workflow.confirm(result.booking.booking_id, admin.admin_id)

    assert notifier.sent[0][2] is None


@pytest.mark.asyncio
async def test_confirm_survives_notifier_failure(workflow, submitted, admin, notifier, test_session):
    """Email failure never rolls back the confirmation or the activation."""
    notifier.fail = True

    detail = await workflow.confirm(submitted.booking.booking_id, admin.admin_id)

    assert detail.status == BookingStatus.CONFIRMED
    stored = await workflow.bookings.get_booking_by_id_or_raise(UUID(detail.booking_id))
    assert stored.status == BookingStatus.CONFIRMED.value
    assert stored.traveler.is_active is True
    # Undelivered credentials are not counted as issued
    assert stored.traveler.credentials_issued_at is None


@pytest.mark.asyncio
async def test_confirm_twice(workflow, submitted, admin, notifier):
    await workflow.confirm(submitted.booking.booking_id, admin.admin_id)

    with pytest.raises(BookingAlreadyConfirmedError):
        await workflow.confirm(submitted.booking.booking_id, admin.admin_id)

    assert len(notifier.sent) == 1


@pytest.mark.asyncio
async def test_confirm_cancelled_booking(workflow, submitted, admin, admin_user):
    await workflow.cancel(submitted.booking.booking_id, admin_user)

    with pytest.raises(InvalidStatusTransitionError):
        await workflow.confirm(submitted.booking.booking_id, admin.admin_id)


@pytest.mark.asyncio
async def test_confirm_malformed_id(workflow, admin):
    with pytest.raises(NotFoundError):
        await workflow.confirm("not-a-uuid", admin.admin_id)


@pytest.mark.asyncio
async def test_traveler_cancels_own_booking(workflow, submitted):
    owner = CurrentUser(
        id=submitted.booking.traveler_id, email="asha@example.com", role=Role.TRAVELER
    )

    detail = await workflow.cancel(submitted.booking.booking_id, owner)

    assert detail.status == BookingStatus.CANCELLED


@pytest.mark.asyncio
async def test_traveler_cannot_cancel_other_booking(workflow, submitted):
    stranger = CurrentUser(id=str(uuid4()), email="other@example.com", role=Role.TRAVELER)

    with pytest.raises(AuthorizationError):
        await workflow.cancel(submitted.booking.booking_id, stranger)


@pytest.mark.asyncio
async def test_update_status_has_no_side_effects(workflow, submitted, admin, notifier, test_session):
    await workflow.confirm(submitted.booking.booking_id, admin.admin_id)
    notifier.sent.clear()

    detail = await workflow.update_status(submitted.booking.booking_id, BookingStatus.IN_PROGRESS)

    assert detail.status == BookingStatus.IN_PROGRESS
    assert detail.confirmation_date is not None
    assert notifier.sent == []


@pytest.mark.asyncio
async def test_confirm_after_admin_activation_issues_credentials(workflow, submitted, admin, notifier, test_session):
    """An admin activating the account first must not strand the traveler without a password."""
    service = TravelerService(test_session)
    traveler_id = UUID(submitted.booking.traveler_id)
    assert await service.activate(traveler_id) is True
    await test_session.commit()

    await workflow.confirm(submitted.booking.booking_id, admin.admin_id)

    password = notifier.sent[0][2]
    assert password is not None
    traveler = await service.get_by_id(traveler_id)
    assert verify_password(password, traveler.password_hash)
    assert traveler.credentials_issued_at is not None


@pytest.mark.asyncio
async def test_failed_credentials_email_is_retried_on_next_confirmation(
    workflow, published_package, submitted, admin, notifier, test_session
):
    notifier.fail = True
    await workflow.confirm(submitted.booking.booking_id, admin.admin_id)

    notifier.fail = False
    second = await workflow.submit(_submission(published_package.package_id))
    await workflow.confirm(second.booking.booking_id, admin.admin_id)

    password = notifier.sent[0][2]
    assert password is not None
    traveler = await TravelerService(test_session).get_by_email("asha@example.com")
    assert verify_password(password, traveler.password_hash)


@pytest.mark.asyncio
async def test_credentials_sent_only_once(workflow, published_package, submitted, admin, notifier):
    await workflow.confirm(submitted.booking.booking_id, admin.admin_id)
    second = await workflow.submit(_submission(published_package.package_id))
    await workflow.confirm(second.booking.booking_id, admin.admin_id)

    assert notifier.sent[0][2] is not None
    assert notifier.sent[1][2] is None
