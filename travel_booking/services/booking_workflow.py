"""Booking workflow: submission, confirmation and cancellation."""

from dataclasses import dataclass
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import AuthorizationError, BookingAlreadyConfirmedError, NotFoundError
from ..core.observability import get_logger, metrics_collector
from ..models.booking import BookingStatus
from ..schemas.auth import CurrentUser
from ..schemas.booking import BookingDetail, SubmitBookingRequest
from . import booking_state
from .booking_service import BookingService
from .notification_service import BookingNotifier
from .package_service import PackageService, parse_uuid
from .traveler_service import TravelerService

logger = get_logger(__name__)


@dataclass(frozen=True)
class SubmissionResult:
    booking: BookingDetail
    is_new_account: bool
    # Plaintext of a just-provisioned account; never persisted
    generated_password: Optional[str] = None


def parse_booking_id(booking_id: str | UUID) -> UUID:
    """Parse a path booking ID; malformed IDs are reported as not found."""
    booking_uuid = parse_uuid(booking_id)
    if booking_uuid is None:
        raise NotFoundError(resource_type="booking", resource_id=str(booking_id))
    return booking_uuid


class BookingWorkflow:
    """
    Orchestrates multi-entity booking operations.

    Each public method is one unit of work: it commits on success and
    leaves rollback to the session owner on failure. Notification happens
    after commit and can never undo a state change.
    """

    def __init__(self, db: AsyncSession, notifier: BookingNotifier):
        self.db = db
        self.notifier = notifier
        self.bookings = BookingService(db)
        self.travelers = TravelerService(db)
        self.packages = PackageService(db)

    async def submit(self, request: SubmitBookingRequest) -> SubmissionResult:
        """
        Create a temporary booking for a public submission.

        The package must exist and be published. The traveler is resolved
        by email before the booking row is inserted, and both writes commit
        together.

        Args:
            request: Validated submission payload

        Returns:
            SubmissionResult with the joined booking and the new-account flag

        Raises:
            NotFoundError: If the package does not exist
            PackageNotBookableError: If the package is not published
            ValidationError: If the referenced agent does not exist
        """
        package = await self.packages.get_bookable_package(request.package_id)

        resolution = await self.travelers.resolve_for_booking(
            email=request.traveler.email,
            name=request.traveler.name,
            contact=request.traveler.contact,
        )

        booking = await self.bookings.create_booking(
            package_id=package.package_id,
            traveler_id=resolution.traveler_id,
            no_of_travelers=request.no_of_travelers,
            start_date=request.start_date,
            end_date=request.end_date,
            agent_id=request.agent_id,
            traveler_notes=request.traveler_notes,
        )
        await self.db.commit()

        metrics_collector.record_booking_submitted(resolution.is_new_account)
        if resolution.is_new_account:
            metrics_collector.record_traveler_provisioned()

        logger.info(
            "booking_submitted",
            booking_id=str(booking.booking_id),
            package_id=str(package.package_id),
            traveler_id=str(resolution.traveler_id),
            is_new_account=resolution.is_new_account,
        )

        return SubmissionResult(
            booking=BookingDetail.from_booking(booking),
            is_new_account=resolution.is_new_account,
            generated_password=resolution.generated_password,
        )

    async def confirm(self, booking_id: str | UUID, admin_id: str | UUID) -> BookingDetail:
        """
        Confirm a temporary booking and activate its traveler.

        Steps run in order: status write, traveler activation, commit, then
        a best-effort confirmation email. A traveler who has never logged in
        and was never sent usable credentials gets a fresh password in that
        email, whether this confirmation or an earlier admin action activated
        them. The credentials only count as issued once the email goes out,
        so a failed delivery is retried by the next confirmation.

        Raises:
            NotFoundError: If the booking does not exist
            BookingAlreadyConfirmedError: If the booking is confirmed, including
                when a concurrent request confirmed it first
            InvalidStatusTransitionError: If the booking is past confirmation
                or cancelled
        """
        booking_uuid = parse_booking_id(booking_id)
        admin_uuid = admin_id if isinstance(admin_id, UUID) else UUID(str(admin_id))
        log = logger.bind(booking_id=str(booking_uuid), admin_id=str(admin_uuid))

        booking = await self.bookings.get_booking_by_id_or_raise(booking_uuid)
        booking_state.assert_can_confirm(booking.status)

        if not await self.bookings.mark_confirmed(booking_uuid, admin_uuid):
            log.warning("booking_confirm_lost_race")
            raise BookingAlreadyConfirmedError()

        traveler = booking.traveler
        newly_activated = await self.travelers.activate(traveler.traveler_id)
        password = None
        if traveler.last_login is None and traveler.credentials_issued_at is None:
            password = await self.travelers.issue_temporary_password(traveler.traveler_id)

        await self.db.commit()
        metrics_collector.record_booking_confirmed()
        log.info(
            "booking_confirmed",
            traveler_id=str(traveler.traveler_id),
            traveler_activated=newly_activated,
            credentials_issued=password is not None,
        )

        confirmed = await self.bookings.get_booking_by_id_or_raise(booking_uuid)
        detail = BookingDetail.from_booking(confirmed)
        delivered = await self._notify_safely(detail, confirmed.traveler.email, password)
        if delivered and password is not None:
            await self.travelers.mark_credentials_issued(traveler.traveler_id)
            await self.db.commit()
        return detail

    async def _notify_safely(
        self,
        booking: BookingDetail,
        traveler_email: str,
        password: Optional[str],
    ) -> bool:
        """Send the confirmation email; failures are logged and counted, never raised."""
        try:
            await self.notifier.send_booking_confirmation(booking, traveler_email, password)
        except Exception:
            metrics_collector.record_notification_failure("booking_confirmation")
            logger.error(
                "booking_confirmation_email_failed",
                booking_id=booking.booking_id,
                to=traveler_email,
                exc_info=True,
            )
            return False
        return True

    async def cancel(self, booking_id: str | UUID, user: CurrentUser) -> BookingDetail:
        """
        Cancel a booking on behalf of an admin or the owning traveler.

        Raises:
            NotFoundError: If the booking does not exist
            AuthorizationError: If a traveler cancels someone else's booking
            InvalidStatusTransitionError: If the booking is cancelled or completed
        """
        booking_uuid = parse_booking_id(booking_id)
        booking = await self.bookings.get_booking_by_id_or_raise(booking_uuid)
        self.ensure_can_view(booking.traveler_id, user)

        cancelled = await self.bookings.cancel_booking(booking_uuid)
        await self.db.commit()

        metrics_collector.record_booking_cancelled(user.role.value)
        logger.info(
            "booking_cancelled",
            booking_id=str(booking_uuid),
            cancelled_by=user.id,
            role=user.role.value,
        )
        return BookingDetail.from_booking(cancelled)

    async def update_status(self, booking_id: str | UUID, target: BookingStatus) -> BookingDetail:
        """Administrative status change; no activation or email side effects."""
        booking_uuid = parse_booking_id(booking_id)
        current = await self.bookings.get_booking_by_id_or_raise(booking_uuid)
        previous = current.status

        updated = await self.bookings.update_status(booking_uuid, target)
        await self.db.commit()

        if previous != updated.status:
            metrics_collector.record_status_change(previous, updated.status)
        return BookingDetail.from_booking(updated)

    async def update(self, booking_id: str | UUID, changes: dict[str, Any]) -> BookingDetail:
        booking_uuid = parse_booking_id(booking_id)
        updated = await self.bookings.update_booking(booking_uuid, changes)
        await self.db.commit()
        return BookingDetail.from_booking(updated)

    async def get(self, booking_id: str | UUID, user: CurrentUser) -> BookingDetail:
        """Read one booking as an admin or as its traveler."""
        booking = await self.bookings.get_booking_by_id_or_raise(parse_booking_id(booking_id))
        self.ensure_can_view(booking.traveler_id, user)
        return BookingDetail.from_booking(booking)

    @staticmethod
    def ensure_can_view(traveler_id: UUID, user: CurrentUser) -> None:
        if not (user.is_admin or user.owns(traveler_id)):
            raise AuthorizationError("You can only access your own bookings")
