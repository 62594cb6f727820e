"""Booking service: persistence and lifecycle of bookings."""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import Select, case, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.database import utcnow
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..models.agent import Agent
from ..models.booking import Booking, BookingStatus, PaymentStatus
from ..models.package import Package
from ..models.traveler import Traveler
from ..schemas.booking import BookingStats
from . import booking_state
from .package_service import parse_uuid

logger = logging.getLogger(__name__)

# Columns an admin may change through a generic update
UPDATABLE_FIELDS = (
    "no_of_travelers",
    "start_date",
    "end_date",
    "total_amount",
    "payment_status",
    "agent_id",
    "admin_notes",
    "traveler_notes",
)


class BookingService:
    """
    Service for booking-related operations.

    Methods flush but never commit; the caller owns the transaction. Every
    read goes through ``_select_with_relations`` so returned bookings carry
    their package, traveler, agent and confirming admin.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _select_with_relations() -> Select:
        return select(Booking).options(
            selectinload(Booking.package),
            selectinload(Booking.traveler),
            selectinload(Booking.agent),
            selectinload(Booking.confirmed_by_admin),
        )

    async def create_booking(
        self,
        package_id: UUID,
        traveler_id: UUID,
        no_of_travelers: int = 1,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        agent_id: Optional[str] = None,
        traveler_notes: Optional[str] = None,
        total_amount: Optional[Decimal] = None,
    ) -> Booking:
        """
        Insert a booking in ``temporary`` status with ``pending`` payment.

        Returns:
            The created booking, loaded with its relations
        """
        booking = Booking(
            package_id=package_id,
            traveler_id=traveler_id,
            agent_id=await self._resolve_agent_id(agent_id),
            status=BookingStatus.TEMPORARY.value,
            payment_status=PaymentStatus.PENDING.value,
            no_of_travelers=no_of_travelers,
            start_date=start_date,
            end_date=end_date,
            total_amount=total_amount,
            traveler_notes=traveler_notes,
        )
        self.db.add(booking)
        await self.db.flush()

        logger.info(
            "Booking created",
            extra={
                "booking_id": str(booking.booking_id),
                "package_id": str(package_id),
                "traveler_id": str(traveler_id),
                "no_of_travelers": no_of_travelers
            }
        )

        return await self.get_booking_by_id_or_raise(booking.booking_id)

    async def get_booking_by_id(self, booking_id: UUID) -> Booking | None:
        """Get booking by ID with relations, refreshing any cached instance."""
        stmt = (
            self._select_with_relations()
            .where(Booking.booking_id == booking_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_booking_by_id_or_raise(self, booking_id: UUID) -> Booking:
        """Get booking by ID or raise NotFoundError."""
        booking = await self.get_booking_by_id(booking_id)
        if not booking:
            logger.warning(
                "Booking not found",
                extra={"booking_id": str(booking_id)}
            )
            raise NotFoundError(
                resource_type="booking",
                resource_id=str(booking_id)
            )
        return booking

    async def list_bookings(
        self,
        page: int = 1,
        limit: int = 10,
        status: Optional[BookingStatus] = None,
        payment_status: Optional[PaymentStatus] = None,
        traveler_id: Optional[UUID] = None,
        search: Optional[str] = None,
    ) -> tuple[list[Booking], int]:
        """
        List bookings newest first.

        Args:
            page: 1-based page number
            limit: Page size
            status: Only bookings in this status
            payment_status: Only bookings with this payment status
            traveler_id: Only bookings of this traveler
            search: Case-insensitive match on traveler name/email or package title

        Returns:
            Tuple of (page of bookings, total matching count)
        """
        conditions = []
        if status:
            conditions.append(Booking.status == status.value)
        if payment_status:
            conditions.append(Booking.payment_status == payment_status.value)
        if traveler_id:
            conditions.append(Booking.traveler_id == traveler_id)
        if search:
            term = f"%{search.lower()}%"
            conditions.append(or_(
                func.lower(Traveler.name).like(term),
                func.lower(Traveler.email).like(term),
                func.lower(Package.title).like(term),
            ))

        count_stmt = (
            select(func.count(Booking.booking_id))
            .join(Traveler, Booking.traveler_id == Traveler.traveler_id)
            .join(Package, Booking.package_id == Package.package_id)
            .where(*conditions)
        )
        total = (await self.db.execute(count_stmt)).scalar_one()

        stmt = (
            self._select_with_relations()
            .join(Traveler, Booking.traveler_id == Traveler.traveler_id)
            .join(Package, Booking.package_id == Package.package_id)
            .where(*conditions)
            .order_by(Booking.booking_date.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars()), total

    async def list_bookings_for_traveler(self, traveler_id: UUID) -> list[Booking]:
        stmt = (
            self._select_with_relations()
            .where(Booking.traveler_id == traveler_id)
            .order_by(Booking.booking_date.desc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars())

    async def update_booking(self, booking_id: UUID, changes: dict[str, Any]) -> Booking:
        """
        Apply admin edits to mutable fields.

        Keys outside UPDATABLE_FIELDS are ignored, so owners and status can
        never change through this path.

        Raises:
            NotFoundError: If booking not found
            ValidationError: If the resulting date range is inverted
        """
        booking = await self.get_booking_by_id_or_raise(booking_id)

        applied = {}
        for field, value in changes.items():
            if field not in UPDATABLE_FIELDS:
                continue
            if value is None and field in ("no_of_travelers", "payment_status"):
                continue
            if field == "agent_id":
                value = await self._resolve_agent_id(value)
            elif field == "payment_status" and value is not None:
                value = PaymentStatus(value).value
            elif field == "total_amount" and value is not None:
                value = Decimal(str(value))
            setattr(booking, field, value)
            applied[field] = value

        if booking.start_date and booking.end_date and booking.end_date < booking.start_date:
            raise ValidationError(
                errors=[{"field": "end_date", "message": "end_date must not be before start_date"}]
            )

        if applied:
            self.db.add(booking)
            await self.db.flush()
            logger.info(
                "Booking updated",
                extra={"booking_id": str(booking_id), "fields": sorted(applied)}
            )

        return await self.get_booking_by_id_or_raise(booking_id)

    async def mark_confirmed(self, booking_id: UUID, admin_id: UUID) -> bool:
        """
        Move a temporary booking to ``confirmed`` and stamp who and when.

        The write is conditional on the row still being temporary, so of two
        concurrent confirmations only one affects a row.

        Returns:
            True if this call confirmed the booking, False if no temporary
            booking with that ID remained
        """
        stmt = (
            update(Booking)
            .where(
                Booking.booking_id == booking_id,
                Booking.status == BookingStatus.TEMPORARY.value,
            )
            .values(
                status=BookingStatus.CONFIRMED.value,
                confirmation_date=utcnow(),
                confirmed_by=admin_id,
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1

    async def cancel_booking(self, booking_id: UUID) -> Booking:
        """
        Cancel a booking that is not already terminal.

        Raises:
            NotFoundError: If booking not found
            InvalidStatusTransitionError: If the booking is cancelled or completed
        """
        booking = await self.get_booking_by_id_or_raise(booking_id)
        booking_state.assert_can_cancel(booking.status)

        await self._write_status(booking_id, booking.status, BookingStatus.CANCELLED.value)

        logger.info(
            "Booking cancelled",
            extra={"booking_id": str(booking_id), "previous_status": booking.status}
        )
        return await self.get_booking_by_id_or_raise(booking_id)

    async def update_status(self, booking_id: UUID, target: BookingStatus) -> Booking:
        """
        Generic administrative status change without side effects.

        Moving back to ``temporary`` clears the confirmation stamp.

        Raises:
            NotFoundError: If booking not found
            InvalidStatusTransitionError: If the transition is not permitted
        """
        booking = await self.get_booking_by_id_or_raise(booking_id)
        current = booking.status
        if current == target.value:
            return booking

        booking_state.assert_can_patch(current, target.value)
        await self._write_status(booking_id, current, target.value)

        logger.info(
            "Booking status updated",
            extra={"booking_id": str(booking_id), "from_status": current, "to_status": target.value}
        )
        return await self.get_booking_by_id_or_raise(booking_id)

    async def _write_status(self, booking_id: UUID, expected: str, target: str) -> None:
        values: dict[str, Any] = {"status": target, "updated_at": utcnow()}
        if target == BookingStatus.TEMPORARY.value:
            values.update(confirmation_date=None, confirmed_by=None)

        stmt = (
            update(Booking)
            .where(Booking.booking_id == booking_id, Booking.status == expected)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        if result.rowcount != 1:
            raise ConflictError(message="Booking was modified by another request, please retry")

    async def get_stats(self) -> BookingStats:
        """Aggregate counts per status and revenue."""

        def count_status(status: BookingStatus):
            return func.coalesce(func.sum(case((Booking.status == status.value, 1), else_=0)), 0)

        stmt = select(
            func.count(Booking.booking_id),
            count_status(BookingStatus.TEMPORARY),
            count_status(BookingStatus.CONFIRMED),
            count_status(BookingStatus.IN_PROGRESS),
            count_status(BookingStatus.COMPLETED),
            count_status(BookingStatus.CANCELLED),
            func.coalesce(func.sum(Booking.total_amount), 0),
            func.coalesce(
                func.sum(case((Booking.payment_status == PaymentStatus.PAID.value, Booking.total_amount), else_=0)),
                0,
            ),
        )
        row = (await self.db.execute(stmt)).one()

        return BookingStats(
            total_bookings=row[0],
            temporary_bookings=row[1],
            confirmed_bookings=row[2],
            in_progress_bookings=row[3],
            completed_bookings=row[4],
            cancelled_bookings=row[5],
            total_revenue=float(row[6] or 0),
            paid_revenue=float(row[7] or 0),
        )

    async def _resolve_agent_id(self, agent_id: Optional[str | UUID]) -> Optional[UUID]:
        """Validate an optional agent reference against the agents table."""
        if agent_id is None or agent_id == "":
            return None
        agent_uuid = parse_uuid(agent_id)
        if agent_uuid is not None:
            agent = await self.db.get(Agent, agent_uuid)
            if agent is not None:
                return agent_uuid
        raise ValidationError(
            message="Referenced record does not exist",
            errors=[{"field": "agent_id", "message": "Agent not found"}],
        )
