"""Booking model definition."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, Integer, Numeric, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base, utcnow

if TYPE_CHECKING:
    from .admin import Admin
    from .agent import Agent
    from .package import Package
    from .traveler import Traveler


class BookingStatus(str, Enum):
    """Booking lifecycle status."""
    TEMPORARY = "temporary"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    """Booking payment status."""
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    REFUNDED = "refunded"


class Booking(Base):
    """A traveler's reservation against a package."""

    __tablename__ = "bookings"

    booking_id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # Owning references; never changed after creation
    package_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("packages.package_id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )
    traveler_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("travelers.traveler_id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )
    agent_id: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("agents.agent_id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    # Lifecycle
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=BookingStatus.TEMPORARY.value,
        index=True
    )
    payment_status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PaymentStatus.PENDING.value,
        index=True
    )

    # Booking details
    no_of_travelers: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    total_amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    traveler_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Set only by the confirm operation
    confirmation_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    confirmed_by: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("admins.admin_id", ondelete="SET NULL"),
        nullable=True
    )

    # Timestamps
    booking_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now()
    )

    # Constraints
    __table_args__ = (
        CheckConstraint("no_of_travelers >= 1", name="ck_booking_travelers_positive"),
        CheckConstraint("total_amount IS NULL OR total_amount >= 0", name="ck_booking_amount_non_negative"),
        CheckConstraint(
            "status IN ('temporary', 'confirmed', 'in_progress', 'completed', 'cancelled')",
            name="ck_booking_status",
        ),
        CheckConstraint(
            "payment_status IN ('pending', 'partial', 'paid', 'refunded')",
            name="ck_booking_payment_status",
        ),
    )

    # Relationships
    package: Mapped["Package"] = relationship("Package")
    traveler: Mapped["Traveler"] = relationship("Traveler", back_populates="bookings")
    agent: Mapped["Agent | None"] = relationship("Agent")
    confirmed_by_admin: Mapped["Admin | None"] = relationship("Admin")

    def __repr__(self) -> str:
        return (
            f"<Booking(booking_id={self.booking_id}, package_id={self.package_id}, "
            f"traveler_id={self.traveler_id}, status={self.status})>"
        )
