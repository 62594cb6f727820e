"""Traveler model definition."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, DateTime, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base, utcnow

if TYPE_CHECKING:
    from .booking import Booking


class Traveler(Base):
    """
    End-customer account.

    Auto-provisioned accounts start inactive and are activated when their
    first booking is confirmed (or by an admin).
    """

    __tablename__ = "travelers"

    traveler_id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # Stored lowercased; lookups compare case-insensitively
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    contact: Mapped[str] = mapped_column(String(50), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # Set once a password the traveler knows exists: chosen at creation or delivered by email
    credentials_issued_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("length(email) > 0", name="ck_traveler_email_not_empty"),
    )

    bookings: Mapped[list["Booking"]] = relationship("Booking", back_populates="traveler")

    def __repr__(self) -> str:
        return (
            f"<Traveler(traveler_id={self.traveler_id}, email='{self.email}', "
            f"is_active={self.is_active})>"
        )
