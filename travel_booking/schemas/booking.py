"""Booking-related Pydantic schemas."""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from ..models.booking import BookingStatus, PaymentStatus


class TravelerContact(BaseModel):
    """Traveler identity submitted with a public booking."""

    name: str = Field(..., min_length=2, max_length=255, description="Traveler full name")
    email: EmailStr = Field(..., description="Traveler email; identifies the account")
    contact: str = Field(..., min_length=1, max_length=50, description="Phone or other contact")

    @field_validator("name", "contact", mode="before")
    @classmethod
    def strip_whitespace(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class _DateRangeMixin(BaseModel):

    @model_validator(mode="after")
    def check_date_range(self):
        start = getattr(self, "start_date", None)
        end = getattr(self, "end_date", None)
        if start and end and end < start:
            raise ValueError("end_date must not be before start_date")
        return self


class SubmitBookingRequest(_DateRangeMixin):
    """Request schema for the public booking submission."""

    package_id: str = Field(..., min_length=1, description="Package to book")
    traveler: TravelerContact
    no_of_travelers: int = Field(1, ge=1, le=100, description="Number of travelers")
    start_date: Optional[date] = Field(None, description="Trip start date")
    end_date: Optional[date] = Field(None, description="Trip end date")
    agent_id: Optional[str] = Field(None, description="Referring agent")
    traveler_notes: Optional[str] = Field(None, max_length=5000, description="Notes from the traveler")


class UpdateBookingRequest(_DateRangeMixin):
    """Admin update of mutable booking fields. Status and owners are not updatable here."""

    model_config = ConfigDict(extra="forbid")

    no_of_travelers: Optional[int] = Field(None, ge=1, le=100)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    total_amount: Optional[float] = Field(None, ge=0)
    payment_status: Optional[PaymentStatus] = None
    agent_id: Optional[str] = None
    admin_notes: Optional[str] = Field(None, max_length=5000)
    traveler_notes: Optional[str] = Field(None, max_length=5000)


class UpdateBookingStatusRequest(BaseModel):
    """Request schema for the generic status patch."""

    status: BookingStatus = Field(..., description="Target booking status")


class BookingDetail(BaseModel):
    """Booking joined with its package, traveler, agent and confirming admin."""

    model_config = ConfigDict(from_attributes=True)

    booking_id: str
    package_id: str
    traveler_id: str
    agent_id: Optional[str] = None
    status: BookingStatus
    payment_status: PaymentStatus
    no_of_travelers: int
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    total_amount: Optional[float] = None
    booking_date: datetime
    confirmation_date: Optional[datetime] = None
    confirmed_by: Optional[str] = None
    admin_notes: Optional[str] = None
    traveler_notes: Optional[str] = None

    package_title: str
    package_days: int
    traveler_name: str
    traveler_email: str
    traveler_contact: str
    agent_name: Optional[str] = None
    agent_email: Optional[str] = None
    confirmed_by_name: Optional[str] = None

    @classmethod
    def from_booking(cls, booking) -> "BookingDetail":
        """Flatten a booking loaded with its package, traveler, agent and admin."""
        agent = booking.agent
        admin = booking.confirmed_by_admin
        return cls(
            booking_id=str(booking.booking_id),
            package_id=str(booking.package_id),
            traveler_id=str(booking.traveler_id),
            agent_id=str(booking.agent_id) if booking.agent_id else None,
            status=booking.status,
            payment_status=booking.payment_status,
            no_of_travelers=booking.no_of_travelers,
            start_date=booking.start_date,
            end_date=booking.end_date,
            total_amount=float(booking.total_amount) if booking.total_amount is not None else None,
            booking_date=booking.booking_date,
            confirmation_date=booking.confirmation_date,
            confirmed_by=str(booking.confirmed_by) if booking.confirmed_by else None,
            admin_notes=booking.admin_notes,
            traveler_notes=booking.traveler_notes,
            package_title=booking.package.title,
            package_days=booking.package.no_of_days,
            traveler_name=booking.traveler.name,
            traveler_email=booking.traveler.email,
            traveler_contact=booking.traveler.contact,
            agent_name=agent.name if agent else None,
            agent_email=agent.email if agent else None,
            confirmed_by_name=admin.name if admin else None,
        )


class SubmitBookingResult(BaseModel):
    """Payload returned by the public submission endpoint."""

    booking: BookingDetail
    is_new_account: bool = Field(..., description="True when a traveler account was created")


class BookingStats(BaseModel):
    """Aggregate booking counts and revenue."""

    total_bookings: int = 0
    temporary_bookings: int = 0
    confirmed_bookings: int = 0
    in_progress_bookings: int = 0
    completed_bookings: int = 0
    cancelled_bookings: int = 0
    total_revenue: float = 0.0
    paid_revenue: float = 0.0
