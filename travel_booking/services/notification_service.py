"""Outbound traveler notifications."""

import logging
from abc import ABC, abstractmethod
from email.message import EmailMessage
from typing import Optional

import aiosmtplib
from jinja2 import Environment, PackageLoader, select_autoescape

from ..core.config import Settings
from ..schemas.booking import BookingDetail

logger = logging.getLogger(__name__)

BOOKING_CONFIRMED_TEMPLATE = "booking_confirmed.html"

_ENV = Environment(
    loader=PackageLoader("travel_booking", "templates"),
    autoescape=select_autoescape(["html", "xml"]),
)


class BookingNotifier(ABC):
    """Delivers booking emails to travelers."""

    @abstractmethod
    async def send_booking_confirmation(
        self,
        booking: BookingDetail,
        traveler_email: str,
        password: Optional[str] = None,
    ) -> None:
        """
        Tell a traveler their booking is confirmed.

        ``password`` is included only when the confirmation activated a
        freshly provisioned account. Implementations raise on delivery
        failure; callers decide whether that matters.
        """

    async def verify(self) -> bool:
        """Check the transport is reachable. Never raises."""
        return True

    async def close(self) -> None:
        return None


def render_booking_confirmation(
    booking: BookingDetail,
    email: str,
    password: Optional[str],
    frontend_url: str,
    sender: str,
) -> tuple[str, str]:
    """Return (subject, html body) for a confirmation email."""
    template = _ENV.get_template(BOOKING_CONFIRMED_TEMPLATE)
    html = template.render(
        booking=booking,
        email=email,
        password=password,
        login_url=f"{frontend_url.rstrip('/')}/login",
        sender=sender,
    )
    return f"Booking Confirmed - {booking.package_title}", html


class SmtpBookingNotifier(BookingNotifier):
    """Sends HTML email through an SMTP relay."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def _connection_kwargs(self) -> dict:
        kwargs = {
            "hostname": self.settings.smtp_host,
            "port": self.settings.smtp_port,
            "use_tls": self.settings.smtp_use_tls,
            "timeout": 10,
        }
        if self.settings.smtp_username:
            kwargs["username"] = self.settings.smtp_username
            kwargs["password"] = self.settings.smtp_password
        return kwargs

    async def send_booking_confirmation(
        self,
        booking: BookingDetail,
        traveler_email: str,
        password: Optional[str] = None,
    ) -> None:
        subject, html = render_booking_confirmation(
            booking,
            traveler_email,
            password,
            frontend_url=self.settings.frontend_url,
            sender=self.settings.email_from,
        )

        message = EmailMessage()
        message["From"] = self.settings.email_from
        message["To"] = traveler_email
        message["Subject"] = subject
        message.set_content(f"Your booking {booking.booking_id} has been confirmed.")
        message.add_alternative(html, subtype="html")

        await aiosmtplib.send(message, **self._connection_kwargs())
        logger.info(
            "Booking confirmation email sent",
            extra={"booking_id": booking.booking_id, "to": traveler_email}
        )

    async def verify(self) -> bool:
        client = aiosmtplib.SMTP(**self._connection_kwargs())
        try:
            await client.connect()
            await client.quit()
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.warning("SMTP server is not reachable", extra={"error": str(e)})
            return False
        logger.info("SMTP server is ready", extra={"host": self.settings.smtp_host})
        return True


class LoggingBookingNotifier(BookingNotifier):
    """Used when no SMTP host is configured; records what would have been sent."""

    async def send_booking_confirmation(
        self,
        booking: BookingDetail,
        traveler_email: str,
        password: Optional[str] = None,
    ) -> None:
        logger.info(
            "Email delivery disabled, skipping booking confirmation",
            extra={
                "booking_id": booking.booking_id,
                "to": traveler_email,
                "includes_credentials": password is not None,
            }
        )


def build_notifier(settings: Settings) -> BookingNotifier:
    if settings.email_enabled:
        return SmtpBookingNotifier(settings)
    return LoggingBookingNotifier()
