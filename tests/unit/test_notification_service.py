"""Unit tests for booking notifications."""

from datetime import date, datetime

import pytest

from travel_booking.core.config import Settings
from travel_booking.schemas.booking import BookingDetail
from travel_booking.services.notification_service import (
    LoggingBookingNotifier,
    SmtpBookingNotifier,
    build_notifier,
    render_booking_confirmation,
)


@pytest.fixture
def booking_detail():
    return BookingDetail(
        booking_id="b-1",
        package_id="p-1",
        traveler_id="t-1",
        status="confirmed",
        payment_status="pending",
        no_of_travelers=2,
        start_date=date(2026, 12, 1),
        total_amount=120000.0,
        booking_date=datetime(2026, 10, 1, 9, 0),
        package_title="Hill Country Escape",
        package_days=5,
        traveler_name="Asha <Perera>",
        traveler_email="asha@example.com",
        traveler_contact="0711234567",
    )


def test_render_includes_credentials_when_given(booking_detail):
    subject, html = render_booking_confirmation(
        booking_detail,
        "asha@example.com",
        "Xy7!abcdEFGH",
        frontend_url="https://app.example.com/",
        sender="Trust You Go <info@example.com>",
    )

    assert subject == "Booking Confirmed - Hill Country Escape"
    assert "Xy7!abcdEFGH" in html
    assert "https://app.example.com/login" in html
    assert "120,000.00" in html
    # Autoescaped
    assert "Asha &lt;Perera&gt;" in html


def test_render_without_credentials(booking_detail):
    _, html = render_booking_confirmation(
        booking_detail, "asha@example.com", None, frontend_url="http://x", sender="s"
    )
    assert "Account Credentials" not in html


def test_build_notifier_selects_transport():
    assert isinstance(build_notifier(Settings(smtp_host="")), LoggingBookingNotifier)
    assert isinstance(build_notifier(Settings(smtp_host="smtp.example.com")), SmtpBookingNotifier)


@pytest.mark.asyncio
async def test_smtp_notifier_sends_html_message(booking_detail, monkeypatch):
    sent = {}

    async def fake_send(message, **kwargs):
        sent["message"] = message
        sent["kwargs"] = kwargs

    monkeypatch.setattr("travel_booking.services.notification_service.aiosmtplib.send", fake_send)
    notifier = SmtpBookingNotifier(
        Settings(smtp_host="smtp.example.com", smtp_username="mailer", smtp_password="secret")
    )

    await notifier.send_booking_confirmation(booking_detail, "asha@example.com", None)

    message = sent["message"]
    assert message["To"] == "asha@example.com"
    assert message["Subject"] == "Booking Confirmed - Hill Country Escape"
    assert sent["kwargs"]["hostname"] == "smtp.example.com"
    assert sent["kwargs"]["username"] == "mailer"


@pytest.mark.asyncio
async def test_logging_notifier_never_raises(booking_detail):
    await LoggingBookingNotifier().send_booking_confirmation(booking_detail, "a@example.com", "pw")
