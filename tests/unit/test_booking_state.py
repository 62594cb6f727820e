"""Unit tests for the booking status rules."""

import pytest

from travel_booking.core.exceptions import BookingAlreadyConfirmedError, InvalidStatusTransitionError
from travel_booking.services import booking_state


def test_confirm_allowed_from_temporary():
    booking_state.assert_can_confirm("temporary")


def test_confirm_rejects_already_confirmed():
    with pytest.raises(BookingAlreadyConfirmedError) as exc_info:
        booking_state.assert_can_confirm("confirmed")
    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "Booking is already confirmed"


@pytest.mark.parametrize("current", ["in_progress", "completed", "cancelled"])
def test_confirm_rejects_other_states(current):
    with pytest.raises(InvalidStatusTransitionError) as exc_info:
        booking_state.assert_can_confirm(current)
    assert exc_info.value.status_code == 400
    assert exc_info.value.current == current


@pytest.mark.parametrize("current", ["temporary", "confirmed", "in_progress"])
def test_cancel_allowed_from_open_states(current):
    booking_state.assert_can_cancel(current)


@pytest.mark.parametrize("current", ["completed", "cancelled"])
def test_cancel_rejected_from_terminal_states(current):
    with pytest.raises(InvalidStatusTransitionError):
        booking_state.assert_can_cancel(current)


def test_patch_never_confirms():
    with pytest.raises(InvalidStatusTransitionError) as exc_info:
        booking_state.assert_can_patch("temporary", "confirmed")
    assert "confirm" in exc_info.value.message.lower()


@pytest.mark.parametrize("target", ["temporary", "confirmed", "in_progress", "completed"])
def test_cancelled_is_terminal(target):
    with pytest.raises(InvalidStatusTransitionError):
        booking_state.assert_can_patch("cancelled", target)


@pytest.mark.parametrize("target", ["in_progress", "completed"])
def test_progress_requires_confirmation(target):
    with pytest.raises(InvalidStatusTransitionError):
        booking_state.assert_can_patch("temporary", target)


@pytest.mark.parametrize(
    "current,target",
    [
        ("confirmed", "in_progress"),
        ("in_progress", "completed"),
        ("confirmed", "completed"),
        ("completed", "temporary"),
        ("temporary", "cancelled"),
    ],
)
def test_allowed_patches(current, target):
    booking_state.assert_can_patch(current, target)
