"""Booking status state machine."""

from ..core.exceptions import BookingAlreadyConfirmedError, InvalidStatusTransitionError
from ..models.booking import BookingStatus

TEMPORARY = BookingStatus.TEMPORARY.value
CONFIRMED = BookingStatus.CONFIRMED.value
IN_PROGRESS = BookingStatus.IN_PROGRESS.value
COMPLETED = BookingStatus.COMPLETED.value
CANCELLED = BookingStatus.CANCELLED.value

# Statuses that carry confirmation_date / confirmed_by
CONFIRMED_STATES = frozenset({CONFIRMED, IN_PROGRESS, COMPLETED})

CANCELLABLE_STATES = frozenset({TEMPORARY, CONFIRMED, IN_PROGRESS})

# Targets reachable through the generic status patch. CONFIRMED is absent:
# it is only entered through the confirm operation.
_PATCH_TRANSITIONS = {
    TEMPORARY: {CANCELLED},
    CONFIRMED: {TEMPORARY, IN_PROGRESS, COMPLETED, CANCELLED},
    IN_PROGRESS: {TEMPORARY, COMPLETED, CANCELLED},
    COMPLETED: {TEMPORARY, IN_PROGRESS},
    CANCELLED: set(),
}


def assert_can_confirm(current: str) -> None:
    if current == CONFIRMED:
        raise BookingAlreadyConfirmedError()
    if current != TEMPORARY:
        raise InvalidStatusTransitionError(
            current,
            CONFIRMED,
            message=f"Only temporary bookings can be confirmed (current status: '{current}')",
        )


def assert_can_cancel(current: str) -> None:
    if current == CANCELLED:
        raise InvalidStatusTransitionError(current, CANCELLED, message="Booking is already cancelled")
    if current not in CANCELLABLE_STATES:
        raise InvalidStatusTransitionError(current, CANCELLED)


def assert_can_patch(current: str, target: str) -> None:
    """
    Validate a generic status change.

    Raises InvalidStatusTransitionError if not allowed. Patching to the
    current status is accepted as a no-op by the caller and is not checked here.
    """
    if target == CONFIRMED:
        raise InvalidStatusTransitionError(
            current,
            target,
            message="Use the confirm operation to confirm a booking",
        )
    if target not in _PATCH_TRANSITIONS.get(current, set()):
        raise InvalidStatusTransitionError(current, target)
