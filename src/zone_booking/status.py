from __future__ import annotations

from .errors import ErrorKind, Result
from .models import Booking, BookingStatus

# Allowed edges of the booking lifecycle. NO_ACTUAL is reachable from every
# other state (the expiration sweep relies on it) and has no way out.
TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.TEMPORARY_RESERVED: frozenset(
        {BookingStatus.CONFIRMED, BookingStatus.CANCELLED, BookingStatus.NO_ACTUAL}
    ),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED, BookingStatus.NO_ACTUAL}),
    BookingStatus.CANCELLED: frozenset({BookingStatus.NO_ACTUAL}),
    BookingStatus.NO_ACTUAL: frozenset(),
}


def is_suitable_transition(current: BookingStatus, requested: BookingStatus) -> bool:
    return requested in TRANSITIONS.get(current, frozenset())


def with_status(booking: Booking, status: BookingStatus) -> Booking:
    return booking.model_copy(update={"status": status})


def change_status(booking: Booking, requested: BookingStatus) -> Result[Booking]:
    """Validate and apply a status change; the input booking is never modified."""
    if not is_suitable_transition(booking.status, requested):
        return Result.failure(
            ErrorKind.INVALID_STATUS_TRANSITION,
            f"Booking {booking.booking_id} cannot move from {booking.status} to {requested}",
            booking_id=booking.booking_id,
            requested_status=str(requested),
        )
    return Result.success(with_status(booking, requested))
