from __future__ import annotations

import datetime as dt
from collections.abc import Iterable

from aws_lambda_powertools import Logger
from botocore.exceptions import BotoCoreError, ClientError

from .models import Booking, BookingStatus
from .repositories import BookingRepository
from .status import change_status

logger = Logger()


def is_expired(booking: Booking, now: dt.datetime) -> bool:
    ends_at = dt.datetime.combine(booking.date, booking.end_time, tzinfo=now.tzinfo)
    return now >= ends_at


def sweep(
    bookings: Iterable[Booking],
    repository: BookingRepository,
    now: dt.datetime,
) -> list[Booking]:
    """Move elapsed bookings to NO_ACTUAL before they are handed to a caller.

    Each transition is persisted with one ``mark_no_actual`` write. A failed
    write is logged and the read carries on with the in-memory status.
    """
    swept: list[Booking] = []
    for booking in bookings:
        if booking.status != BookingStatus.NO_ACTUAL and is_expired(booking, now):
            result = change_status(booking, BookingStatus.NO_ACTUAL)
            if result.ok and result.value is not None:
                booking = result.value
                _persist_expiry(repository, booking.booking_id)
        swept.append(booking)
    return swept


def _persist_expiry(repository: BookingRepository, booking_id: str) -> None:
    try:
        repository.mark_no_actual(booking_id)
    except (ClientError, BotoCoreError):
        logger.exception("Failed to persist booking expiry", extra={"booking_id": booking_id})
    else:
        logger.info("Booking expired", extra={"booking_id": booking_id})
