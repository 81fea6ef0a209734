from __future__ import annotations

import datetime as dt
from collections.abc import Iterable

from .intervals import time_span
from .models import Booking, FreeSlot

WORK_DAY_START = dt.time(8, 0)
WORK_DAY_END = dt.time(23, 0)
MIN_SLOT_DURATION = dt.timedelta(hours=1)


def free_slots(
    date: dt.date,
    bookings: Iterable[Booking],
    *,
    day_start: dt.time = WORK_DAY_START,
    day_end: dt.time = WORK_DAY_END,
    min_duration: dt.timedelta = MIN_SLOT_DURATION,
    empty_day_is_free: bool = True,
) -> list[FreeSlot]:
    """Gaps of at least ``min_duration`` between active bookings on ``date``.

    ``bookings`` is expected to belong to one zone; other dates and inactive
    statuses are filtered out here. Bookings reaching outside working hours
    are clamped to them.
    """
    active = sorted(
        (b for b in bookings if b.date == date and b.is_active),
        key=lambda b: (b.start_time, b.end_time),
    )
    if not active and not empty_day_is_free:
        return []

    slots: list[FreeSlot] = []

    def emit(start: dt.time, end: dt.time) -> None:
        if start < end and time_span(start, end) >= min_duration:
            slots.append(FreeSlot(date=date, start_time=start, end_time=end))

    # cursor is the latest end seen so far, so nested bookings do not open a gap
    cursor = day_start
    for booking in active:
        emit(cursor, min(booking.start_time, day_end))
        cursor = max(cursor, booking.end_time)
    emit(cursor, day_end)

    return sorted(slots, key=lambda s: s.start_time)
