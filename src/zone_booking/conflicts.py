from __future__ import annotations

import datetime as dt
from collections.abc import Iterable

from .intervals import TimeInterval, overlaps
from .models import Booking


def is_free(
    date: dt.date,
    start_time: dt.time,
    end_time: dt.time,
    existing: Iterable[Booking],
    *,
    empty_day_is_free: bool = True,
) -> bool:
    """Check that no active booking on ``date`` overlaps [start_time, end_time).

    Bookings on other dates and inactive bookings are ignored. With
    ``empty_day_is_free=False`` a date without any active booking is reported
    as not free, which is how the check historically behaved.
    """
    proposed = TimeInterval(date=date, start_time=start_time, end_time=end_time)
    same_day = [b for b in existing if b.date == date and b.is_active]
    if not same_day:
        return empty_day_is_free
    return not any(overlaps(b.interval, proposed) for b in same_day)
