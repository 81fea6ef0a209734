from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, model_validator

DATE_FORMAT = "%d.%m.%Y"
TIME_FORMATS = ("%H:%M", "%H:%M:%S")


class TimeInterval(BaseModel):
    """Half-open [start_time, end_time) span within a single day."""

    model_config = ConfigDict(frozen=True)

    date: dt.date
    start_time: dt.time
    end_time: dt.time

    @model_validator(mode="after")
    def _check_order(self) -> TimeInterval:
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self


def overlaps(a: TimeInterval, b: TimeInterval) -> bool:
    # Different days never collide; touching boundaries are not an overlap.
    if a.date != b.date:
        return False
    return a.start_time < b.end_time and b.start_time < a.end_time


def duration(interval: TimeInterval) -> dt.timedelta:
    return time_span(interval.start_time, interval.end_time)


def time_span(start: dt.time, end: dt.time) -> dt.timedelta:
    anchor = dt.date.min
    return dt.datetime.combine(anchor, end) - dt.datetime.combine(anchor, start)


def parse_date(text: str) -> dt.date:
    return dt.datetime.strptime(text.strip(), DATE_FORMAT).date()


def parse_time(text: str) -> dt.time:
    value = text.strip()
    for fmt in TIME_FORMATS:
        try:
            return dt.datetime.strptime(value, fmt).time()
        except ValueError:
            continue
    raise ValueError(f"time {text!r} does not match HH:MM or HH:MM:SS")
