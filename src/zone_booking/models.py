from __future__ import annotations

import datetime as dt
from enum import StrEnum

from pydantic import BaseModel, Field, model_validator

from .intervals import TimeInterval


class BookingStatus(StrEnum):
    TEMPORARY_RESERVED = "temporary_reserved"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    NO_ACTUAL = "no_actual"


# Statuses that hold a slot; everything else is ignored by scheduling.
ACTIVE_STATUSES = frozenset({BookingStatus.TEMPORARY_RESERVED, BookingStatus.CONFIRMED})


class Zone(BaseModel):
    zone_id: str
    name: str = ""
    capacity_limit: int = Field(..., gt=0)


class Package(BaseModel):
    package_id: str
    name: str = ""


class Booking(BaseModel):
    booking_id: str
    zone_id: str
    user_id: str
    package_id: str
    party_size: int = Field(..., gt=0)
    status: BookingStatus = BookingStatus.TEMPORARY_RESERVED
    date: dt.date
    start_time: dt.time
    end_time: dt.time

    @model_validator(mode="after")
    def _check_interval(self) -> Booking:
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(date=self.date, start_time=self.start_time, end_time=self.end_time)

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def same_schedule(self, other: Booking) -> bool:
        return (
            self.date == other.date
            and self.start_time == other.start_time
            and self.end_time == other.end_time
        )


class FreeSlot(TimeInterval):
    pass


class BookingCreate(BaseModel):
    user_id: str = Field(..., min_length=1)
    zone_id: str = Field(..., min_length=1)
    package_id: str = Field(..., min_length=1)
    # DD.MM.YYYY and HH:MM, parsed by the service so format errors share its error path
    date: str
    start_time: str
    end_time: str


class BookingCreated(BaseModel):
    booking_id: str


class BookingUpdate(BaseModel):
    zone_id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    package_id: str = Field(..., min_length=1)
    party_size: int = Field(..., gt=0)
    status: BookingStatus
    date: dt.date
    start_time: dt.time
    end_time: dt.time

    def to_booking(self, booking_id: str) -> Booking:
        return Booking(booking_id=booking_id, **self.model_dump())


class StatusChange(BaseModel):
    status: BookingStatus
