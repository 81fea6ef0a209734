from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorKind(StrEnum):
    BOOKING_NOT_FOUND = "BookingNotFound"
    ZONE_NOT_FOUND = "ZoneNotFound"
    PACKAGE_NOT_FOUND = "PackageNotFound"
    BOOKING_ALREADY_EXISTS = "BookingAlreadyExists"
    BOOKING_CONFLICT = "BookingConflict"
    INVALID_STATUS_TRANSITION = "InvalidStatusTransition"
    BOOKING_EXCEEDS_LIMIT = "BookingExceedsLimit"
    BOOKING_IMMUTABLE_FIELD_CHANGED = "BookingImmutableFieldChanged"
    INVALID_FORMAT = "InvalidFormat"
    INVALID_INTERVAL = "InvalidInterval"


NOT_FOUND_KINDS = frozenset(
    {ErrorKind.BOOKING_NOT_FOUND, ErrorKind.ZONE_NOT_FOUND, ErrorKind.PACKAGE_NOT_FOUND}
)


@dataclass(frozen=True)
class BookingError:
    kind: ErrorKind
    message: str
    booking_id: str | None = None
    requested_status: str | None = None


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a service call: either a value or a typed, non-retriable error."""

    value: T | None = None
    error: BookingError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T | None = None) -> Result[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str, **context: str | None) -> Result[T]:
        return cls(error=BookingError(kind=kind, message=message, **context))
