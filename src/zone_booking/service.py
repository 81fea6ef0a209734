from __future__ import annotations

import datetime as dt
import uuid
from collections.abc import Callable, Iterable

from aws_lambda_powertools import Logger

from . import conflicts, expiration, slots
from .config import Settings
from .errors import ErrorKind, Result
from .intervals import parse_date, parse_time
from .models import Booking, BookingStatus, FreeSlot
from .repositories import BookingRepository, PackageRepository, ZoneRepository
from .status import change_status, is_suitable_transition

logger = Logger()

Clock = Callable[[], dt.datetime]


class BookingService:
    """Booking use cases on top of the repository collaborators.

    Every method that returns bookings runs the expiration sweep first, so a
    caller never sees an elapsed booking in an active status. Business failures
    come back as ``Result`` errors; storage errors are raised unchanged.
    """

    def __init__(
        self,
        bookings: BookingRepository,
        zones: ZoneRepository,
        packages: PackageRepository,
        settings: Settings | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._bookings = bookings
        self._zones = zones
        self._packages = packages
        self._settings = settings or Settings()
        self._clock = clock or (lambda: dt.datetime.now(self._settings.tz))

    def _fresh(self, bookings: Iterable[Booking]) -> list[Booking]:
        return expiration.sweep(bookings, self._bookings, self._clock())

    def list_all(self) -> list[Booking]:
        return self._fresh(self._bookings.get_all())

    def list_by_user(self, user_id: str) -> list[Booking]:
        return self._fresh(self._bookings.get_by_user(user_id))

    def list_by_zone(self, zone_id: str) -> list[Booking]:
        return self._fresh(self._bookings.get_by_zone(zone_id))

    def get(self, booking_id: str) -> Result[Booking]:
        booking = self._bookings.get_by_id(booking_id)
        if booking is None:
            return _not_found(booking_id)
        return Result.success(self._fresh([booking])[0])

    def free_slots(self, zone_id: str, date: dt.date) -> list[FreeSlot]:
        s = self._settings
        return slots.free_slots(
            date,
            self.list_by_zone(zone_id),
            day_start=s.work_day_start,
            day_end=s.work_day_end,
            min_duration=s.min_slot_duration,
            empty_day_is_free=s.empty_day_is_free,
        )

    def is_free(
        self,
        date: dt.date,
        start_time: dt.time,
        end_time: dt.time,
        zone_id: str | None = None,
    ) -> bool:
        return conflicts.is_free(
            date,
            start_time,
            end_time,
            self._fresh(self._conflict_candidates(zone_id)),
            empty_day_is_free=self._settings.empty_day_is_free,
        )

    def _conflict_candidates(self, zone_id: str | None) -> list[Booking]:
        if self._settings.conflict_scope == "zone" and zone_id is not None:
            return self._bookings.get_by_zone(zone_id)
        return self._bookings.get_all()

    def _slot_is_free(self, booking: Booking) -> bool:
        others = [
            b for b in self._conflict_candidates(booking.zone_id) if b.booking_id != booking.booking_id
        ]
        return conflicts.is_free(
            booking.date,
            booking.start_time,
            booking.end_time,
            self._fresh(others),
            empty_day_is_free=self._settings.empty_day_is_free,
        )

    def create(
        self,
        user_id: str,
        zone_id: str,
        package_id: str,
        date: str,
        start_time: str,
        end_time: str,
    ) -> Result[str]:
        try:
            day = parse_date(date)
            start = parse_time(start_time)
            end = parse_time(end_time)
        except ValueError as exc:
            return Result.failure(ErrorKind.INVALID_FORMAT, str(exc))
        if start >= end:
            return Result.failure(
                ErrorKind.INVALID_INTERVAL, f"Start {start_time} is not before end {end_time}"
            )

        zone = self._zones.get_by_id(zone_id)
        if zone is None:
            return Result.failure(ErrorKind.ZONE_NOT_FOUND, f"Zone {zone_id} not found")
        if self._packages.get_by_id(package_id) is None:
            return Result.failure(ErrorKind.PACKAGE_NOT_FOUND, f"Package {package_id} not found")

        held = [b for b in self._bookings.get_by_user_and_zone(user_id, zone_id) if b.date == day]
        if self._settings.duplicate_check_ignores_inactive:
            held = [b for b in self._fresh(held) if b.is_active]
        if held:
            return Result.failure(
                ErrorKind.BOOKING_ALREADY_EXISTS,
                f"User {user_id} already holds a booking for zone {zone_id} on {day}",
                booking_id=held[0].booking_id,
            )

        if not self.is_free(day, start, end, zone_id=zone_id):
            return Result.failure(
                ErrorKind.BOOKING_CONFLICT,
                f"Zone {zone_id} is fully or partially reserved on {day} from {start_time} to {end_time}",
            )

        booking = Booking(
            booking_id=str(uuid.uuid4()),
            zone_id=zone_id,
            user_id=user_id,
            package_id=package_id,
            party_size=zone.capacity_limit,
            status=BookingStatus.TEMPORARY_RESERVED,
            date=day,
            start_time=start,
            end_time=end,
        )
        self._bookings.insert(booking)
        logger.info("Booking created", extra={"booking_id": booking.booking_id, "zone_id": zone_id})
        return Result.success(booking.booking_id)

    def change_status(self, booking_id: str, status: BookingStatus) -> Result[Booking]:
        current = self.get(booking_id)
        if not current.ok or current.value is None:
            return current
        changed = change_status(current.value, status)
        if changed.ok and changed.value is not None:
            self._bookings.update(changed.value)
            logger.info(
                "Booking status changed",
                extra={"booking_id": booking_id, "status": str(status)},
            )
        return changed

    def update(self, booking: Booking) -> Result[Booking]:
        stored = self._bookings.get_by_id(booking.booking_id)
        if stored is None:
            return _not_found(booking.booking_id)

        zone = self._zones.get_by_id(booking.zone_id)
        moved = booking.zone_id != stored.zone_id
        if moved and zone is None:
            return Result.failure(
                ErrorKind.ZONE_NOT_FOUND, f"Zone {booking.zone_id} not found", booking_id=booking.booking_id
            )
        if booking.package_id != stored.package_id and self._packages.get_by_id(booking.package_id) is None:
            return Result.failure(
                ErrorKind.PACKAGE_NOT_FOUND,
                f"Package {booking.package_id} not found",
                booking_id=booking.booking_id,
            )
        if zone is not None and booking.party_size > zone.capacity_limit:
            return Result.failure(
                ErrorKind.BOOKING_EXCEEDS_LIMIT,
                f"Party of {booking.party_size} exceeds the limit of zone {zone.zone_id}",
                booking_id=booking.booking_id,
            )
        if not stored.same_schedule(booking):
            return Result.failure(
                ErrorKind.BOOKING_IMMUTABLE_FIELD_CHANGED,
                f"Date and time of booking {booking.booking_id} cannot be changed",
                booking_id=booking.booking_id,
            )
        if booking.status != stored.status and not is_suitable_transition(
            stored.status, booking.status
        ):
            return Result.failure(
                ErrorKind.INVALID_STATUS_TRANSITION,
                f"Booking {booking.booking_id} cannot move from {stored.status} to {booking.status}",
                booking_id=booking.booking_id,
                requested_status=str(booking.status),
            )
        # a booking moved to another zone must fit into that zone's schedule
        if moved and booking.is_active and not self._slot_is_free(booking):
            return Result.failure(
                ErrorKind.BOOKING_CONFLICT,
                f"Zone {booking.zone_id} is fully or partially reserved on {booking.date} "
                f"from {booking.start_time} to {booking.end_time}",
                booking_id=booking.booking_id,
            )

        self._bookings.update(booking)
        return Result.success(booking)

    def remove(self, booking_id: str) -> Result[None]:
        if self._bookings.get_by_id(booking_id) is None:
            return _not_found(booking_id)
        self._bookings.delete(booking_id)
        logger.info("Booking removed", extra={"booking_id": booking_id})
        return Result.success()


def _not_found(booking_id: str) -> Result:
    return Result.failure(
        ErrorKind.BOOKING_NOT_FOUND, f"Booking {booking_id} not found", booking_id=booking_id
    )
