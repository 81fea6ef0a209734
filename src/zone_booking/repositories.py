from __future__ import annotations

from typing import Protocol

from .models import Booking, Package, Zone


class BookingRepository(Protocol):
    """Storage boundary for bookings. Storage errors are raised, never wrapped."""

    def get_all(self) -> list[Booking]: ...

    def get_by_user(self, user_id: str) -> list[Booking]: ...

    def get_by_zone(self, zone_id: str) -> list[Booking]: ...

    def get_by_id(self, booking_id: str) -> Booking | None: ...

    def get_by_user_and_zone(self, user_id: str, zone_id: str) -> list[Booking]: ...

    def insert(self, booking: Booking) -> None: ...

    def update(self, booking: Booking) -> None: ...

    def mark_no_actual(self, booking_id: str) -> None: ...

    def delete(self, booking_id: str) -> None: ...


class ZoneRepository(Protocol):
    def get_by_id(self, zone_id: str) -> Zone | None: ...


class PackageRepository(Protocol):
    def get_by_id(self, package_id: str) -> Package | None: ...
