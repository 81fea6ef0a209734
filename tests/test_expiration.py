from __future__ import annotations

import datetime as dt
from collections.abc import Callable
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from conftest import FakeTable
from zone_booking import expiration
from zone_booking.dal import BookingTable
from zone_booking.expiration import is_expired, sweep
from zone_booking.models import Booking, BookingStatus

NOW = dt.datetime(2030, 6, 15, 12, 0, tzinfo=dt.UTC)


def t(text: str) -> dt.time:
    return dt.time.fromisoformat(text)


def test_is_expired_at_end_boundary(booking_factory: Callable[..., Booking]) -> None:
    booking = booking_factory(start_time=t("10:00"), end_time=t("12:00"))
    assert is_expired(booking, NOW)
    assert not is_expired(booking, NOW - dt.timedelta(seconds=1))


def test_running_booking_is_not_expired(booking_factory: Callable[..., Booking]) -> None:
    assert not is_expired(booking_factory(start_time=t("11:00"), end_time=t("13:00")), NOW)


def test_sweep_marks_and_persists_elapsed_bookings(
    booking_factory: Callable[..., Booking], booking_table: BookingTable
) -> None:
    elapsed = booking_factory(start_time=t("09:00"), end_time=t("10:00"), status=BookingStatus.CONFIRMED)
    upcoming = booking_factory(start_time=t("18:00"), end_time=t("19:00"))
    for b in (elapsed, upcoming):
        booking_table.insert(b)

    swept = sweep([elapsed, upcoming], booking_table, NOW)

    assert [b.status for b in swept] == [BookingStatus.NO_ACTUAL, BookingStatus.TEMPORARY_RESERVED]
    stored = booking_table.get_by_id(elapsed.booking_id)
    assert stored is not None
    assert stored.status is BookingStatus.NO_ACTUAL
    assert elapsed.status is BookingStatus.CONFIRMED


def test_sweep_is_idempotent(booking_factory: Callable[..., Booking]) -> None:
    repository = MagicMock()
    bookings = [
        booking_factory(date=dt.date(2030, 6, 1)),
        booking_factory(start_time=t("20:00"), end_time=t("21:00")),
        booking_factory(date=dt.date(2030, 6, 2), status=BookingStatus.CANCELLED),
    ]

    once = sweep(bookings, repository, NOW)
    twice = sweep(once, repository, NOW)

    assert [b.status for b in once] == [b.status for b in twice]
    assert repository.mark_no_actual.call_count == 2


def test_failed_expiry_write_is_logged_and_read_succeeds(
    booking_factory: Callable[..., Booking], monkeypatch: pytest.MonkeyPatch
) -> None:
    fake_logger = MagicMock()
    monkeypatch.setattr(expiration, "logger", fake_logger)
    repository = MagicMock()
    repository.mark_no_actual.side_effect = ClientError(
        {"Error": {"Code": "ProvisionedThroughputExceededException", "Message": "slow down"}},
        "UpdateItem",
    )
    booking = booking_factory(date=dt.date(2030, 6, 1))

    swept = sweep([booking], repository, NOW)

    assert swept[0].status is BookingStatus.NO_ACTUAL
    repository.mark_no_actual.assert_called_once_with(booking.booking_id)
    fake_logger.exception.assert_called_once()
    args, kwargs = fake_logger.exception.call_args
    assert args[0] == "Failed to persist booking expiry"
    assert kwargs["extra"] == {"booking_id": booking.booking_id}
    fake_logger.info.assert_not_called()


def test_sweep_of_booking_deleted_meanwhile_leaves_no_partial_item(
    booking_factory: Callable[..., Booking], booking_table: BookingTable, booking_items: FakeTable
) -> None:
    booking = booking_factory(date=dt.date(2030, 6, 1))
    booking_table.insert(booking)
    fetched = booking_table.get_all()
    booking_table.delete(booking.booking_id)

    swept = sweep(fetched, booking_table, NOW)

    assert [b.status for b in swept] == [BookingStatus.NO_ACTUAL]
    assert booking_items.items == {}
    assert booking_table.get_all() == []
