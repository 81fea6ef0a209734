from __future__ import annotations

import datetime as dt
from collections.abc import Callable
from typing import Any

import pytest
from botocore.exceptions import ClientError

from zone_booking.config import Settings
from zone_booking.dal import BookingTable, PackageTable, ZoneTable
from zone_booking.models import Booking, BookingStatus
from zone_booking.service import BookingService

NOW = dt.datetime(2030, 6, 1, 12, 0, tzinfo=dt.UTC)
DAY = dt.date(2030, 6, 15)


class FakeTable:
    def __init__(self, key: str, page_size: int | None = None):
        self.key = key
        self.page_size = page_size
        self.items: dict[str, dict[str, Any]] = {}

    def put_item(self, Item, ConditionExpression=None):  # noqa NOSONAR
        exists = Item[self.key] in self.items
        if ConditionExpression == f"attribute_not_exists({self.key})" and exists:
            raise _conditional_failure("PutItem")
        if ConditionExpression == f"attribute_exists({self.key})" and not exists:
            raise _conditional_failure("PutItem")
        self.items[Item[self.key]] = dict(Item)

    def get_item(self, Key):  # noqa NOSONAR
        item = self.items.get(Key[self.key])
        return {"Item": dict(item)} if item else {}

    def update_item(self, **kwargs):
        key = kwargs["Key"][self.key]
        if kwargs.get("ConditionExpression") == f"attribute_exists({self.key})" and key not in self.items:
            raise _conditional_failure("UpdateItem")
        # like DynamoDB, an unconditional update creates the item
        attrs = self.items.setdefault(key, {self.key: key})
        eav = kwargs.get("ExpressionAttributeValues") or {}
        ean = kwargs.get("ExpressionAttributeNames") or {}
        set_part = kwargs["UpdateExpression"].split("SET", 1)[1]
        for assign in [s.strip() for s in set_part.split(",") if s.strip()]:
            name, val = [s.strip() for s in assign.split("=")]
            attrs[ean.get(name, name)] = eav[val]
        return {"Attributes": dict(attrs)}

    def delete_item(self, Key):  # noqa NOSONAR
        self.items.pop(Key[self.key], None)

    def scan(self, **kwargs):
        return self._page(list(self.items.values()), kwargs)

    def query(self, **kwargs):
        attribute = kwargs["KeyConditionExpression"].split("=")[0].strip()
        value = kwargs["ExpressionAttributeValues"][":v"]
        matching = [it for it in self.items.values() if it.get(attribute) == value]
        return self._page(matching, kwargs)

    def _page(self, items: list[dict[str, Any]], kwargs: dict[str, Any]) -> dict[str, Any]:
        start = (kwargs.get("ExclusiveStartKey") or {}).get("offset", 0)
        if self.page_size is None:
            return {"Items": [dict(it) for it in items[start:]]}
        end = start + self.page_size
        resp: dict[str, Any] = {"Items": [dict(it) for it in items[start:end]]}
        if end < len(items):
            resp["LastEvaluatedKey"] = {"offset": end}
        return resp


def _conditional_failure(operation: str) -> ClientError:
    return ClientError(
        {"Error": {"Code": "ConditionalCheckFailedException", "Message": "condition failed"}},
        operation,
    )


@pytest.fixture()
def booking_items() -> FakeTable:
    return FakeTable("booking_id")


@pytest.fixture()
def zone_items() -> FakeTable:
    table = FakeTable("zone_id")
    table.items["A"] = {"zone_id": "A", "name": "Hall A", "capacity_limit": 10}
    table.items["B"] = {"zone_id": "B", "name": "Hall B", "capacity_limit": 4}
    return table


@pytest.fixture()
def package_items() -> FakeTable:
    table = FakeTable("package_id")
    table.items["p1"] = {"package_id": "p1", "name": "Standard"}
    return table


@pytest.fixture()
def booking_table(booking_items: FakeTable) -> BookingTable:
    return BookingTable(booking_items)


@pytest.fixture()
def settings() -> Settings:
    return Settings()


@pytest.fixture()
def service(
    booking_table: BookingTable,
    zone_items: FakeTable,
    package_items: FakeTable,
    settings: Settings,
) -> BookingService:
    return BookingService(
        booking_table,
        ZoneTable(zone_items),
        PackageTable(package_items),
        settings,
        clock=lambda: NOW,
    )


@pytest.fixture()
def booking_factory() -> Callable[..., Booking]:
    counter = iter(range(1, 10_000))

    def make(**overrides: Any) -> Booking:
        base: dict[str, Any] = dict(
            booking_id=f"b-{next(counter)}",
            zone_id="A",
            user_id="u-1",
            package_id="p1",
            party_size=10,
            status=BookingStatus.TEMPORARY_RESERVED,
            date=DAY,
            start_time=dt.time(10, 0),
            end_time=dt.time(12, 0),
        )
        base.update(overrides)
        return Booking(**base)

    return make
