from __future__ import annotations

import datetime as dt
from typing import TYPE_CHECKING, Any, TypedDict, cast

import boto3
from aws_lambda_powertools import Logger

if TYPE_CHECKING:
    # Only for static type checking; not imported at runtime
    from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource
    from mypy_boto3_dynamodb.service_resource import Table as DynamoDBTable
else:
    # Fallbacks to satisfy annotations at runtime
    DynamoDBServiceResource = Any  # type: ignore[assignment]
    DynamoDBTable = Any  # type: ignore[assignment]

from .config import Settings
from .models import Booking, BookingStatus, Package, Zone

logger = Logger()

USER_INDEX = "user_id_index"
ZONE_INDEX = "zone_id_index"


class BookingItem(TypedDict):
    booking_id: str
    zone_id: str
    user_id: str
    package_id: str
    party_size: int
    status: str
    date: str
    start_time: str
    end_time: str


def _time_to_str(value: dt.time) -> str:
    return value.strftime("%H:%M:%S")


def _to_item(booking: Booking) -> BookingItem:
    return {
        "booking_id": booking.booking_id,
        "zone_id": booking.zone_id,
        "user_id": booking.user_id,
        "package_id": booking.package_id,
        "party_size": booking.party_size,
        "status": str(booking.status),
        "date": booking.date.isoformat(),
        "start_time": _time_to_str(booking.start_time),
        "end_time": _time_to_str(booking.end_time),
    }


def _to_model(item: dict[str, Any]) -> Booking:
    return Booking(
        booking_id=item["booking_id"],
        zone_id=item["zone_id"],
        user_id=item["user_id"],
        package_id=item["package_id"],
        # DynamoDB hands numbers back as Decimal
        party_size=int(item["party_size"]),
        status=item.get("status", BookingStatus.TEMPORARY_RESERVED),
        date=dt.date.fromisoformat(item["date"]),
        start_time=dt.time.fromisoformat(item["start_time"]),
        end_time=dt.time.fromisoformat(item["end_time"]),
    )


def _collect(call: Any, **kwargs: Any) -> list[dict[str, Any]]:
    """Run a scan/query, following LastEvaluatedKey until the last page."""
    items: list[dict[str, Any]] = []
    while True:
        resp = cast(dict[str, Any], call(**kwargs))
        items.extend(it for it in resp.get("Items", []) if isinstance(it, dict))
        last_key = resp.get("LastEvaluatedKey")
        if not last_key:
            return items
        kwargs["ExclusiveStartKey"] = last_key


class BookingTable:
    def __init__(self, table: DynamoDBTable) -> None:
        self._table = table

    def get_all(self) -> list[Booking]:
        return [_to_model(it) for it in _collect(self._table.scan)]

    def get_by_user(self, user_id: str) -> list[Booking]:
        return self._query(USER_INDEX, "user_id", user_id)

    def get_by_zone(self, zone_id: str) -> list[Booking]:
        return self._query(ZONE_INDEX, "zone_id", zone_id)

    def get_by_id(self, booking_id: str) -> Booking | None:
        resp = cast(dict[str, Any], self._table.get_item(Key={"booking_id": booking_id}))
        item = resp.get("Item")
        if not isinstance(item, dict):
            return None
        return _to_model(item)

    def get_by_user_and_zone(self, user_id: str, zone_id: str) -> list[Booking]:
        return [b for b in self.get_by_user(user_id) if b.zone_id == zone_id]

    def insert(self, booking: Booking) -> None:
        logger.info("Inserting booking", extra={"booking_id": booking.booking_id})
        self._table.put_item(
            Item=cast(dict[str, Any], _to_item(booking)),
            ConditionExpression="attribute_not_exists(booking_id)",
        )

    def update(self, booking: Booking) -> None:
        self._table.put_item(
            Item=cast(dict[str, Any], _to_item(booking)),
            ConditionExpression="attribute_exists(booking_id)",
        )

    def mark_no_actual(self, booking_id: str) -> None:
        self._table.update_item(
            Key={"booking_id": booking_id},
            UpdateExpression="SET #s = :s",
            ConditionExpression="attribute_exists(booking_id)",
            ExpressionAttributeNames={"#s": "status"},
            ExpressionAttributeValues={":s": str(BookingStatus.NO_ACTUAL)},
        )

    def delete(self, booking_id: str) -> None:
        self._table.delete_item(Key={"booking_id": booking_id})

    def _query(self, index: str, attribute: str, value: str) -> list[Booking]:
        items = _collect(
            self._table.query,
            IndexName=index,
            KeyConditionExpression=f"{attribute} = :v",
            ExpressionAttributeValues={":v": value},
        )
        return [_to_model(it) for it in items]


class ZoneTable:
    def __init__(self, table: DynamoDBTable) -> None:
        self._table = table

    def get_by_id(self, zone_id: str) -> Zone | None:
        resp = cast(dict[str, Any], self._table.get_item(Key={"zone_id": zone_id}))
        item = resp.get("Item")
        if not isinstance(item, dict):
            return None
        return Zone(
            zone_id=item["zone_id"],
            name=item.get("name", ""),
            capacity_limit=int(item["capacity_limit"]),
        )


class PackageTable:
    def __init__(self, table: DynamoDBTable) -> None:
        self._table = table

    def get_by_id(self, package_id: str) -> Package | None:
        resp = cast(dict[str, Any], self._table.get_item(Key={"package_id": package_id}))
        item = resp.get("Item")
        if not isinstance(item, dict):
            return None
        return Package(package_id=item["package_id"], name=item.get("name", ""))


def connect(settings: Settings) -> tuple[BookingTable, ZoneTable, PackageTable]:
    dynamodb: DynamoDBServiceResource = boto3.resource("dynamodb")
    return (
        BookingTable(dynamodb.Table(settings.bookings_table)),
        ZoneTable(dynamodb.Table(settings.zones_table)),
        PackageTable(dynamodb.Table(settings.packages_table)),
    )
