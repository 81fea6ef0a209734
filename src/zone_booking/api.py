import datetime as dt
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache
from http import HTTPStatus
from typing import Annotated, TypeVar

from aws_lambda_powertools import Logger, Tracer
from aws_lambda_powertools.metrics import Metrics, MetricUnit
from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse
from starlette.responses import Response

from zone_booking import dal
from zone_booking.config import Settings
from zone_booking.errors import NOT_FOUND_KINDS, ErrorKind, Result
from zone_booking.intervals import parse_date, parse_time
from zone_booking.models import (
    Booking,
    BookingCreate,
    BookingCreated,
    BookingStatus,
    BookingUpdate,
    FreeSlot,
    StatusChange,
)
from zone_booking.service import BookingService

logger = Logger()
tracer = Tracer()
metrics = Metrics(namespace="BookingAPI")

app = FastAPI(title="Zone Booking API", version="0.2.0")

T = TypeVar("T")

_CONFLICT_KINDS = {
    ErrorKind.BOOKING_ALREADY_EXISTS,
    ErrorKind.BOOKING_CONFLICT,
    ErrorKind.INVALID_STATUS_TRANSITION,
}


@lru_cache(maxsize=1)
def get_service() -> BookingService:
    settings = Settings()
    bookings, zones, packages = dal.connect(settings)
    return BookingService(bookings, zones, packages, settings)


ServiceDep = Annotated[BookingService, Depends(get_service)]


@dataclass
class BookingRequestError(Exception):
    kind: ErrorKind
    message: str

    @property
    def status_code(self) -> HTTPStatus:
        if self.kind in NOT_FOUND_KINDS:
            return HTTPStatus.NOT_FOUND
        if self.kind in _CONFLICT_KINDS:
            return HTTPStatus.CONFLICT
        return HTTPStatus.UNPROCESSABLE_ENTITY


@app.exception_handler(BookingRequestError)
async def booking_error_handler(request: Request, exc: BookingRequestError) -> JSONResponse:
    logger.info("Request rejected", extra={"kind": str(exc.kind), "path": request.url.path})
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "kind": str(exc.kind)},
    )


def _unwrap(result: Result[T]) -> T:
    if result.error is not None:
        raise BookingRequestError(result.error.kind, result.error.message)
    return result.value  # type: ignore[return-value]


def _parse_query(parse: Callable[[str], T], value: str, name: str) -> T:
    try:
        return parse(value)
    except ValueError as exc:
        raise BookingRequestError(ErrorKind.INVALID_FORMAT, f"Invalid {name}: {exc}") from exc


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/bookings", response_model=BookingCreated, status_code=201)
@tracer.capture_method
def create_booking(payload: BookingCreate, service: ServiceDep) -> BookingCreated:
    booking_id = _unwrap(
        service.create(
            user_id=payload.user_id,
            zone_id=payload.zone_id,
            package_id=payload.package_id,
            date=payload.date,
            start_time=payload.start_time,
            end_time=payload.end_time,
        )
    )
    metrics.add_metric(name="CreateBooking", value=1, unit=MetricUnit.Count)
    return BookingCreated(booking_id=booking_id)


@app.get("/bookings", response_model=list[Booking])
@tracer.capture_method
def list_bookings(service: ServiceDep) -> list[Booking]:
    return service.list_all()


@app.get("/bookings/{booking_id}", response_model=Booking)
@tracer.capture_method
def get_booking(booking_id: str, service: ServiceDep) -> Booking:
    return _unwrap(service.get(booking_id))


@app.put("/bookings/{booking_id}", response_model=Booking)
@tracer.capture_method
def update_booking(booking_id: str, payload: BookingUpdate, service: ServiceDep) -> Booking:
    return _unwrap(service.update(payload.to_booking(booking_id)))


@app.post("/bookings/{booking_id}/status", response_model=Booking)
@tracer.capture_method
def change_booking_status(booking_id: str, payload: StatusChange, service: ServiceDep) -> Booking:
    return _unwrap(service.change_status(booking_id, payload.status))


@app.post("/bookings/{booking_id}/cancel", response_model=Booking)
@tracer.capture_method
def cancel_booking(booking_id: str, service: ServiceDep) -> Booking:
    booking = _unwrap(service.change_status(booking_id, BookingStatus.CANCELLED))
    metrics.add_metric(name="CancelBooking", value=1, unit=MetricUnit.Count)
    return booking


@app.delete("/bookings/{booking_id}")
@tracer.capture_method
def delete_booking(booking_id: str, service: ServiceDep) -> Response:
    _unwrap(service.remove(booking_id))
    return Response(status_code=204)


@app.get("/users/{user_id}/bookings", response_model=list[Booking])
@tracer.capture_method
def list_user_bookings(user_id: str, service: ServiceDep) -> list[Booking]:
    return service.list_by_user(user_id)


@app.get("/zones/{zone_id}/bookings", response_model=list[Booking])
@tracer.capture_method
def list_zone_bookings(zone_id: str, service: ServiceDep) -> list[Booking]:
    return service.list_by_zone(zone_id)


@app.get("/zones/{zone_id}/free-slots", response_model=list[FreeSlot])
@tracer.capture_method
def list_free_slots(
    zone_id: str,
    service: ServiceDep,
    date: Annotated[str, Query(description="DD.MM.YYYY")],
) -> list[FreeSlot]:
    day: dt.date = _parse_query(parse_date, date, "date")
    return service.free_slots(zone_id, day)


@app.get("/availability")
@tracer.capture_method
def check_availability(
    service: ServiceDep,
    date: Annotated[str, Query(description="DD.MM.YYYY")],
    start_time: Annotated[str, Query(description="HH:MM")],
    end_time: Annotated[str, Query(description="HH:MM")],
    zone_id: str | None = None,
) -> dict[str, bool]:
    day = _parse_query(parse_date, date, "date")
    start = _parse_query(parse_time, start_time, "start_time")
    end = _parse_query(parse_time, end_time, "end_time")
    if start >= end:
        raise BookingRequestError(ErrorKind.INVALID_INTERVAL, "start_time must be before end_time")
    return {"free": service.is_free(day, start, end, zone_id=zone_id)}
