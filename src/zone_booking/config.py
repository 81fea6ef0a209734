from __future__ import annotations

import datetime as dt
from typing import Literal
from zoneinfo import ZoneInfo

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service settings, read from the Lambda environment."""

    bookings_table: str = Field(default="bookings", validation_alias="BOOKINGS_TABLE")
    zones_table: str = Field(default="zones", validation_alias="ZONES_TABLE")
    packages_table: str = Field(default="packages", validation_alias="PACKAGES_TABLE")
    timezone: str = Field(default="UTC", validation_alias="BOOKING_TIMEZONE")
    work_day_start: dt.time = Field(default=dt.time(8, 0), validation_alias="WORK_DAY_START")
    work_day_end: dt.time = Field(default=dt.time(23, 0), validation_alias="WORK_DAY_END")
    min_slot_minutes: int = Field(default=60, ge=1, validation_alias="MIN_SLOT_MINUTES")
    # "global" checks conflicts against every zone's bookings on the date
    conflict_scope: Literal["global", "zone"] = Field(
        default="global", validation_alias="CONFLICT_SCOPE"
    )
    empty_day_is_free: bool = Field(default=True, validation_alias="EMPTY_DAY_IS_FREE")
    duplicate_check_ignores_inactive: bool = Field(
        default=False, validation_alias="DUPLICATE_CHECK_IGNORES_INACTIVE"
    )

    model_config = SettingsConfigDict(
        frozen=True,
        populate_by_name=True,
        case_sensitive=False,
    )

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def min_slot_duration(self) -> dt.timedelta:
        return dt.timedelta(minutes=self.min_slot_minutes)
