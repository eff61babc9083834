"""Service, slot, booking and availability data models."""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from salon_booking.utils import to_iso_z, to_utc


def _blank_as_zero(value):
    """Blank duration strings count as 0 minutes, like a missing number."""
    if isinstance(value, str) and not value.strip():
        return 0
    return value


class ServiceRow(BaseModel):
    """One booked service, in the order it will be performed."""
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: Optional[str] = None
    duration: Optional[float] = None
    name: Optional[str] = None
    title: Optional[str] = None
    category: Optional[str] = None

    @field_validator("duration", mode="before")
    @classmethod
    def _blank_duration_is_zero(cls, value):
        return _blank_as_zero(value)


class BasketItem(BaseModel):
    """Display-side companion of a ServiceRow, used as a fallback."""
    model_config = ConfigDict(populate_by_name=True)

    display_duration: Optional[float] = Field(default=None, alias="displayDuration")
    duration: Optional[float] = None
    name: Optional[str] = None
    title: Optional[str] = None
    category: Optional[str] = None

    @field_validator("display_duration", "duration", mode="before")
    @classmethod
    def _blank_duration_is_zero(cls, value):
        return _blank_as_zero(value)


class Slot(BaseModel):
    """A computed [start, end) interval for one service. Never persisted here."""
    start: datetime
    end: datetime

    @field_validator("start", "end", mode="after")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return to_utc(value)

    @model_validator(mode="after")
    def _end_after_start(self) -> "Slot":
        if self.end <= self.start:
            raise ValueError("slot end must be after slot start")
        return self

    @property
    def start_iso(self) -> str:
        return to_iso_z(self.start)

    @property
    def end_iso(self) -> str:
        return to_iso_z(self.end)

    @property
    def duration_minutes(self) -> float:
        return (self.end - self.start) / timedelta(minutes=1)


class BookingRecord(BaseModel):
    """Existing booking row, read-only from the core's point of view."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    resource_id: str
    start: datetime
    end: datetime


class ScheduleBlockRecord(BaseModel):
    """Blocked time for one staff member, or for everyone when staff_id is None."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    staff_id: Optional[str] = None
    start: datetime
    end: datetime
    is_active: bool = True
    is_locked: bool = False


class ConflictKind(str, Enum):
    """What kind of record blocked the requested slots."""

    BOOKING = "booking"
    SCHEDULE_BLOCK = "schedule_block"


class AvailabilityResult(BaseModel):
    """Outcome of a reschedule availability check."""
    ok: bool
    message: str = ""
    conflict: Optional[Union[BookingRecord, ScheduleBlockRecord]] = None
    conflict_kind: Optional[ConflictKind] = None
    slots: list[Slot] = Field(default_factory=list)
