from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from salon_booking.config import settings
from salon_booking.utils import to_utc


class UTCDateTime(TypeDecorator):
    """Timestamp stored as UTC and read back tagged as UTC.

    SQLite keeps no offset, so aware values are converted before binding
    and naive values coming back are UTC by construction.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        return to_utc(value)

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Base(DeclarativeBase):
    pass


class BookingModel(Base):
    __tablename__ = settings.database.bookings_table

    id: Mapped[str] = mapped_column(String, primary_key=True)
    resource_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    start: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    end: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)


class ScheduleBlockModel(Base):
    __tablename__ = settings.database.schedule_blocks_table

    id: Mapped[str] = mapped_column(String, primary_key=True)
    # NULL staff_id blocks the whole salon
    staff_id: Mapped[Optional[str]] = mapped_column(String, nullable=True, index=True)
    start: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    end: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
