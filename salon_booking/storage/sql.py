"""
SQL booking store on SQLAlchemy asyncio.

Each read is a single ``SELECT ... LIMIT 1``: resource-scoped, OR-ing the
half-open overlap predicate across every candidate slot and skipping the
bookings being moved.

The check is advisory. Another booking can land between a clean check and
the caller's insert. On PostgreSQL the authoritative guard is an exclusion
constraint on the bookings table:

    CREATE EXTENSION IF NOT EXISTS btree_gist;
    ALTER TABLE bookings ADD CONSTRAINT bookings_no_overlap
        EXCLUDE USING gist (resource_id WITH =, tstzrange(start, "end") WITH &&);
"""

import logging
from collections.abc import Sequence
from typing import Optional

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from salon_booking.config import settings
from salon_booking.exceptions import PersistenceError
from salon_booking.logging_context import get_check_logger
from salon_booking.schemas.booking_schema import BookingRecord, ScheduleBlockRecord, Slot
from salon_booking.storage.models import Base, BookingModel, ScheduleBlockModel
from salon_booking.utils import to_utc

logger = get_check_logger(__name__)


def create_engine_from_settings(url: Optional[str] = None, **kwargs) -> AsyncEngine:
    """Build an async engine from ``DATABASE_URL`` unless a url is given."""
    return create_async_engine(
        url or settings.database.database_url,
        echo=settings.database.echo,
        **kwargs,
    )


async def create_schema(engine: AsyncEngine) -> None:
    """Create the bookings and schedule_blocks tables if missing."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def _overlaps_any(model, slots: Sequence[Slot]):
    return or_(*[and_(model.start < s.end, model.end > s.start) for s in slots])


class SqlBookingStore:
    """BookingStore backed by an ``async_sessionmaker``."""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    @classmethod
    def from_engine(cls, engine: AsyncEngine) -> "SqlBookingStore":
        return cls(async_sessionmaker(bind=engine, expire_on_commit=False))

    async def _first(self, stmt, what: str):
        try:
            async with self.session_factory() as session:
                result = await session.scalars(stmt)
                return result.first()
        except SQLAlchemyError as exc:
            logger.error("Overlap query on %s failed: %s", what, exc)
            raise PersistenceError(f"Could not read {what}: {exc}") from exc

    async def find_overlapping(
        self,
        resource_id: str,
        slots: Sequence[Slot],
        exclude_ids: Sequence[str],
    ) -> list[BookingRecord]:
        stmt = (
            select(BookingModel)
            .where(BookingModel.resource_id == resource_id, _overlaps_any(BookingModel, slots))
            .limit(1)
        )
        if exclude_ids:
            stmt = stmt.where(BookingModel.id.not_in(list(exclude_ids)))

        row = await self._first(stmt, BookingModel.__tablename__)
        if row is None:
            return []
        return [
            BookingRecord(
                id=row.id,
                resource_id=row.resource_id,
                start=to_utc(row.start),
                end=to_utc(row.end),
            )
        ]

    async def find_overlapping_blocks(
        self,
        resource_id: str,
        slots: Sequence[Slot],
    ) -> list[ScheduleBlockRecord]:
        stmt = (
            select(ScheduleBlockModel)
            .where(
                ScheduleBlockModel.is_active.is_(True),
                or_(
                    ScheduleBlockModel.staff_id == resource_id,
                    ScheduleBlockModel.staff_id.is_(None),
                ),
                _overlaps_any(ScheduleBlockModel, slots),
            )
            .limit(1)
        )

        row = await self._first(stmt, ScheduleBlockModel.__tablename__)
        if row is None:
            return []
        return [
            ScheduleBlockRecord(
                id=row.id,
                staff_id=row.staff_id,
                start=to_utc(row.start),
                end=to_utc(row.end),
                is_active=row.is_active,
                is_locked=row.is_locked,
            )
        ]
