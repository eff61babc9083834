"""
In-memory booking store.

Used by the test suite and local development. A production deployment
points the checker at ``SqlBookingStore`` instead.
"""

import logging
from collections.abc import Sequence
from datetime import datetime
from typing import Optional

from salon_booking.schemas.booking_schema import BookingRecord, ScheduleBlockRecord, Slot
from salon_booking.storage.base import slots_overlap
from salon_booking.utils import Instant, to_utc

logger = logging.getLogger(__name__)


class InMemoryBookingStore:
    """Bookings and schedule blocks held in dicts keyed by id."""

    def __init__(self) -> None:
        self._bookings: dict[str, BookingRecord] = {}
        self._blocks: dict[str, ScheduleBlockRecord] = {}

    def add_booking(
        self, booking_id: str, resource_id: str, start: Instant, end: Instant
    ) -> BookingRecord:
        record = BookingRecord(
            id=booking_id, resource_id=resource_id, start=to_utc(start), end=to_utc(end)
        )
        self._bookings[booking_id] = record
        logger.debug("Stored booking %s for %s", booking_id, resource_id)
        return record

    def add_block(
        self,
        block_id: str,
        start: Instant,
        end: Instant,
        staff_id: Optional[str] = None,
        is_active: bool = True,
        is_locked: bool = False,
    ) -> ScheduleBlockRecord:
        record = ScheduleBlockRecord(
            id=block_id,
            staff_id=staff_id,
            start=to_utc(start),
            end=to_utc(end),
            is_active=is_active,
            is_locked=is_locked,
        )
        self._blocks[block_id] = record
        return record

    def get_booking(self, booking_id: str) -> Optional[BookingRecord]:
        return self._bookings.get(booking_id)

    @staticmethod
    def _hits(start: datetime, end: datetime, slots: Sequence[Slot]) -> bool:
        return any(slots_overlap(start, end, s.start, s.end) for s in slots)

    async def find_overlapping(
        self,
        resource_id: str,
        slots: Sequence[Slot],
        exclude_ids: Sequence[str],
    ) -> list[BookingRecord]:
        excluded = set(exclude_ids)
        for booking in self._bookings.values():
            if booking.resource_id != resource_id or booking.id in excluded:
                continue
            if self._hits(booking.start, booking.end, slots):
                return [booking]
        return []

    async def find_overlapping_blocks(
        self,
        resource_id: str,
        slots: Sequence[Slot],
    ) -> list[ScheduleBlockRecord]:
        for block in self._blocks.values():
            if not block.is_active:
                continue
            if block.staff_id is not None and block.staff_id != resource_id:
                continue
            if self._hits(block.start, block.end, slots):
                return [block]
        return []

    def reset(self) -> None:
        """Clear all bookings and blocks. Used by test fixtures for isolation."""
        self._bookings.clear()
        self._blocks.clear()
