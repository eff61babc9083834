"""Read contract the availability checker needs from a booking store."""

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol, runtime_checkable

from salon_booking.schemas.booking_schema import BookingRecord, ScheduleBlockRecord, Slot


def slots_overlap(
    a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime
) -> bool:
    """Half-open interval overlap. Touching endpoints do not overlap."""
    return a_start < b_end and a_end > b_start


@runtime_checkable
class BookingStore(Protocol):
    """Filtered reads over bookings and schedule blocks.

    Both reads are existence checks: implementations return at most one
    row and raise ``PersistenceError`` when the backend fails.
    """

    async def find_overlapping(
        self,
        resource_id: str,
        slots: Sequence[Slot],
        exclude_ids: Sequence[str],
    ) -> list[BookingRecord]:
        """Bookings for ``resource_id`` overlapping any slot, minus ``exclude_ids``."""
        ...

    async def find_overlapping_blocks(
        self,
        resource_id: str,
        slots: Sequence[Slot],
    ) -> list[ScheduleBlockRecord]:
        """Active blocks for ``resource_id`` or for everyone overlapping any slot."""
        ...
