"""
Reschedule availability check.

Lays out the slots the caller is about to write, then asks the store
whether any *other* booking for the same stylist overlaps them. The
bookings being moved are excluded so a group never conflicts with itself.

The result is advisory: nothing stops a concurrent insert between this
check and the caller's write. See ``salon_booking.storage.sql`` for the
database-level constraint that closes that gap.
"""

from collections.abc import Sequence
from typing import Any, Optional

from salon_booking.config import settings
from salon_booking.exceptions import PersistenceError, ValidationError
from salon_booking.logging_context import check_scope, get_check_logger
from salon_booking.scheduling.classifier import get_field
from salon_booking.scheduling.slot_planner import compute_slots, require_start
from salon_booking.schemas.booking_schema import AvailabilityResult, ConflictKind
from salon_booking.storage.base import BookingStore
from salon_booking.utils import Instant

logger = get_check_logger(__name__)

BOOKING_CONFLICT_MESSAGE = (
    "That time isn't available for this stylist. Please pick another slot."
)
BLOCK_CONFLICT_MESSAGE = "That time is blocked (schedule block). Please choose another slot."


def collect_exclude_ids(
    ordered_rows: Sequence[Any], exclude_booking_ids: Optional[Sequence[Any]] = None
) -> list[str]:
    """Ids of the rows being moved plus any explicit ids, blanks dropped, deduplicated."""
    candidates = [get_field(row, "id") for row in ordered_rows]
    candidates.extend(exclude_booking_ids or [])
    return list(dict.fromkeys(str(c) for c in candidates if c))


def _validate_inputs(
    db: Optional[BookingStore],
    resource_id: Optional[str],
    start_instant: Optional[Instant],
    ordered_rows: Optional[Sequence[Any]],
) -> None:
    if db is None:
        raise ValidationError("No booking store supplied.")
    if not resource_id or not str(resource_id).strip():
        raise ValidationError("Pick a stylist.")
    require_start(start_instant)
    if not ordered_rows:
        raise ValidationError("No booking rows found to reschedule.")


async def check_reschedule_availability(
    db: Optional[BookingStore],
    resource_id: Optional[str],
    start_instant: Optional[Instant],
    ordered_rows: Optional[Sequence[Any]],
    basket_items: Optional[Sequence[Any]] = None,
    exclude_booking_ids: Optional[Sequence[Any]] = None,
    chemical_gap_minutes: Optional[float] = None,
    include_schedule_blocks: Optional[bool] = None,
) -> AvailabilityResult:
    """
    Check whether moving a booking group to ``start_instant`` is conflict-free.

    Returns ``AvailabilityResult(ok=True, slots=...)`` when clear, or
    ``ok=False`` with a message and the first conflicting record found.

    Raises:
        ValidationError: missing store, stylist, start or rows (before any read).
        PersistenceError: the store read failed.
    """
    _validate_inputs(db, resource_id, start_instant, ordered_rows)
    with check_scope():
        return await _run_check(
            db,
            resource_id,
            start_instant,
            ordered_rows,
            basket_items,
            exclude_booking_ids,
            chemical_gap_minutes,
            include_schedule_blocks,
        )


async def _run_check(
    db: BookingStore,
    resource_id: str,
    start_instant: Instant,
    ordered_rows: Sequence[Any],
    basket_items: Optional[Sequence[Any]],
    exclude_booking_ids: Optional[Sequence[Any]],
    chemical_gap_minutes: Optional[float],
    include_schedule_blocks: Optional[bool],
) -> AvailabilityResult:
    slots = compute_slots(start_instant, ordered_rows, basket_items, chemical_gap_minutes)
    exclude_ids = collect_exclude_ids(ordered_rows, exclude_booking_ids)
    logger.info(
        "Checking %d slot(s) for %s from %s, excluding %d booking(s)",
        len(slots), resource_id, slots[0].start_iso, len(exclude_ids),
    )

    try:
        hits = await db.find_overlapping(resource_id, slots, exclude_ids)
    except PersistenceError:
        logger.error("Booking overlap read failed for %s", resource_id)
        raise

    if hits:
        conflict = hits[0]
        logger.info(
            "Booking conflict for %s: %s (%s - %s)",
            resource_id, conflict.id, conflict.start.isoformat(), conflict.end.isoformat(),
        )
        return AvailabilityResult(
            ok=False,
            message=BOOKING_CONFLICT_MESSAGE,
            conflict=conflict,
            conflict_kind=ConflictKind.BOOKING,
            slots=slots,
        )

    check_blocks = (
        settings.scheduling.check_schedule_blocks
        if include_schedule_blocks is None
        else include_schedule_blocks
    )
    if check_blocks:
        try:
            blocks = await db.find_overlapping_blocks(resource_id, slots)
        except PersistenceError:
            logger.error("Schedule block read failed for %s", resource_id)
            raise
        if blocks:
            logger.info("Schedule block conflict for %s: %s", resource_id, blocks[0].id)
            return AvailabilityResult(
                ok=False,
                message=BLOCK_CONFLICT_MESSAGE,
                conflict=blocks[0],
                conflict_kind=ConflictKind.SCHEDULE_BLOCK,
                slots=slots,
            )

    return AvailabilityResult(ok=True, slots=slots)
