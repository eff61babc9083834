"""
Back-to-back slot layout for a multi-service booking.

Services run in the order given. Each one starts where the previous one
ended, except after a chemical service, where the cursor jumps forward by
the configured processing gap.

Usage:
    slots = compute_slots(
        "2025-01-06T09:00:00Z",
        [{"duration": 45, "category": "Tint"}, {"duration": 20, "category": "Blow Dry"}],
    )
    [(s.start_iso, s.end_iso) for s in slots]
    # [('2025-01-06T09:00:00.000Z', '2025-01-06T09:45:00.000Z'),
    #  ('2025-01-06T10:15:00.000Z', '2025-01-06T10:35:00.000Z')]
"""

import logging
import math
from collections.abc import Mapping, Sequence
from datetime import datetime, timedelta
from typing import Any, Optional

import pydantic

from salon_booking.config import settings
from salon_booking.exceptions import ValidationError
from salon_booking.scheduling.classifier import get_field, is_chemical
from salon_booking.schemas.booking_schema import BasketItem, ServiceRow, Slot
from salon_booking.utils import Instant, to_utc

logger = logging.getLogger(__name__)


def _coerce(model: type[pydantic.BaseModel], value: Any, label: str) -> Any:
    """Validate mappings into the given model; other shapes pass through."""
    if value is None or not isinstance(value, Mapping):
        return value
    try:
        return model.model_validate(value)
    except pydantic.ValidationError as exc:
        raise ValidationError(f"Invalid {label}: {exc.errors()[0]['msg']}") from exc


def require_start(start_instant: Optional[Instant]) -> datetime:
    """Parse the requested start, failing with a user-facing message."""
    if start_instant is None or start_instant == "":
        raise ValidationError("Pick a valid new date/time.")
    return to_utc(start_instant)


def resolve_duration(
    row: Any,
    basket_item: Any = None,
    min_minutes: Optional[int] = None,
) -> float:
    """Minutes for one service: row duration, then basket display/duration.

    Floored at ``min_minutes`` so no slot is zero-length or inverted.
    """
    floor = settings.scheduling.min_service_minutes if min_minutes is None else min_minutes
    raw = get_field(row, "duration")
    if raw is None:
        raw = get_field(basket_item, "display_duration")
    if raw is None and isinstance(basket_item, Mapping):
        raw = basket_item.get("displayDuration")
    if raw is None:
        raw = get_field(basket_item, "duration")
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raw = 0

    try:
        minutes = float(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid service duration: {raw!r}") from None
    if not math.isfinite(minutes):
        raise ValidationError(f"Invalid service duration: {raw!r}")
    return max(floor, minutes)


def _advance(instant: datetime, minutes: float) -> datetime:
    try:
        return instant + timedelta(minutes=minutes)
    except OverflowError:
        raise ValidationError("Service durations run past the supported date range") from None


def _gap_subject(row: Any, basket_item: Any) -> Any:
    """The value classified for gap insertion: the basket item when present."""
    if basket_item is not None:
        return basket_item
    title = get_field(row, "title")
    return {
        "name": get_field(row, "name") or title,
        "title": title,
        "category": get_field(row, "category"),
    }


def compute_slots(
    start_instant: Optional[Instant],
    ordered_rows: Sequence[Any],
    basket_items: Optional[Sequence[Any]] = None,
    chemical_gap_minutes: Optional[float] = None,
) -> list[Slot]:
    """Lay out one slot per service row, in input order.

    Raises:
        ValidationError: no rows, a missing/invalid start, a negative gap
            or an unusable duration.
    """
    if not ordered_rows:
        raise ValidationError("No booking rows found to reschedule.")
    cursor = require_start(start_instant)

    gap_minutes = (
        settings.scheduling.chemical_gap_minutes
        if chemical_gap_minutes is None
        else chemical_gap_minutes
    )
    if not math.isfinite(gap_minutes) or gap_minutes < 0:
        raise ValidationError(f"Chemical gap must be >= 0 minutes, got {gap_minutes}")

    basket = list(basket_items or [])
    slots: list[Slot] = []

    for index, raw_row in enumerate(ordered_rows):
        row = _coerce(ServiceRow, raw_row, f"service row {index}")
        basket_item = _coerce(
            BasketItem, basket[index] if index < len(basket) else None, f"basket item {index}"
        )

        duration = resolve_duration(row, basket_item)
        end = _advance(cursor, duration)
        slots.append(Slot(start=cursor, end=end))

        if is_chemical(_gap_subject(row, basket_item)):
            logger.debug("Row %d is chemical, adding %s min gap", index, gap_minutes)
            cursor = _advance(end, gap_minutes)
        else:
            cursor = end

    logger.debug(
        "Planned %d slot(s) from %s to %s",
        len(slots), slots[0].start_iso, slots[-1].end_iso,
    )
    return slots
