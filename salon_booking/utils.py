"""Shared time helpers used across the scheduling core."""

from datetime import datetime, timezone
from typing import Union

from salon_booking.exceptions import ValidationError

Instant = Union[datetime, str]


def to_utc(value: Instant) -> datetime:
    """Normalize an instant to an aware UTC datetime.

    Naive datetimes are taken to be UTC already. Strings are parsed as
    ISO-8601, with a trailing ``Z`` accepted.

    Examples:
        >>> to_utc("2025-01-06T09:00:00Z").isoformat()
        '2025-01-06T09:00:00+00:00'
        >>> to_utc(datetime(2025, 1, 6, 9, 0)).tzinfo is timezone.utc
        True
    """
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            raise ValidationError(f"Invalid ISO-8601 instant: {value!r}") from None
    if not isinstance(value, datetime):
        raise ValidationError(f"Expected a datetime or ISO-8601 string, got {value!r}")
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_iso_z(value: datetime) -> str:
    """Render an instant as UTC ISO-8601 with milliseconds and a ``Z`` suffix.

    Examples:
        >>> to_iso_z(datetime(2025, 1, 6, 9, 0, tzinfo=timezone.utc))
        '2025-01-06T09:00:00.000Z'
    """
    utc = to_utc(value)
    return f"{utc:%Y-%m-%dT%H:%M:%S}.{utc.microsecond // 1000:03d}Z"
