"""Shared test fixtures and helpers."""

from datetime import datetime, timezone
from typing import Optional

import pytest

from salon_booking.schemas.booking_schema import ServiceRow
from salon_booking.storage.memory import InMemoryBookingStore

STYLIST = "staff-anna"
OTHER_STYLIST = "staff-ben"


@pytest.fixture
def store():
    memory_store = InMemoryBookingStore()
    yield memory_store
    memory_store.reset()


def utc(hour: int, minute: int = 0, day: int = 6) -> datetime:
    """Instant on 2025-01-<day> in UTC."""
    return datetime(2025, 1, day, hour, minute, tzinfo=timezone.utc)


def make_row(
    duration: Optional[float] = 30,
    category: Optional[str] = "Haircut",
    title: Optional[str] = None,
    name: Optional[str] = None,
    row_id: Optional[str] = None,
) -> ServiceRow:
    """Helper to create a ServiceRow."""
    return ServiceRow(id=row_id, duration=duration, category=category, title=title, name=name)
