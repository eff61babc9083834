"""Appointment-slot planning and conflict detection for salon bookings."""

from salon_booking.exceptions import PersistenceError, SchedulingError, ValidationError
from salon_booking.scheduling import (
    check_reschedule_availability,
    compute_slots,
    is_chemical,
    resolve_duration,
)
from salon_booking.schemas import AvailabilityResult, Slot

__all__ = [
    "check_reschedule_availability",
    "compute_slots",
    "is_chemical",
    "resolve_duration",
    "AvailabilityResult",
    "Slot",
    "SchedulingError",
    "ValidationError",
    "PersistenceError",
]
