from salon_booking.scheduling.availability import check_reschedule_availability
from salon_booking.scheduling.classifier import CHEMICAL_KEYWORDS, is_chemical
from salon_booking.scheduling.slot_planner import compute_slots, resolve_duration

__all__ = [
    "CHEMICAL_KEYWORDS",
    "is_chemical",
    "resolve_duration",
    "compute_slots",
    "check_reschedule_availability",
]
