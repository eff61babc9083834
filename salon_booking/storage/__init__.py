from salon_booking.storage.base import BookingStore, slots_overlap
from salon_booking.storage.memory import InMemoryBookingStore

__all__ = [
    "BookingStore",
    "InMemoryBookingStore",
    "slots_overlap",
]
