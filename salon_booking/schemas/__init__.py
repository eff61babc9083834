from salon_booking.schemas.booking_schema import (
    AvailabilityResult,
    BasketItem,
    BookingRecord,
    ConflictKind,
    ScheduleBlockRecord,
    ServiceRow,
    Slot,
)

__all__ = [
    "ServiceRow",
    "BasketItem",
    "Slot",
    "BookingRecord",
    "ScheduleBlockRecord",
    "ConflictKind",
    "AvailabilityResult",
]
