"""Error taxonomy for the scheduling core.

A scheduling conflict is not an error: it comes back as an
``AvailabilityResult`` with ``ok=False``. Only bad input and failed
store reads raise.
"""


class SchedulingError(Exception):
    """Base class for all scheduling core failures."""


class ValidationError(SchedulingError, ValueError):
    """Required input is missing or malformed. Raised before any I/O."""


class PersistenceError(SchedulingError):
    """A booking store read failed (connection, query or backend error)."""
