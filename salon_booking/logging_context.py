"""Correlation ID logging context for tracing availability checks.

Provides a check_id-aware logger that attaches a correlation ID to every
log message, so one reschedule attempt can be followed through the slot
planner, the availability checker and the booking store.

Usage:
    from salon_booking.logging_context import get_check_logger, set_check_id

    set_check_id("CHK-abc123")
    logger = get_check_logger(__name__)
    logger.info("Checking availability")  # record.check_id == "CHK-abc123"

    with check_scope() as check_id:
        ...  # every record in here carries a fresh check_id
"""

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

DEFAULT_CHECK_ID = "NO_CHECK_ID"

_check_id: ContextVar[str] = ContextVar("check_id", default=DEFAULT_CHECK_ID)


def set_check_id(check_id: str) -> None:
    """Set the correlation ID for the current async context."""
    _check_id.set(check_id)


def get_check_id() -> str:
    """Retrieve the current correlation ID."""
    return _check_id.get()


def _mint_check_id() -> str:
    return f"CHK-{uuid.uuid4().hex[:8]}"


def new_check_id() -> str:
    """Generate a fresh correlation ID and make it current."""
    check_id = _mint_check_id()
    _check_id.set(check_id)
    return check_id


@contextmanager
def check_scope() -> Iterator[str]:
    """Give one availability check its own correlation ID.

    The previous ID is restored on exit, so nested or back-to-back checks
    in the same context never share an ID.
    """
    token = _check_id.set(_mint_check_id())
    try:
        yield _check_id.get()
    finally:
        _check_id.reset(token)


class CheckIdFilter(logging.Filter):
    """Injects check_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.check_id = _check_id.get()  # type: ignore[attr-defined]
        return True


def get_check_logger(name: str) -> logging.Logger:
    """Return a logger with the CheckIdFilter attached.

    The filter adds ``check_id`` to each record so formatters can
    include ``%(check_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, CheckIdFilter) for f in logger.filters):
        logger.addFilter(CheckIdFilter())
    return logger
