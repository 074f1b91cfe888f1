"""Request-id aware logging setup.

Every log record carries ``request_id`` so one submission can be traced from
the router through the booking guard and the mailer.

Usage:
    from config.logging_config import configure_logging, set_request_id

    configure_logging("INFO")
    set_request_id("c0ffee")
    logger.info("Booking stored")  # ... [c0ffee] bookings: Booking stored
"""

import logging
from contextvars import ContextVar

_request_id: ContextVar[str] = ContextVar("request_id", default="-")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s"


def set_request_id(request_id: str) -> None:
    """Set the correlation id for the current context."""
    _request_id.set(request_id)


def get_request_id() -> str:
    return _request_id.get()


class RequestIdFilter(logging.Filter):
    """Injects request_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()  # type: ignore[attr-defined]
        return True


def configure_logging(level: str = "INFO") -> None:
    """Install the root handler with the request-id filter attached."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())
