"""
HTTP error mapping for store failures.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException

from api.models import error_detail
from repositories.errors import StoreUnavailableError
from services.booking_service import STORE_UNAVAILABLE

logger = logging.getLogger(__name__)

# Seconds a client should wait before retrying after a store outage.
RETRY_AFTER_SECONDS = 5


def store_unavailable(
    error: StoreUnavailableError | None = None,
    message: str = "The service is temporarily unavailable. Please try again shortly.",
) -> HTTPException:
    """503 with Retry-After for a failed or timed-out store call."""
    if error is not None:
        logger.error(
            "Store unavailable",
            extra={"operation": error.operation, "table": error.table, "error": str(error)},
        )
    return HTTPException(
        status_code=503,
        detail=error_detail(STORE_UNAVAILABLE, message),
        headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
    )
