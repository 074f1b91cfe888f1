"""
Tabular store errors.

Repositories raise these instead of leaking client-library exceptions, so the
services can tell a failed read (recoverable under fail-open) from a failed
write (the row was never recorded).
"""

from __future__ import annotations

READ = "read"
WRITE = "write"


class StoreError(RuntimeError):
    """Base class for tabular store failures."""


class StoreUnavailableError(StoreError):
    """
    The store could not complete an operation (unreachable, rejected, transient).

    operation is "read" or "write".
    """

    retryable = True

    def __init__(self, message: str, *, operation: str, table: str | None = None) -> None:
        super().__init__(message)
        self.operation = operation
        self.table = table

    @property
    def is_read(self) -> bool:
        return self.operation == READ


class StoreTimeoutError(StoreUnavailableError):
    """The store did not answer within the configured timeout."""


__all__ = [
    "READ",
    "WRITE",
    "StoreError",
    "StoreUnavailableError",
    "StoreTimeoutError",
]
