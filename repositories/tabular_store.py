"""
Tabular store contract (persistence boundary).

A tabular store holds ordered rows of scalar cells per table. It enforces no
schema beyond column order; TableSchema carries the layout.

insert_if_absent() is the single "check then append" capability. Backends
implement it as atomically as their storage allows, so the booking guard never
issues the read and the append as two unrelated calls.
"""

from __future__ import annotations

import threading
from typing import List, Protocol, Sequence, runtime_checkable

from domain.tables import TableSchema

Row = List[str]


@runtime_checkable
class TabularStore(Protocol):
    """Operations the services need from a tabular store."""

    def append_row(self, table: TableSchema, row: Sequence[str]) -> None:
        """
        Append one row.

        Raises:
            ValueError: if the row does not match the table width.
            StoreUnavailableError: (operation="write") if the append fails.
        """
        ...

    def read_rows(self, table: TableSchema) -> List[Row]:
        """
        Read every data row of a table, in insertion order.

        Raises:
            StoreUnavailableError: (operation="read") if the read fails.
        """
        ...

    def insert_if_absent(self, table: TableSchema, row: Sequence[str], key_column: str) -> bool:
        """
        Append row unless a row with the same key_column value exists.

        Returns:
            True if the row was appended, False if the key was already taken.

        Raises:
            StoreUnavailableError: operation="read" when the existence check
            failed (nothing written), operation="write" when the append failed.
        """
        ...


class KeyedLocks:
    """
    Fixed pool of locks selected by key hash.

    Serializes check-then-append for the same key inside one process while
    unrelated keys mostly proceed in parallel.
    """

    def __init__(self, size: int = 64) -> None:
        if size < 1:
            raise ValueError("size must be >= 1")
        self._locks = [threading.Lock() for _ in range(size)]

    def for_key(self, key: str) -> threading.Lock:
        return self._locks[hash(key) % len(self._locks)]


def cell(row: Sequence[str], index: int) -> str:
    """Return row[index], or "" for short rows (stores trim trailing blanks)."""

    return str(row[index]) if index < len(row) else ""


__all__ = [
    "KeyedLocks",
    "Row",
    "TabularStore",
    "cell",
]
