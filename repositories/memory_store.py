"""
In-memory tabular store.

Used for local development (STORE_BACKEND=memory) and tests. Rows live in
process memory only and are lost on restart.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Sequence

from domain.tables import TableSchema
from repositories.tabular_store import Row, cell

logger = logging.getLogger(__name__)


class InMemoryTabularStore:
    """Thread-safe TabularStore backed by lists of rows per table name."""

    def __init__(self) -> None:
        self._tables: Dict[str, List[Row]] = {}
        self._lock = threading.Lock()

    def append_row(self, table: TableSchema, row: Sequence[str]) -> None:
        table.require_row_shape(row)
        with self._lock:
            self._tables.setdefault(table.name, []).append([str(v) for v in row])
        logger.debug("Row appended", extra={"table": table.name})

    def read_rows(self, table: TableSchema) -> List[Row]:
        with self._lock:
            return [list(row) for row in self._tables.get(table.name, [])]

    def insert_if_absent(self, table: TableSchema, row: Sequence[str], key_column: str) -> bool:
        table.require_row_shape(row)
        index = table.index_of(key_column)
        key = str(row[index])
        with self._lock:
            rows = self._tables.setdefault(table.name, [])
            if any(cell(existing, index) == key for existing in rows):
                return False
            rows.append([str(v) for v in row])
        return True

    def clear(self) -> None:
        """Drop all tables."""
        with self._lock:
            self._tables.clear()


__all__ = ["InMemoryTabularStore"]
