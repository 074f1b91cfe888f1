"""
Supabase tabular store (persistence).

Each TableSchema maps to a Postgres table whose columns carry the schema's
column names (all text) plus an identity column used for insertion order.

insert_if_absent() is a single insert that relies on a UNIQUE constraint over
the key column (see sql/001_create_tables.sql); Postgres rejects a duplicate
with SQLSTATE 23505, which is reported as "key taken". This makes the
booking check atomic across processes.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Sequence

import httpx
from postgrest.exceptions import APIError

from domain.tables import TableSchema
from repositories.errors import READ, WRITE, StoreTimeoutError, StoreUnavailableError
from repositories.tabular_store import Row

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"

# PostgREST caps a single select at 1000 rows by default.
_PAGE_SIZE = 1000


def _is_unique_violation(error: APIError) -> bool:
    return str(getattr(error, "code", "")) == UNIQUE_VIOLATION


class SupabaseTabularStore:
    """TabularStore over a Supabase (PostgREST) client."""

    def __init__(self, client: Any, order_column: str = "id") -> None:
        self._client = client
        self._order_column = order_column

    def _run(self, action: Callable[[], Any], *, operation: str, table: TableSchema) -> Any:
        try:
            response = action()
        except APIError:
            raise
        except httpx.TimeoutException as e:
            raise StoreTimeoutError(
                f"Supabase {operation} timed out on {table.name!r}",
                operation=operation,
                table=table.name,
            ) from e
        except httpx.HTTPError as e:
            raise StoreUnavailableError(
                f"Supabase {operation} failed on {table.name!r}: {e}",
                operation=operation,
                table=table.name,
            ) from e

        error = getattr(response, "error", None)
        if error:
            raise StoreUnavailableError(
                f"Supabase {operation} failed on {table.name!r}: {error}",
                operation=operation,
                table=table.name,
            )
        return response

    def _insert(self, table: TableSchema, row: Sequence[str]) -> None:
        payload = dict(zip(table.columns, (str(v) for v in row)))
        self._run(
            lambda: self._client.table(table.name).insert(payload).execute(),
            operation=WRITE,
            table=table,
        )

    def append_row(self, table: TableSchema, row: Sequence[str]) -> None:
        table.require_row_shape(row)
        try:
            self._insert(table, row)
        except APIError as e:
            raise StoreUnavailableError(
                f"Supabase write failed on {table.name!r}: {e.message}",
                operation=WRITE,
                table=table.name,
            ) from e
        logger.info("Row inserted", extra={"table": table.name})

    def read_rows(self, table: TableSchema) -> List[Row]:
        columns = ",".join(table.columns)
        rows: List[Row] = []
        start = 0
        while True:
            end = start + _PAGE_SIZE - 1
            try:
                response = self._run(
                    lambda: (
                        self._client.table(table.name)
                        .select(columns)
                        .order(self._order_column)
                        .range(start, end)
                        .execute()
                    ),
                    operation=READ,
                    table=table,
                )
            except APIError as e:
                raise StoreUnavailableError(
                    f"Supabase read failed on {table.name!r}: {e.message}",
                    operation=READ,
                    table=table.name,
                ) from e

            page = getattr(response, "data", None) or []
            for record in page:
                rows.append(["" if record.get(c) is None else str(record.get(c)) for c in table.columns])
            if len(page) < _PAGE_SIZE:
                return rows
            start += _PAGE_SIZE

    def insert_if_absent(self, table: TableSchema, row: Sequence[str], key_column: str) -> bool:
        table.require_row_shape(row)
        table.index_of(key_column)
        try:
            self._insert(table, row)
        except APIError as e:
            if _is_unique_violation(e):
                logger.info("Key already present", extra={"table": table.name, "key_column": key_column})
                return False
            raise StoreUnavailableError(
                f"Supabase write failed on {table.name!r}: {e.message}",
                operation=WRITE,
                table=table.name,
            ) from e
        return True


__all__ = ["SupabaseTabularStore", "UNIQUE_VIOLATION"]
