"""
Google Sheets tabular store.

Each TableSchema maps to a sheet (tab) of one spreadsheet; rows are appended
with values.append and read with values.get over the schema's column span
(e.g. "Bookings!A:H").

Sheets has no conditional write, so insert_if_absent() is a read followed by
an append, serialized per key with an in-process lock. Two worker processes
can still race on the same key; deployments that run more than one process
should use the Supabase backend, whose unique index closes that window.
"""

from __future__ import annotations

import logging
from typing import Any, List, Sequence

import httplib2
from google.auth.exceptions import GoogleAuthError
from googleapiclient.errors import HttpError

from domain.tables import TableSchema
from repositories.errors import READ, WRITE, StoreTimeoutError, StoreUnavailableError
from repositories.tabular_store import KeyedLocks, Row, cell

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


def column_letter(number: int) -> str:
    """
    Convert a 1-based column number to its A1 letter.

    Examples:
        >>> column_letter(1)
        'A'
        >>> column_letter(28)
        'AB'
    """

    if number < 1:
        raise ValueError("column number must be >= 1")
    letters = ""
    while number:
        number, remainder = divmod(number - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


def a1_range(table: TableSchema) -> str:
    """Full-column A1 range covering the table's columns."""

    return f"{table.name}!A:{column_letter(table.width)}"


class SheetsTabularStore:
    """
    TabularStore over the Google Sheets v4 API.

    service is a googleapiclient Resource built for "sheets", "v4" (see
    repositories.client.create_sheets_service). Requests are executed with
    num_retries=0: the caller decides whether to retry.
    """

    def __init__(self, service: Any, spreadsheet_id: str, lock_stripes: int = 64) -> None:
        if not spreadsheet_id:
            raise ValueError("spreadsheet_id must be non-empty")
        self._service = service
        self._spreadsheet_id = spreadsheet_id
        self._locks = KeyedLocks(lock_stripes)

    def _execute(self, request: Any, *, operation: str, table: TableSchema) -> Any:
        try:
            return request.execute(num_retries=0)
        except HttpError as e:
            status = getattr(e.resp, "status", "unknown")
            raise StoreUnavailableError(
                f"Google Sheets {operation} failed on {table.name!r} (HTTP {status}): {e}",
                operation=operation,
                table=table.name,
            ) from e
        except TimeoutError as e:
            raise StoreTimeoutError(
                f"Google Sheets {operation} timed out on {table.name!r}",
                operation=operation,
                table=table.name,
            ) from e
        except (httplib2.HttpLib2Error, GoogleAuthError, OSError) as e:
            raise StoreUnavailableError(
                f"Google Sheets {operation} failed on {table.name!r}: {e}",
                operation=operation,
                table=table.name,
            ) from e

    def append_row(self, table: TableSchema, row: Sequence[str]) -> None:
        table.require_row_shape(row)
        request = self._service.spreadsheets().values().append(
            spreadsheetId=self._spreadsheet_id,
            range=a1_range(table),
            valueInputOption=table.value_input.value,
            insertDataOption="INSERT_ROWS",
            body={"values": [list(row)]},
        )
        response = self._execute(request, operation=WRITE, table=table)
        updated_range = (response or {}).get("updates", {}).get("updatedRange")
        logger.info("Row appended to sheet", extra={"table": table.name, "updated_range": updated_range})

    def read_rows(self, table: TableSchema) -> List[Row]:
        request = self._service.spreadsheets().values().get(
            spreadsheetId=self._spreadsheet_id,
            range=a1_range(table),
        )
        response = self._execute(request, operation=READ, table=table)
        rows = [[str(v) for v in row] for row in (response or {}).get("values", [])]

        # A header row naming the columns is not data.
        if rows and tuple(rows[0]) == table.columns:
            rows = rows[1:]
        return rows

    def insert_if_absent(self, table: TableSchema, row: Sequence[str], key_column: str) -> bool:
        table.require_row_shape(row)
        index = table.index_of(key_column)
        key = str(row[index])

        with self._locks.for_key(key):
            existing = self.read_rows(table)
            if any(cell(r, index) == key for r in existing):
                return False
            self.append_row(table, row)
        return True


__all__ = [
    "SCOPES",
    "SheetsTabularStore",
    "a1_range",
    "column_letter",
]
