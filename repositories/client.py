"""
Store client construction.

Builds the tabular store selected by Settings.store_backend. Credentials come
from the Settings object passed in; this module reads no environment
variables and holds no module-level clients.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from config.settings import Settings
from repositories.memory_store import InMemoryTabularStore
from repositories.tabular_store import TabularStore

logger = logging.getLogger(__name__)


def create_sheets_service(settings: Settings) -> Any:
    """
    Build an authenticated Google Sheets v4 service.

    Uses service-account credentials from GOOGLE_CREDENTIALS (JSON string)
    first, then GOOGLE_CREDENTIALS_FILE. Every HTTP call is bounded by
    STORE_TIMEOUT_SECONDS.
    """

    import httplib2
    from google.oauth2.service_account import Credentials
    from google_auth_httplib2 import AuthorizedHttp
    from googleapiclient.discovery import build

    from repositories.sheets_store import SCOPES

    if settings.google_credentials_json:
        try:
            info = json.loads(settings.google_credentials_json)
        except json.JSONDecodeError as e:
            raise RuntimeError(f"GOOGLE_CREDENTIALS is not valid JSON: {e}") from None
        credentials = Credentials.from_service_account_info(info, scopes=SCOPES)
    elif settings.google_credentials_file:
        credentials = Credentials.from_service_account_file(
            settings.google_credentials_file, scopes=SCOPES
        )
    else:
        raise RuntimeError(
            "Missing Google credentials. Set GOOGLE_CREDENTIALS or GOOGLE_CREDENTIALS_FILE."
        )

    http = AuthorizedHttp(credentials, http=httplib2.Http(timeout=settings.store_timeout_seconds))
    return build("sheets", "v4", http=http, cache_discovery=False)


def create_supabase_client(settings: Settings) -> Any:
    """Build a Supabase client with the configured request timeout."""

    # The dependency is `supabase` (supabase-py).
    from supabase import Client, create_client  # type: ignore[import-not-found]
    from supabase.client import ClientOptions  # type: ignore[import-not-found]

    if not settings.supabase_url or not settings.supabase_key:
        raise RuntimeError("Missing SUPABASE_URL or SUPABASE_KEY.")

    options = ClientOptions(postgrest_client_timeout=settings.store_timeout_seconds)
    client: Client = create_client(settings.supabase_url, settings.supabase_key, options=options)
    return client


def create_store(settings: Settings) -> TabularStore:
    """Instantiate the TabularStore for the configured backend."""

    backend = settings.store_backend
    if backend == "memory":
        logger.warning("Using in-memory store; rows are lost on restart")
        return InMemoryTabularStore()
    if backend == "sheets":
        from repositories.sheets_store import SheetsTabularStore

        return SheetsTabularStore(create_sheets_service(settings), settings.google_sheet_id or "")
    if backend == "supabase":
        from repositories.supabase_store import SupabaseTabularStore

        return SupabaseTabularStore(create_supabase_client(settings))
    raise ValueError(f"Unknown store backend: {backend!r}")


__all__ = [
    "create_sheets_service",
    "create_store",
    "create_supabase_client",
]
