"""
API dependencies.

Settings and the store are process-wide singletons created on first use;
services are built per request from them. Tests replace get_settings,
get_store or get_email_sender through app.dependency_overrides.
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from config.settings import Settings, load_settings
from domain.tables import bookings_table, leads_table
from repositories.client import create_store
from repositories.tabular_store import TabularStore
from services.booking_service import BookingGuard
from services.lead_intake_service import LeadIntakeService
from services.notification_service import EmailSender, NotificationService, create_email_sender


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


@lru_cache(maxsize=1)
def _store_for(settings: Settings) -> TabularStore:
    return create_store(settings)


def get_store(settings: Settings = Depends(get_settings)) -> TabularStore:
    return _store_for(settings)


def get_booking_guard(
    settings: Settings = Depends(get_settings),
    store: TabularStore = Depends(get_store),
) -> BookingGuard:
    return BookingGuard(store, bookings_table(settings.bookings_table), fail_open=settings.fail_open)


def get_lead_intake_service(
    settings: Settings = Depends(get_settings),
    store: TabularStore = Depends(get_store),
) -> LeadIntakeService:
    return LeadIntakeService(store, leads_table(settings.leads_table))


def get_email_sender(settings: Settings = Depends(get_settings)) -> EmailSender:
    return create_email_sender(settings)


def get_notification_service(
    settings: Settings = Depends(get_settings),
    sender: EmailSender = Depends(get_email_sender),
) -> NotificationService:
    return NotificationService.from_settings(settings, sender)


__all__ = [
    "get_booking_guard",
    "get_email_sender",
    "get_lead_intake_service",
    "get_notification_service",
    "get_settings",
    "get_store",
]
