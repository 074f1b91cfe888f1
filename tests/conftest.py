"""
Pytest configuration and shared fixtures.

This file adds the parent directory to the Python path so that tests
can import from the api, config, domain, repositories and services modules.
"""

import sys
from pathlib import Path

import pytest

# Add the project root to the Python path
# so tests can import domain, repositories, etc.
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config.settings import Settings  # noqa: E402
from domain.tables import bookings_table, leads_table  # noqa: E402
from repositories.memory_store import InMemoryTabularStore  # noqa: E402


@pytest.fixture
def store() -> InMemoryTabularStore:
    return InMemoryTabularStore()


@pytest.fixture
def ledger():
    return bookings_table("Bookings")


@pytest.fixture
def leads():
    return leads_table("Leads")


@pytest.fixture
def settings() -> Settings:
    return Settings(
        store_backend="memory",
        owner_email="owner@example.com",
        business_name="Test Financial",
        advisor_name="Alex Advisor",
        booking_page_url="https://example.com/book",
    )
