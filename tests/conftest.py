"""Pytest configuration and shared fixtures.

Fixtures build the application services over InMemoryAccessStore so unit
tests never touch a database or the network (vendor HTTP is mocked with
pytest-httpx where needed).
"""

import asyncio
from datetime import date
from unittest.mock import MagicMock
from uuid import UUID

import pytest
from uuid_extensions import uuid7

from gymaccess.domain.entities import (
    BranchApiSettings,
    Member,
    MemberMembership,
)
from gymaccess.infrastructure.sync_log import SyncLog
from tests.fakes import InMemoryAccessStore

VENDOR_URL = "https://vendor.test"


# Pytest markers for different test types
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests with mocked dependencies")
    config.addinivalue_line("markers", "api: API tests through the FastAPI TestClient")
    config.addinivalue_line(
        "markers", "integration: Store tests against a real SQLAlchemy engine"
    )
    config.addinivalue_line("markers", "asyncio: Async test that requires event loop")


def pytest_collection_modifyitems(config, items):
    """Automatically add asyncio marker to async test functions.

    This ensures all async tests are properly marked even if
    the developer forgets to add @pytest.mark.asyncio.
    """
    for item in items:
        if asyncio.iscoroutinefunction(item.function):
            item.add_marker(pytest.mark.asyncio)


# =============================================================================
# Shared fixtures
# =============================================================================


@pytest.fixture
def mock_logger() -> MagicMock:
    """LoggerProtocol mock; bind() returns the same mock."""
    logger = MagicMock()
    logger.bind.return_value = logger
    logger.with_context.return_value = logger
    return logger


@pytest.fixture
def store() -> InMemoryAccessStore:
    return InMemoryAccessStore()


@pytest.fixture
def sync_log(store: InMemoryAccessStore, mock_logger: MagicMock) -> SyncLog:
    return SyncLog(store=store, logger=mock_logger)


@pytest.fixture
def branch_id() -> UUID:
    return uuid7()


@pytest.fixture
def api_settings(store: InMemoryAccessStore, branch_id: UUID) -> BranchApiSettings:
    """Active vendor settings registered for `branch_id`."""
    settings = BranchApiSettings(
        branch_id=branch_id,
        api_url=f"{VENDOR_URL}/",
        app_key="test-app-key",
        app_secret="test-app-secret",
    )
    store.api_settings[branch_id] = settings
    return settings


@pytest.fixture
def member(store: InMemoryAccessStore) -> Member:
    """Member with an active membership."""
    member = Member(id=uuid7(), first_name="Jane", last_name="Doe", email="jane@example.com")
    store.members[member.id] = member
    store.memberships.append(
        MemberMembership(
            member_id=member.id,
            membership_id=uuid7(),
            status="active",
            start_date=date(2025, 1, 1),
            end_date=date(2025, 12, 31),
        )
    )
    return member
