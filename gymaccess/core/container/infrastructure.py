"""Infrastructure dependency factories.

Application-scoped singletons for core infrastructure services:
- Logging (console, JSON outside development)
- Database (PostgreSQL via asyncpg)
- Access store (SQLAlchemy)
- Sync Log
- Vendor token manager and gateway client

Usage:
    # Application Layer (direct use)
    gateway = get_gateway_client()

    # Presentation Layer (FastAPI Depends)
    gateway: VendorGatewayProtocol = Depends(get_gateway_client)
"""

from functools import lru_cache
from typing import TYPE_CHECKING

from gymaccess.core.config import settings
from gymaccess.infrastructure.persistence.database import Database

if TYPE_CHECKING:
    from gymaccess.domain.protocols import (
        AccessStoreProtocol,
        LoggerProtocol,
        SyncLogProtocol,
    )
    from gymaccess.infrastructure.vendor import GatewayClient, TokenManager


# ============================================================================
# Application-Scoped Dependencies (Singletons)
# ============================================================================


@lru_cache()
def get_logger() -> "LoggerProtocol":
    """Return the application-scoped logger singleton.

    Adapter selection is centralized here (composition root):
    - development: ConsoleAdapter (human-readable)
    - testing/ci/production: ConsoleAdapter (JSON)

    Returns:
        LoggerProtocol: Logger instance implementing the protocol.
    """
    from gymaccess.infrastructure.logging import ConsoleAdapter

    return ConsoleAdapter(
        use_json=not settings.is_development,
        level="DEBUG" if settings.debug else settings.log_level,
    )


@lru_cache()
def get_database() -> Database:
    """Get database manager singleton (app-scoped).

    Returns:
        Database instance with connection pool.
    """
    return Database(
        database_url=settings.database_url,
        echo=settings.db_echo,
    )


@lru_cache()
def get_access_store() -> "AccessStoreProtocol":
    """Get access store singleton (app-scoped).

    The store opens one session per operation, so a single instance is
    shared by request handlers, the token manager and the poller.
    """
    from gymaccess.infrastructure.persistence import SQLAlchemyAccessStore

    return SQLAlchemyAccessStore(get_database())


@lru_cache()
def get_sync_log() -> "SyncLogProtocol":
    """Get Sync Log singleton (app-scoped)."""
    from gymaccess.infrastructure.sync_log import SyncLog

    return SyncLog(store=get_access_store(), logger=get_logger())


@lru_cache()
def get_token_manager() -> "TokenManager":
    """Get vendor token manager singleton (app-scoped).

    The token cache and the per-branch refresh locks live in this instance;
    there must be exactly one per process.
    """
    from gymaccess.infrastructure.vendor import TokenManager

    return TokenManager(
        store=get_access_store(),
        sync_log=get_sync_log(),
        refresh_threshold=settings.token_refresh_threshold,
        default_ttl_seconds=settings.token_default_ttl_seconds,
        timeout=settings.vendor_token_timeout,
    )


@lru_cache()
def get_gateway_client() -> "GatewayClient":
    """Get vendor gateway client singleton (app-scoped)."""
    from gymaccess.infrastructure.vendor import GatewayClient, RetryPolicy

    return GatewayClient(
        token_provider=get_token_manager(),
        store=get_access_store(),
        sync_log=get_sync_log(),
        policy=RetryPolicy(
            max_attempts=settings.vendor_max_attempts,
            base_delay=settings.vendor_backoff_base_seconds,
            max_delay=settings.vendor_backoff_max_seconds,
            jitter=settings.vendor_backoff_jitter,
        ),
        timeout=settings.vendor_call_timeout,
    )
