"""Container module - Centralized dependency injection.

Re-exports all factory functions from submodules:

    from gymaccess.core.container import get_gateway_client, get_event_poller

The container is organized into modules:
- infrastructure: logging, database, store, Sync Log, vendor clients
- services: access resolution, credential and device sync, reconciliation,
  ingestion, polling
"""

from gymaccess.core.config import get_settings
from gymaccess.core.container.infrastructure import (
    get_access_store,
    get_database,
    get_gateway_client,
    get_logger,
    get_sync_log,
    get_token_manager,
)
from gymaccess.core.container.services import (
    get_access_resolver,
    get_credential_sync_service,
    get_device_sync_service,
    get_event_ingestion_service,
    get_event_poller,
    get_event_reconciler,
)

__all__ = [
    "get_access_resolver",
    "get_access_store",
    "get_credential_sync_service",
    "get_database",
    "get_device_sync_service",
    "get_event_ingestion_service",
    "get_event_poller",
    "get_event_reconciler",
    "get_gateway_client",
    "get_logger",
    "get_settings",
    "get_sync_log",
    "get_token_manager",
]
