"""Application service factories.

Services are application-scoped: they hold no per-request state, only
references to the infrastructure singletons.
"""

from functools import lru_cache

from gymaccess.application.services.access_resolution import AccessResolver
from gymaccess.application.services.credential_sync import CredentialSyncService
from gymaccess.application.services.device_sync import DeviceSyncService
from gymaccess.application.services.event_ingestion import EventIngestionService
from gymaccess.application.services.event_poller import EventPoller
from gymaccess.application.services.event_reconciliation import EventReconciler
from gymaccess.core.config import settings
from gymaccess.core.container.infrastructure import (
    get_access_store,
    get_gateway_client,
    get_logger,
    get_sync_log,
)


@lru_cache()
def get_access_resolver() -> AccessResolver:
    return AccessResolver(store=get_access_store())


@lru_cache()
def get_credential_sync_service() -> CredentialSyncService:
    """Get credential sync service singleton (app-scoped)."""
    return CredentialSyncService(
        store=get_access_store(),
        resolver=get_access_resolver(),
        gateway=get_gateway_client(),
        sync_log=get_sync_log(),
        logger=get_logger(),
    )


@lru_cache()
def get_event_reconciler() -> EventReconciler:
    """Get event reconciler singleton (app-scoped)."""
    return EventReconciler(
        store=get_access_store(),
        sync_log=get_sync_log(),
        logger=get_logger(),
        fetch_limit=settings.reconciliation_fetch_limit,
        batch_size=settings.reconciliation_batch_size,
        duplicate_window=settings.duplicate_entry_window,
    )


@lru_cache()
def get_event_ingestion_service() -> EventIngestionService:
    """Get webhook ingestion service singleton (app-scoped)."""
    return EventIngestionService(
        store=get_access_store(),
        logger=get_logger(),
        reconciler=get_event_reconciler(),
        process_immediately=settings.webhook_process_immediately,
    )


@lru_cache()
def get_event_poller() -> EventPoller:
    """Get event poller singleton; pulls the vendor queue when enabled."""
    if not settings.event_pull_enabled:
        return EventPoller(
            store=get_access_store(),
            reconciler=get_event_reconciler(),
            logger=get_logger(),
        )
    return EventPoller(
        store=get_access_store(),
        reconciler=get_event_reconciler(),
        logger=get_logger(),
        gateway=get_gateway_client(),
        ingestion=get_event_ingestion_service(),
        pull_batch_size=settings.event_pull_batch_size,
    )


@lru_cache()
def get_device_sync_service() -> DeviceSyncService:
    """Get device sync service singleton (app-scoped)."""
    return DeviceSyncService(
        store=get_access_store(),
        gateway=get_gateway_client(),
        sync_log=get_sync_log(),
        logger=get_logger(),
        page_size=settings.device_sync_page_size,
    )
