"""Application services."""

from gymaccess.application.services.access_resolution import AccessResolver, AccessRuleMatch
from gymaccess.application.services.credential_sync import (
    CredentialSyncError,
    CredentialSyncService,
)
from gymaccess.application.services.device_sync import DeviceSyncService
from gymaccess.application.services.event_ingestion import (
    EventIngestionService,
    map_event_type,
)
from gymaccess.application.services.event_poller import EventPoller
from gymaccess.application.services.event_reconciliation import (
    EventReconciler,
    ProcessingNote,
)

__all__ = [
    "AccessResolver",
    "AccessRuleMatch",
    "CredentialSyncError",
    "CredentialSyncService",
    "DeviceSyncService",
    "EventIngestionService",
    "EventPoller",
    "EventReconciler",
    "ProcessingNote",
    "map_event_type",
]
