"""Domain enums.

Usage:
    from gymaccess.domain.enums import AccessType, CredentialType
"""

from gymaccess.domain.enums.access_type import AccessDecision, AccessType
from gymaccess.domain.enums.credential_type import CredentialType
from gymaccess.domain.enums.event_type import AccessEventType
from gymaccess.domain.enums.sync_log import SyncLogCategory, SyncLogStatus
from gymaccess.domain.enums.vendor_sync import VendorSyncStatus

__all__ = [
    "AccessDecision",
    "AccessEventType",
    "AccessType",
    "CredentialType",
    "SyncLogCategory",
    "SyncLogStatus",
    "VendorSyncStatus",
]
