"""Outcome of the last vendor synchronization of a branch."""

from enum import Enum


class VendorSyncStatus(str, Enum):
    """last_sync_status values on branch vendor settings."""

    SUCCESS = "success"
    FAILED = "failed"
    IN_PROGRESS = "in_progress"
