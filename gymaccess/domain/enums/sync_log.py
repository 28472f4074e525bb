"""Sync Log classification enums.

Category answers "what kind of entry is this", status answers "how did the
operation end". A pending status is resolved exactly once to a final one.
"""

from enum import Enum


class SyncLogCategory(str, Enum):
    """Sync Log entry category."""

    SYNC = "sync"
    ERROR = "error"
    INFO = "info"
    WARNING = "warning"


class SyncLogStatus(str, Enum):
    """Sync Log entry status."""

    SUCCESS = "success"
    ERROR = "error"
    PENDING = "pending"
    WARNING = "warning"

    @property
    def is_final(self) -> bool:
        """Whether the status closes a logical operation."""
        return self is not SyncLogStatus.PENDING
