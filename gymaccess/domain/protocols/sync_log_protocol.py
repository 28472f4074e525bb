"""SyncLogProtocol: operator-facing audit trail port.

Error Handling:
    All methods return Result types. Writing to the Sync Log never raises;
    a failed write is reported through the structured logger and returned
    as Failure, so callers may ignore the result without losing the
    business operation.
"""

from typing import Protocol
from uuid import UUID

from gymaccess.core.errors import DomainError
from gymaccess.core.result import Result
from gymaccess.domain.entities import SyncLogEntry
from gymaccess.domain.enums import SyncLogCategory, SyncLogStatus


class SyncLogProtocol(Protocol):
    """Append-only Sync Log."""

    async def record(
        self,
        *,
        branch_id: UUID | None,
        category: SyncLogCategory,
        message: str,
        status: SyncLogStatus,
        details: str | None = None,
        entity_type: str | None = None,
        entity_id: UUID | None = None,
        entity_name: str | None = None,
    ) -> Result[SyncLogEntry, DomainError]:
        """Append one entry.

        Args:
            branch_id: Branch the entry belongs to (None for global entries).
            category: sync / error / info / warning.
            message: Operator-readable summary.
            status: success / error / pending / warning.
            details: Longer free text (error messages, timings).
            entity_type: Kind of entity the entry refers to ("member", ...).
            entity_id: Id of that entity.
            entity_name: Display name of that entity.

        Returns:
            Success(SyncLogEntry) with the appended entry, or
            Failure(DomainError) with SYNC_LOG_WRITE_FAILED.
        """
        ...

    async def resolve(
        self,
        entry: SyncLogEntry,
        status: SyncLogStatus,
        details: str | None = None,
    ) -> Result[None, DomainError]:
        """Move a pending entry to its final status (once)."""
        ...
