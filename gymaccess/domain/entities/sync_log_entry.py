"""Sync Log entries: the operator-facing audit trail."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID

from uuid_extensions import uuid7

from gymaccess.core.result import Failure, Result, Success
from gymaccess.domain.enums import SyncLogCategory, SyncLogStatus


class SyncLogEntryError:
    """SyncLogEntry-specific errors."""

    ALREADY_FINAL = "Sync log entry already has a final status"
    NOT_FINAL = "Target status must be final"


@dataclass(slots=True, kw_only=True)
class SyncLogEntry:
    """Append-only log entry.

    Business Rules:
        - Never mutated, except one pending -> final status transition
        - Entity reference is optional (attendance, member, credential, ...)
    """

    branch_id: UUID | None
    category: SyncLogCategory
    message: str
    status: SyncLogStatus
    details: str | None = None
    entity_type: str | None = None
    entity_id: UUID | None = None
    entity_name: str | None = None
    id: UUID = field(default_factory=uuid7)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def resolve(self, status: SyncLogStatus, details: str | None = None) -> Result[None, str]:
        """Apply the single pending -> final transition.

        Returns:
            Success(None): Transition applied.
            Failure(error): Entry was already final, or target is pending.
        """
        if self.status.is_final:
            return Failure(error=SyncLogEntryError.ALREADY_FINAL)
        if not status.is_final:
            return Failure(error=SyncLogEntryError.NOT_FINAL)

        self.status = status
        if details is not None:
            self.details = details
        return Success(value=None)
