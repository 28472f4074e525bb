"""Store-backed implementation of SyncLogProtocol.

Every entry is appended through the access store and mirrored to the
structured logger, so operators see it in the UI and in the log stream.

Error Handling:
    Writes never raise. A failed write is logged and returned as
    Failure(DomainError(SYNC_LOG_WRITE_FAILED)); the business operation
    that produced the entry carries on.

Usage:
    sync_log = SyncLog(store=store, logger=logger)

    pending = await sync_log.record(
        branch_id=branch_id,
        category=SyncLogCategory.SYNC,
        message="Syncing member Jane Doe",
        status=SyncLogStatus.PENDING,
    )
    ...
    if isinstance(pending, Success):
        await sync_log.resolve(pending.value, SyncLogStatus.SUCCESS)
"""

from uuid import UUID

from gymaccess.core.enums import ErrorCode
from gymaccess.core.errors import DomainError
from gymaccess.core.result import Failure, Result, Success
from gymaccess.domain.entities import SyncLogEntry
from gymaccess.domain.enums import SyncLogCategory, SyncLogStatus
from gymaccess.domain.protocols import AccessStoreProtocol, LoggerProtocol


class SyncLog:
    """Append-only Sync Log over AccessStoreProtocol.

    Attributes:
        _store: Access store used for persistence.
        _logger: Structured logger receiving a mirror of each entry.
    """

    def __init__(self, *, store: AccessStoreProtocol, logger: LoggerProtocol) -> None:
        self._store = store
        self._logger = logger

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

        Returns:
            Success(SyncLogEntry): Entry appended.
            Failure(DomainError): Store write failed.
        """
        entry = SyncLogEntry(
            branch_id=branch_id,
            category=category,
            message=message,
            status=status,
            details=details,
            entity_type=entity_type,
            entity_id=entity_id,
            entity_name=entity_name,
        )
        self._mirror(entry)

        try:
            await self._store.append_sync_log(entry)
        except Exception as e:
            return self._write_failed(entry, e)

        return Success(value=entry)

    async def resolve(
        self,
        entry: SyncLogEntry,
        status: SyncLogStatus,
        details: str | None = None,
    ) -> Result[None, DomainError]:
        """Move a pending entry to its final status.

        Returns:
            Success(None): Transition persisted.
            Failure(DomainError): Entry already final, or store write failed.
        """
        transition = entry.resolve(status, details)
        if isinstance(transition, Failure):
            return Failure(
                error=DomainError(
                    code=ErrorCode.SYNC_LOG_WRITE_FAILED,
                    message=transition.error,
                    details={"entry_id": str(entry.id), "status": entry.status.value},
                )
            )
        self._mirror(entry)

        try:
            await self._store.update_sync_log(entry)
        except Exception as e:
            return self._write_failed(entry, e)

        return Success(value=None)

    def _mirror(self, entry: SyncLogEntry) -> None:
        context = {
            "branch_id": str(entry.branch_id) if entry.branch_id else None,
            "category": entry.category.value,
            "status": entry.status.value,
            "entity_type": entry.entity_type,
            "entity_id": str(entry.entity_id) if entry.entity_id else None,
            "details": entry.details,
        }
        if entry.status == SyncLogStatus.ERROR:
            self._logger.error(entry.message, **context)
        elif entry.status == SyncLogStatus.WARNING:
            self._logger.warning(entry.message, **context)
        else:
            self._logger.info(entry.message, **context)

    def _write_failed(self, entry: SyncLogEntry, e: Exception) -> Failure[DomainError]:
        self._logger.error(
            "sync_log_write_failed",
            error=e,
            entry_id=str(entry.id),
            sync_message=entry.message,
        )
        return Failure(
            error=DomainError(
                code=ErrorCode.SYNC_LOG_WRITE_FAILED,
                message=f"Failed to write sync log entry: {e}",
                details={"entry_id": str(entry.id), "error_type": type(e).__name__},
            )
        )
