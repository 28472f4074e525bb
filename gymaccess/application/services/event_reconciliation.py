"""Event reconciliation: turn queued door events into attendance sessions.

process_events(branch_id) consumes up to `fetch_limit` unprocessed events
in event-time order, in batches of `batch_size`, strictly one at a time.

Entry:
    - no open session: open one at the event time
    - open session within the duplicate window of its check-in: ignored
    - open session that checked in later than this entry (out of order
      delivery): Sync Log warning, the open session is left untouched
    - older open session: auto-close it one minute before this entry
      (missed exit), then open a fresh session
Exit:
    - a session already closed by this vendor event id: replay, ignored
    - open session that checked in after this exit: Sync Log warning,
      the session stays open
    - else close the most recent open session and compute the duration
    - no open session: orphan exit warning, no attendance change
Denied:
    - Sync Log warning with door/device context, no attendance change
Unmapped (no member id):
    - marked processed with note "unmapped_member" plus a Sync Log warning

After each batch the handled events are marked processed in one update.
An event whose handling raised is logged as an error and left unprocessed
so the next pass retries it.

Passes over one branch are serialized by a per-branch lock, so webhook
deliveries, the poller and manual runs in one process never interleave.
Running several processes against one database still needs a single
poller per deployment.
"""

import asyncio
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from uuid import UUID

from gymaccess.core.constants import (
    AUTO_CLOSE_NOTE,
    DEFAULT_MEMBER_ROLE,
    UNMAPPED_MEMBER_NOTE,
)
from gymaccess.domain.entities import AccessEvent, AttendanceSession, Member
from gymaccess.domain.enums import AccessEventType, SyncLogCategory, SyncLogStatus
from gymaccess.domain.protocols import AccessStoreProtocol, LoggerProtocol, SyncLogProtocol

DEFAULT_FETCH_LIMIT = 100
DEFAULT_BATCH_SIZE = 20
DEFAULT_DUPLICATE_WINDOW = timedelta(minutes=5)
AUTO_CLOSE_OFFSET = timedelta(minutes=1)

UNKNOWN_MEMBER_NAME = "Unknown Member"


class ProcessingNote:
    """processing_note values for events consumed without a new session."""

    UNMAPPED_MEMBER = UNMAPPED_MEMBER_NOTE
    DUPLICATE_ENTRY = "duplicate_entry"
    REPLAYED_ENTRY = "replayed_entry"
    REPLAYED_EXIT = "replayed_exit"
    ORPHAN_EXIT = "orphan_exit"
    OUT_OF_ORDER_ENTRY = "out_of_order_entry"
    EXIT_BEFORE_CHECK_IN = "exit_before_check_in"
    DENIED = "denied"


@dataclass(slots=True)
class ReconciliationStats:
    """Counters of one process_events run (logged at the end)."""

    handled: int = 0
    failed: int = 0
    sessions_opened: int = 0
    sessions_closed: int = 0
    auto_closed: int = 0
    ignored: int = 0
    out_of_order: int = 0


class EventReconciler:
    """Applies queued door events to attendance.

    Dependencies (injected via constructor):
        - AccessStoreProtocol: events, sessions, members
        - SyncLogProtocol: per-event operator log
        - LoggerProtocol: structured logs
    """

    def __init__(
        self,
        *,
        store: AccessStoreProtocol,
        sync_log: SyncLogProtocol,
        logger: LoggerProtocol,
        fetch_limit: int = DEFAULT_FETCH_LIMIT,
        batch_size: int = DEFAULT_BATCH_SIZE,
        duplicate_window: timedelta = DEFAULT_DUPLICATE_WINDOW,
    ) -> None:
        self._store = store
        self._sync_log = sync_log
        self._logger = logger
        self._fetch_limit = fetch_limit
        self._batch_size = batch_size
        self._duplicate_window = duplicate_window
        self._locks: dict[UUID, asyncio.Lock] = {}

    def lock_for(self, branch_id: UUID) -> asyncio.Lock:
        """Lock serializing reconciliation passes of one branch."""
        lock = self._locks.get(branch_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[branch_id] = lock
        return lock

    async def process_events(self, branch_id: UUID) -> int:
        """Reconcile the branch's queued events.

        A pass waits for a running pass of the same branch to finish, then
        reads the queue again, so no event is applied twice.

        Returns:
            Number of events marked processed.

        Raises:
            Store errors while fetching events or marking a batch; the
            affected events stay unprocessed.
        """
        async with self.lock_for(branch_id):
            return await self._process_locked(branch_id)

    async def _process_locked(self, branch_id: UUID) -> int:
        log = self._logger.bind(branch_id=str(branch_id))
        events = await self._store.list_unprocessed_events(branch_id, self._fetch_limit)
        if not events:
            return 0
        events.sort(key=lambda e: e.event_time)

        stats = ReconciliationStats()
        for start in range(0, len(events), self._batch_size):
            batch = events[start : start + self._batch_size]
            handled: list[AccessEvent] = []

            for event in batch:
                try:
                    note = await self._apply(event, stats)
                except Exception as e:
                    stats.failed += 1
                    await self._event_failed(event, e)
                    continue
                event.mark_processed(at=datetime.now(UTC), note=note)
                handled.append(event)

            await self._store.mark_events_processed(handled)
            stats.handled += len(handled)

        log.info(
            "events_reconciled",
            fetched=len(events),
            handled=stats.handled,
            failed=stats.failed,
            sessions_opened=stats.sessions_opened,
            sessions_closed=stats.sessions_closed,
            auto_closed=stats.auto_closed,
            ignored=stats.ignored,
            out_of_order=stats.out_of_order,
        )
        return stats.handled

    # =========================================================================
    # Event handlers
    # =========================================================================

    async def _apply(self, event: AccessEvent, stats: ReconciliationStats) -> str | None:
        """Apply one event; return the processing note (None for normal handling)."""
        if event.member_id is None:
            await self._record(
                event,
                SyncLogCategory.WARNING,
                SyncLogStatus.WARNING,
                f"Unmapped {event.event_type.value} event",
                f"Vendor event {event.vendor_event_id} at {_clock(event.event_time)} "
                f"via door {event.door_label} has no matching member",
            )
            stats.ignored += 1
            return ProcessingNote.UNMAPPED_MEMBER

        member = await self._store.get_member(event.member_id)
        if event.event_type is AccessEventType.ENTRY:
            return await self._entry(event, event.member_id, member, stats)
        if event.event_type is AccessEventType.EXIT:
            return await self._exit(event, event.member_id, member, stats)
        return await self._denied(event, event.member_id, member, stats)

    async def _entry(
        self,
        event: AccessEvent,
        member_id: UUID,
        member: Member | None,
        stats: ReconciliationStats,
    ) -> str | None:
        name = _name(member)
        open_session = await self._store.find_open_session(member_id, event.branch_id)

        if open_session is not None:
            if event.vendor_event_id == open_session.check_in_event_id:
                stats.ignored += 1
                return ProcessingNote.REPLAYED_ENTRY

            if abs(event.event_time - open_session.check_in) <= self._duplicate_window:
                stats.ignored += 1
                self._logger.debug(
                    "duplicate_entry_ignored",
                    member_id=str(member_id),
                    session_id=str(open_session.id),
                    event_time=event.event_time.isoformat(),
                )
                return ProcessingNote.DUPLICATE_ENTRY

            if event.event_time < open_session.check_in:
                stats.ignored += 1
                stats.out_of_order += 1
                await self._out_of_order(
                    event,
                    member_id,
                    open_session,
                    f"{name} entry older than current visit",
                    name,
                )
                return ProcessingNote.OUT_OF_ORDER_ENTRY

            # Missed exit: close the stale session just before this entry
            duration = open_session.close(
                max(open_session.check_in, event.event_time - AUTO_CLOSE_OFFSET),
                note=AUTO_CLOSE_NOTE,
            )
            await self._store.save_session(open_session)
            stats.auto_closed += 1
            self._logger.warning(
                "attendance_auto_closed",
                member_id=str(member_id),
                session_id=str(open_session.id),
                check_in=open_session.check_in.isoformat(),
                check_out=open_session.check_out.isoformat() if open_session.check_out else None,
                duration_minutes=duration,
            )

        session = AttendanceSession(
            member_id=member_id,
            branch_id=event.branch_id,
            check_in=event.event_time,
            device_id=event.device_id,
            door_id=event.door_id,
            member_role=member.role if member else DEFAULT_MEMBER_ROLE,
            check_in_event_id=event.vendor_event_id,
        )
        await self._store.save_session(session)
        stats.sessions_opened += 1

        if open_session is None:
            await self._record(
                event,
                SyncLogCategory.INFO,
                SyncLogStatus.SUCCESS,
                f"{name} checked in",
                f"Entry recorded at {_clock(event.event_time)} via door {event.door_label}",
                session=session,
                member_name=name,
            )
        else:
            await self._record(
                event,
                SyncLogCategory.WARNING,
                SyncLogStatus.WARNING,
                f"{name} checked in (previous session auto-closed)",
                f"New entry recorded at {_clock(event.event_time)} via door {event.door_label}; "
                f"previous session from {_clock(open_session.check_in)} closed at "
                f"{_clock(open_session.check_out)} ({open_session.duration_minutes} minutes)",
                session=session,
                member_name=name,
            )
        return None

    async def _exit(
        self,
        event: AccessEvent,
        member_id: UUID,
        member: Member | None,
        stats: ReconciliationStats,
    ) -> str | None:
        name = _name(member)

        replayed = await self._store.find_session_by_checkout_event(
            event.branch_id, event.vendor_event_id
        )
        if replayed is not None:
            stats.ignored += 1
            return ProcessingNote.REPLAYED_EXIT

        open_session = await self._store.find_open_session(member_id, event.branch_id)
        if open_session is None:
            stats.ignored += 1
            await self._record(
                event,
                SyncLogCategory.WARNING,
                SyncLogStatus.WARNING,
                f"{name} exit without check-in",
                f"Exit recorded at {_clock(event.event_time)} via door {event.door_label}, "
                "but no matching check-in record found",
                member_name=name,
            )
            return ProcessingNote.ORPHAN_EXIT

        if event.event_time < open_session.check_in:
            stats.ignored += 1
            stats.out_of_order += 1
            await self._out_of_order(
                event,
                member_id,
                open_session,
                f"{name} exit before current check-in",
                name,
            )
            return ProcessingNote.EXIT_BEFORE_CHECK_IN

        duration = open_session.close(event.event_time, event_id=event.vendor_event_id)
        await self._store.save_session(open_session)
        stats.sessions_closed += 1
        await self._record(
            event,
            SyncLogCategory.INFO,
            SyncLogStatus.SUCCESS,
            f"{name} checked out",
            f"Exit recorded at {_clock(event.event_time)} via door {event.door_label}. "
            f"Session duration: {duration} minutes",
            session=open_session,
            member_name=name,
        )
        return None

    async def _denied(
        self,
        event: AccessEvent,
        member_id: UUID,
        member: Member | None,
        stats: ReconciliationStats,
    ) -> str:
        name = _name(member)
        stats.ignored += 1
        await self._record(
            event,
            SyncLogCategory.WARNING,
            SyncLogStatus.WARNING,
            f"{name} denied access",
            f"Access denied at {_clock(event.event_time)} via door {event.door_label} "
            f"(device {event.device_id or 'unknown'})",
            member_name=name,
            entity_type="member",
            entity_id=member_id,
        )
        return ProcessingNote.DENIED

    async def _out_of_order(
        self,
        event: AccessEvent,
        member_id: UUID,
        open_session: AttendanceSession,
        message: str,
        member_name: str,
    ) -> None:
        self._logger.warning(
            "out_of_order_event_ignored",
            member_id=str(member_id),
            session_id=str(open_session.id),
            event_type=event.event_type.value,
            event_time=event.event_time.isoformat(),
            check_in=open_session.check_in.isoformat(),
        )
        await self._record(
            event,
            SyncLogCategory.WARNING,
            SyncLogStatus.WARNING,
            message,
            f"{event.event_type.value.capitalize()} at {_clock(event.event_time)} via door "
            f"{event.door_label} arrived after the check-in at "
            f"{_clock(open_session.check_in)}; attendance left unchanged",
            session=open_session,
            member_name=member_name,
        )

    # =========================================================================
    # Logging helpers
    # =========================================================================

    async def _record(
        self,
        event: AccessEvent,
        category: SyncLogCategory,
        status: SyncLogStatus,
        message: str,
        details: str,
        *,
        session: AttendanceSession | None = None,
        member_name: str | None = None,
        entity_type: str = "attendance",
        entity_id: UUID | None = None,
    ) -> None:
        await self._sync_log.record(
            branch_id=event.branch_id,
            category=category,
            message=message,
            status=status,
            details=details,
            entity_type=entity_type,
            entity_id=session.id if session else entity_id,
            entity_name=member_name,
        )

    async def _event_failed(self, event: AccessEvent, e: Exception) -> None:
        self._logger.error(
            "event_reconciliation_failed",
            error=e,
            event_id=str(event.id),
            vendor_event_id=event.vendor_event_id,
        )
        await self._sync_log.record(
            branch_id=event.branch_id,
            category=SyncLogCategory.ERROR,
            message=f"Failed to process {event.event_type.value} event",
            status=SyncLogStatus.ERROR,
            details=f"Vendor event {event.vendor_event_id}: {e}",
            entity_type="access_event",
            entity_id=event.id,
        )


def _name(member: Member | None) -> str:
    return member.full_name if member else UNKNOWN_MEMBER_NAME


def _clock(moment: datetime | None) -> str:
    return moment.strftime("%H:%M:%S") if moment else "unknown time"
