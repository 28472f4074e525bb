"""Unit tests for EventReconciler.

Tests cover:
- Entry opens a session; duplicates inside the window are ignored
- Stale open session auto-closed one minute before a new entry
- Exit closes the latest open session with a rounded duration
- Orphan exits, exit replays, denied and unmapped events
- Failing events stay queued; batches are marked together
- Late entries and exits never close a session before its check-in
- Concurrent passes over one branch are serialized
"""

import asyncio
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock
from uuid import UUID

import pytest
from uuid_extensions import uuid7

from gymaccess.application.services.event_reconciliation import (
    EventReconciler,
    ProcessingNote,
)
from gymaccess.core.constants import AUTO_CLOSE_NOTE
from gymaccess.domain.entities import AccessEvent, AttendanceSession, Member
from gymaccess.domain.enums import AccessEventType, SyncLogStatus
from gymaccess.infrastructure.sync_log import SyncLog
from tests.fakes import InMemoryAccessStore

T0 = datetime(2025, 3, 3, 9, 0, tzinfo=UTC)


@pytest.fixture
def reconciler(
    store: InMemoryAccessStore,
    sync_log: SyncLog,
    mock_logger: MagicMock,
) -> EventReconciler:
    return EventReconciler(store=store, sync_log=sync_log, logger=mock_logger, batch_size=20)


@pytest.fixture
def queue(store: InMemoryAccessStore, branch_id: UUID):
    """Queue a door event for the branch and return it."""
    counter = iter(range(1, 1000))

    def _queue(
        event_type: AccessEventType,
        at: datetime,
        member_id: UUID | None,
        vendor_event_id: str | None = None,
    ) -> AccessEvent:
        event = AccessEvent(
            vendor_event_id=vendor_event_id or f"E{next(counter)}",
            branch_id=branch_id,
            event_time=at,
            event_type=event_type,
            member_id=member_id,
            door_name="Main Entrance",
            device_id="DEV-1",
        )
        store.events[event.id] = event
        return event

    return _queue


def _notes(store: InMemoryAccessStore) -> dict[str, str | None]:
    return {e.vendor_event_id: e.processing_note for e in store.events.values() if e.processed}


class TestEntries:
    async def test_entry_opens_session(self, reconciler, store, member, queue, branch_id):
        queue(AccessEventType.ENTRY, T0, member.id)

        assert await reconciler.process_events(branch_id) == 1

        [session] = store.sessions_for(member.id)
        assert session.check_in == T0
        assert session.is_open
        assert session.device_id == "DEV-1"
        assert session.check_in_event_id == "E1"
        assert store.log_messages() == ["Jane Doe checked in"]

    async def test_second_entry_inside_window_is_duplicate(
        self, reconciler, store, member, queue, branch_id
    ):
        queue(AccessEventType.ENTRY, T0, member.id)
        queue(AccessEventType.ENTRY, T0 + timedelta(minutes=2), member.id)

        assert await reconciler.process_events(branch_id) == 2

        assert len(store.sessions_for(member.id)) == 1
        assert _notes(store)["E2"] == ProcessingNote.DUPLICATE_ENTRY

    async def test_entry_at_window_edge_is_duplicate(
        self, reconciler, store, member, queue, branch_id
    ):
        queue(AccessEventType.ENTRY, T0, member.id)
        queue(AccessEventType.ENTRY, T0 + timedelta(minutes=5), member.id)

        await reconciler.process_events(branch_id)

        assert len(store.sessions_for(member.id)) == 1

    async def test_stale_session_is_auto_closed(
        self, reconciler, store, member, queue, branch_id
    ):
        queue(AccessEventType.ENTRY, T0, member.id)
        queue(AccessEventType.ENTRY, T0 + timedelta(minutes=10), member.id)

        await reconciler.process_events(branch_id)

        first, second = store.sessions_for(member.id)
        assert first.check_out == T0 + timedelta(minutes=9)
        assert first.duration_minutes == 9
        assert first.notes == AUTO_CLOSE_NOTE
        assert second.check_in == T0 + timedelta(minutes=10)
        assert second.is_open
        assert store.sync_log[-1].status is SyncLogStatus.WARNING
        assert "auto-closed" in store.sync_log[-1].message

    async def test_entry_older_than_open_session_leaves_it_open(
        self, reconciler, store, member, queue, branch_id
    ):
        queue(AccessEventType.ENTRY, T0 + timedelta(minutes=30), member.id)
        await reconciler.process_events(branch_id)
        queue(AccessEventType.ENTRY, T0, member.id)

        assert await reconciler.process_events(branch_id) == 1

        [session] = store.sessions_for(member.id)
        assert session.check_in == T0 + timedelta(minutes=30)
        assert session.is_open
        assert session.duration_minutes is None
        assert _notes(store)["E2"] == ProcessingNote.OUT_OF_ORDER_ENTRY
        assert store.sync_log[-1].status is SyncLogStatus.WARNING
        assert store.log_messages()[-1] == "Jane Doe entry older than current visit"

    async def test_auto_close_never_precedes_check_in(
        self, store, sync_log, mock_logger, member, queue, branch_id
    ):
        reconciler = EventReconciler(
            store=store, sync_log=sync_log, logger=mock_logger, duplicate_window=timedelta(0)
        )
        queue(AccessEventType.ENTRY, T0, member.id)
        queue(AccessEventType.ENTRY, T0 + timedelta(seconds=30), member.id)

        await reconciler.process_events(branch_id)

        first, second = store.sessions_for(member.id)
        assert first.check_out == T0
        assert first.duration_minutes == 0
        assert second.is_open

    async def test_replayed_entry_is_ignored(
        self, reconciler, store, member, queue, branch_id
    ):
        store.sessions[uuid7()] = AttendanceSession(
            member_id=member.id,
            branch_id=branch_id,
            check_in=T0,
            check_in_event_id="E-REPLAY",
        )
        queue(AccessEventType.ENTRY, T0 + timedelta(hours=1), member.id, "E-REPLAY")

        await reconciler.process_events(branch_id)

        assert len(store.sessions_for(member.id)) == 1
        assert _notes(store)["E-REPLAY"] == ProcessingNote.REPLAYED_ENTRY

    async def test_member_role_copied(self, reconciler, store, member, queue, branch_id):
        store.members[member.id].role = "staff"
        queue(AccessEventType.ENTRY, T0, member.id)

        await reconciler.process_events(branch_id)

        assert store.sessions_for(member.id)[0].member_role == "staff"


class TestExits:
    async def test_exit_closes_session(self, reconciler, store, member, queue, branch_id):
        queue(AccessEventType.ENTRY, T0, member.id)
        queue(AccessEventType.EXIT, T0 + timedelta(minutes=45), member.id)

        assert await reconciler.process_events(branch_id) == 2

        [session] = store.sessions_for(member.id)
        assert session.check_out == T0 + timedelta(minutes=45)
        assert session.duration_minutes == 45
        assert session.check_out_event_id == "E2"
        assert store.log_messages()[-1] == "Jane Doe checked out"
        assert "45 minutes" in store.sync_log[-1].details

    async def test_duration_is_rounded(self, reconciler, store, member, queue, branch_id):
        queue(AccessEventType.ENTRY, T0, member.id)
        queue(AccessEventType.EXIT, T0 + timedelta(minutes=30, seconds=40), member.id)

        await reconciler.process_events(branch_id)

        assert store.sessions_for(member.id)[0].duration_minutes == 31

    async def test_orphan_exit(self, reconciler, store, member, queue, branch_id):
        queue(AccessEventType.EXIT, T0, member.id)

        assert await reconciler.process_events(branch_id) == 1

        assert store.sessions_for(member.id) == []
        assert _notes(store)["E1"] == ProcessingNote.ORPHAN_EXIT
        assert store.sync_log[-1].status is SyncLogStatus.WARNING
        assert store.log_messages() == ["Jane Doe exit without check-in"]

    async def test_replayed_exit_does_not_touch_sessions(
        self, reconciler, store, member, queue, branch_id
    ):
        closed = AttendanceSession(
            member_id=member.id,
            branch_id=branch_id,
            check_in=T0,
            check_out=T0 + timedelta(minutes=30),
            duration_minutes=30,
            check_out_event_id="X-1",
        )
        store.sessions[closed.id] = closed
        reopened = AttendanceSession(
            member_id=member.id, branch_id=branch_id, check_in=T0 + timedelta(hours=2)
        )
        store.sessions[reopened.id] = reopened
        queue(AccessEventType.EXIT, T0 + timedelta(hours=3), member.id, "X-1")

        await reconciler.process_events(branch_id)

        assert store.sessions[reopened.id].is_open
        assert _notes(store)["X-1"] == ProcessingNote.REPLAYED_EXIT

    async def test_exit_before_check_in_keeps_session_open(
        self, reconciler, store, member, queue, branch_id
    ):
        queue(AccessEventType.ENTRY, T0 + timedelta(minutes=30), member.id)
        await reconciler.process_events(branch_id)
        queue(AccessEventType.EXIT, T0, member.id)

        assert await reconciler.process_events(branch_id) == 1

        [session] = store.sessions_for(member.id)
        assert session.is_open
        assert _notes(store)["E2"] == ProcessingNote.EXIT_BEFORE_CHECK_IN
        assert store.log_messages()[-1] == "Jane Doe exit before current check-in"


class TestOtherEvents:
    async def test_denied_event_logged_without_attendance(
        self, reconciler, store, member, queue, branch_id
    ):
        queue(AccessEventType.DENIED, T0, member.id)

        await reconciler.process_events(branch_id)

        assert store.sessions == {}
        entry = store.sync_log[-1]
        assert entry.message == "Jane Doe denied access"
        assert "Main Entrance" in entry.details
        assert "DEV-1" in entry.details
        assert entry.entity_id == member.id

    async def test_unmapped_event(self, reconciler, store, queue, branch_id):
        queue(AccessEventType.ENTRY, T0, None)

        assert await reconciler.process_events(branch_id) == 1

        assert store.sessions == {}
        assert _notes(store)["E1"] == ProcessingNote.UNMAPPED_MEMBER
        assert store.sync_log[-1].status is SyncLogStatus.WARNING

    async def test_unknown_member_name(self, reconciler, store, queue, branch_id):
        queue(AccessEventType.ENTRY, T0, uuid7())

        await reconciler.process_events(branch_id)

        assert store.log_messages() == ["Unknown Member checked in"]


class TestProcessing:
    async def test_empty_queue(self, reconciler, store, branch_id):
        assert await reconciler.process_events(branch_id) == 0
        assert store.mark_batches == []

    async def test_events_processed_in_time_order(
        self, reconciler, store, member, queue, branch_id
    ):
        queue(AccessEventType.EXIT, T0 + timedelta(minutes=60), member.id)
        queue(AccessEventType.ENTRY, T0, member.id)

        await reconciler.process_events(branch_id)

        [session] = store.sessions_for(member.id)
        assert session.duration_minutes == 60

    async def test_failing_event_stays_queued(
        self, reconciler, store, member, queue, branch_id, monkeypatch
    ):
        broken_member = Member(id=uuid7(), first_name="Broken", last_name="Record")
        good = queue(AccessEventType.ENTRY, T0, member.id)
        bad = queue(AccessEventType.ENTRY, T0 + timedelta(minutes=1), broken_member.id)
        original = store.get_member

        async def get_member(member_id):
            if member_id == broken_member.id:
                raise RuntimeError("row lock timeout")
            return await original(member_id)

        monkeypatch.setattr(store, "get_member", get_member)

        assert await reconciler.process_events(branch_id) == 1

        assert store.events[good.id].processed
        assert not store.events[bad.id].processed
        error = store.sync_log[-1]
        assert error.status is SyncLogStatus.ERROR
        assert "row lock timeout" in error.details

    async def test_batches_are_marked_together(
        self, store, sync_log, mock_logger, member, queue, branch_id
    ):
        reconciler = EventReconciler(
            store=store, sync_log=sync_log, logger=mock_logger, batch_size=2
        )
        for minute in range(0, 50, 10):
            queue(AccessEventType.DENIED, T0 + timedelta(minutes=minute), member.id)

        assert await reconciler.process_events(branch_id) == 5

        assert store.mark_batches == [2, 2, 1]

    async def test_fetch_limit(self, store, sync_log, mock_logger, member, queue, branch_id):
        reconciler = EventReconciler(
            store=store, sync_log=sync_log, logger=mock_logger, fetch_limit=3
        )
        for minute in range(5):
            queue(AccessEventType.DENIED, T0 + timedelta(minutes=minute), member.id)

        assert await reconciler.process_events(branch_id) == 3
        assert await reconciler.process_events(branch_id) == 2

    async def test_other_branches_untouched(self, reconciler, store, member, queue):
        queue(AccessEventType.ENTRY, T0, member.id)

        assert await reconciler.process_events(uuid7()) == 0
        assert store.sessions == {}


class YieldingAccessStore(InMemoryAccessStore):
    """Reads give up the event loop once, like a database round-trip."""

    async def list_unprocessed_events(self, branch_id, limit):
        await asyncio.sleep(0)
        return await super().list_unprocessed_events(branch_id, limit)

    async def find_open_session(self, member_id, branch_id):
        await asyncio.sleep(0)
        return await super().find_open_session(member_id, branch_id)

    async def get_member(self, member_id):
        await asyncio.sleep(0)
        return await super().get_member(member_id)


class TestConcurrentPasses:
    @pytest.fixture
    def store(self) -> InMemoryAccessStore:
        return YieldingAccessStore()

    async def test_concurrent_passes_open_one_session(
        self, reconciler, store, member, queue, branch_id
    ):
        queue(AccessEventType.ENTRY, T0, member.id)

        counts = await asyncio.gather(
            reconciler.process_events(branch_id),
            reconciler.process_events(branch_id),
        )

        assert sorted(counts) == [0, 1]
        assert len(store.sessions_for(member.id)) == 1
        assert store.log_messages() == ["Jane Doe checked in"]

    async def test_pass_waits_for_running_pass(
        self, reconciler, store, member, queue, branch_id
    ):
        queue(AccessEventType.ENTRY, T0, member.id)

        async with reconciler.lock_for(branch_id):
            task = asyncio.create_task(reconciler.process_events(branch_id))
            await asyncio.sleep(0)
            assert not task.done()
            assert store.sessions == {}

        assert await task == 1
        assert len(store.sessions_for(member.id)) == 1

    async def test_branches_have_separate_locks(self, reconciler, branch_id):
        other = uuid7()

        assert reconciler.lock_for(branch_id) is reconciler.lock_for(branch_id)
        assert reconciler.lock_for(branch_id) is not reconciler.lock_for(other)
