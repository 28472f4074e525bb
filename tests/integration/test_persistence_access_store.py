"""Integration tests for SQLAlchemyAccessStore.

Tests cover:
- Branch settings lookup, active filter and sync state
- Token upsert and delete
- Credential save, deactivate and lookup by value
- Device upsert by vendor device id
- Person mapping upsert
- Event queue ordering, limit and batch marking
- Open session lookup and close
- Sync Log pending -> final transition (only once)

Architecture:
- Real SQLAlchemy async engine over a file-backed SQLite database (aiosqlite)
- Fresh schema per test via Database.create_all()
"""

from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio
from uuid_extensions import uuid7

from gymaccess.domain.entities import (
    AccessDevice,
    AccessEvent,
    AccessToken,
    AttendanceSession,
    MemberAccessCredential,
    SyncLogEntry,
    VendorPersonMapping,
)
from gymaccess.domain.enums import (
    AccessEventType,
    CredentialType,
    SyncLogCategory,
    SyncLogStatus,
    VendorSyncStatus,
)
from gymaccess.infrastructure.persistence import Database, SQLAlchemyAccessStore
from gymaccess.infrastructure.persistence.models import (
    BranchApiSettingsModel,
    SyncLogModel,
)

T0 = datetime(2025, 3, 3, 9, 0, tzinfo=UTC)


@pytest_asyncio.fixture
async def database(tmp_path):
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    await database.create_all()
    yield database
    await database.close()


@pytest.fixture
def sql_store(database) -> SQLAlchemyAccessStore:
    return SQLAlchemyAccessStore(database)


@pytest.mark.integration
class TestBranchSettings:
    async def test_lookup_and_active_filter(self, database, sql_store):
        active, inactive = uuid7(), uuid7()
        async with database.get_session() as session:
            session.add_all(
                [
                    BranchApiSettingsModel(
                        branch_id=active,
                        api_url="https://vendor.test/",
                        app_key="key",
                        app_secret="secret",
                        is_active=True,
                    ),
                    BranchApiSettingsModel(
                        branch_id=inactive,
                        api_url="https://vendor.test",
                        app_key="key",
                        app_secret="secret",
                        is_active=False,
                    ),
                ]
            )

        settings = await sql_store.get_api_settings(active)
        assert settings is not None
        assert settings.api_url == "https://vendor.test"
        assert [s.branch_id for s in await sql_store.list_active_api_settings()] == [active]
        assert await sql_store.get_api_settings(uuid7()) is None

    async def test_sync_state_round_trip(self, database, sql_store):
        branch_id = uuid7()
        async with database.get_session() as session:
            session.add(
                BranchApiSettingsModel(
                    branch_id=branch_id,
                    api_url="https://vendor.test",
                    app_key="key",
                    app_secret="secret",
                    is_active=True,
                )
            )

        settings = await sql_store.get_api_settings(branch_id)
        assert settings.last_sync_status is None
        settings.subscription_id = "SUB-1"
        settings.message_offset = "42"
        settings.record_sync(VendorSyncStatus.FAILED, "Vendor did not answer", at=T0)
        # Credentials are not written by a sync state save
        settings.app_secret = "changed"
        await sql_store.save_sync_state(settings)

        stored = await sql_store.get_api_settings(branch_id)
        assert stored.subscription_id == "SUB-1"
        assert stored.message_offset == "42"
        assert stored.last_sync_status is VendorSyncStatus.FAILED
        assert stored.last_sync_error == "Vendor did not answer"
        assert stored.last_sync is not None
        assert stored.app_secret == "secret"

    async def test_token_upsert_and_delete(self, sql_store):
        branch_id = uuid7()
        await sql_store.save_token(
            AccessToken(branch_id=branch_id, token="tok-1", expires_at=T0)
        )
        await sql_store.save_token(
            AccessToken(branch_id=branch_id, token="tok-2", expires_at=T0 + timedelta(days=7))
        )

        token = await sql_store.load_token(branch_id)
        assert token is not None
        assert token.token == "tok-2"

        await sql_store.delete_token(branch_id)
        assert await sql_store.load_token(branch_id) is None


@pytest.mark.integration
class TestCredentialsAndMappings:
    async def test_credential_lifecycle(self, sql_store):
        member_id = uuid7()
        credential = MemberAccessCredential(
            member_id=member_id,
            credential_type=CredentialType.CARD,
            credential_value="C-1",
        )
        await sql_store.save_credential(credential)

        assert await sql_store.find_member_by_credential(CredentialType.CARD, "C-1") == member_id
        assert await sql_store.find_member_by_credential(CredentialType.FACE, "C-1") is None

        credential.deactivate()
        await sql_store.save_credential(credential)

        stored = await sql_store.get_credential(credential.id)
        assert stored is not None
        assert stored.is_active is False
        assert await sql_store.list_active_credentials(member_id) == []
        assert await sql_store.find_member_by_credential(CredentialType.CARD, "C-1") is None

    async def test_find_credential_prefers_active(self, sql_store):
        member_id = uuid7()
        revoked = MemberAccessCredential(
            member_id=member_id,
            credential_type=CredentialType.CARD,
            credential_value="C-7",
            is_active=False,
        )
        await sql_store.save_credential(revoked)

        found = await sql_store.find_credential(member_id, CredentialType.CARD, "C-7")
        assert found.id == revoked.id
        assert found.is_active is False
        assert await sql_store.find_credential(member_id, CredentialType.FACE, "C-7") is None
        assert await sql_store.find_credential(uuid7(), CredentialType.CARD, "C-7") is None

    async def test_person_mapping_upsert(self, sql_store):
        member_id, branch_id = uuid7(), uuid7()
        await sql_store.save_person_mapping(
            VendorPersonMapping(member_id=member_id, person_id="P-1", branch_id=branch_id)
        )
        await sql_store.save_person_mapping(
            VendorPersonMapping(member_id=member_id, person_id="P-2", branch_id=branch_id)
        )

        mapping = await sql_store.find_person_mapping(member_id, branch_id)
        assert mapping.person_id == "P-2"
        assert await sql_store.find_member_by_person(branch_id, "P-2") == member_id
        assert await sql_store.find_member_by_person(branch_id, "P-1") is None


@pytest.mark.integration
class TestEventQueue:
    async def test_unprocessed_in_time_order_with_limit(self, sql_store):
        branch_id = uuid7()
        for vendor_id, minutes in (("E-3", 30), ("E-1", 0), ("E-2", 10)):
            await sql_store.save_event(
                AccessEvent(
                    vendor_event_id=vendor_id,
                    branch_id=branch_id,
                    event_time=T0 + timedelta(minutes=minutes),
                    event_type=AccessEventType.ENTRY,
                )
            )

        pending = await sql_store.list_unprocessed_events(branch_id, limit=2)

        assert [e.vendor_event_id for e in pending] == ["E-1", "E-2"]
        assert pending[0].event_type is AccessEventType.ENTRY

    async def test_mark_processed(self, sql_store):
        branch_id = uuid7()
        event = AccessEvent(
            vendor_event_id="E-1",
            branch_id=branch_id,
            event_time=T0,
            event_type=AccessEventType.DENIED,
        )
        await sql_store.save_event(event)

        event.mark_processed(note="denied")
        await sql_store.mark_events_processed([event])

        assert await sql_store.list_unprocessed_events(branch_id, limit=10) == []
        stored = await sql_store.find_event_by_vendor_id(branch_id, "E-1")
        assert stored.processed is True
        assert stored.processing_note == "denied"

    async def test_mark_processed_empty_batch(self, sql_store):
        await sql_store.mark_events_processed([])


@pytest.mark.integration
class TestAttendance:
    async def test_open_and_close(self, sql_store):
        member_id, branch_id = uuid7(), uuid7()
        session = AttendanceSession(
            member_id=member_id,
            branch_id=branch_id,
            check_in=T0,
            check_in_event_id="E-1",
        )
        await sql_store.save_session(session)

        open_session = await sql_store.find_open_session(member_id, branch_id)
        assert open_session is not None
        assert open_session.id == session.id

        open_session.close(T0 + timedelta(minutes=45), event_id="X-1")
        await sql_store.save_session(open_session)

        assert await sql_store.find_open_session(member_id, branch_id) is None
        closed = await sql_store.find_session_by_checkout_event(branch_id, "X-1")
        assert closed.duration_minutes == 45


@pytest.mark.integration
class TestSyncLog:
    async def test_pending_entry_resolved_once(self, database, sql_store):
        entry = SyncLogEntry(
            branch_id=uuid7(),
            category=SyncLogCategory.SYNC,
            message="Syncing member access",
            status=SyncLogStatus.PENDING,
        )
        await sql_store.append_sync_log(entry)

        entry.resolve(SyncLogStatus.SUCCESS, "done")
        await sql_store.update_sync_log(entry)
        entry.status = SyncLogStatus.ERROR
        await sql_store.update_sync_log(entry)

        async with database.get_session() as session:
            model = await session.get(SyncLogModel, entry.id)
        assert model.status == "success"
        assert model.details == "done"


@pytest.mark.integration
class TestDevices:
    async def test_upsert_by_vendor_device_id(self, sql_store):
        branch_id = uuid7()
        first = AccessDevice(branch_id=branch_id, device_id="Q1", name="Main Door", is_online=True)
        await sql_store.save_devices(
            [first, AccessDevice(branch_id=branch_id, device_id="Q2", name="Back Door")]
        )

        await sql_store.save_devices(
            [
                AccessDevice(
                    branch_id=branch_id,
                    device_id="Q1",
                    name="Front Door",
                    model="DS-K1T",
                    is_online=False,
                    last_synced_at=T0,
                )
            ]
        )

        devices = await sql_store.list_devices(branch_id)
        assert [d.device_id for d in devices] == ["Q2", "Q1"]
        updated = devices[1]
        assert updated.id == first.id
        assert updated.name == "Front Door"
        assert updated.model == "DS-K1T"
        assert updated.is_online is False
        assert await sql_store.list_devices(uuid7()) == []

    async def test_save_no_devices(self, sql_store):
        await sql_store.save_devices([])
