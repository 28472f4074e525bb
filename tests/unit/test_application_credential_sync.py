"""Unit tests for CredentialSyncService.

Tests cover:
- sync_member short-circuits (no member, no membership, no doors, no credentials)
- Person upsert and door privilege payloads
- Vendor failures abort the sync and resolve the Sync Log entry as error
- register_card with and without an existing vendor person
- revoke_credential deactivates without deleting

Architecture:
- Gateway is an AsyncMock returning Result values
- Access resolution runs for real over InMemoryAccessStore
"""

from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest
from uuid_extensions import uuid7

from gymaccess.application.services.access_resolution import AccessResolver
from gymaccess.application.services.credential_sync import (
    CredentialSyncError,
    CredentialSyncService,
)
from gymaccess.core.constants import (
    VENDOR_ACCESS_CONFIG_PATH,
    VENDOR_PERSON_ADD_PATH,
    VENDOR_PERSON_SYNC_PATH,
    VENDOR_PERSON_UPDATE_PATH,
    VENDOR_PERSON_UPSERT_PATH,
)
from gymaccess.core.enums import ErrorCode
from gymaccess.core.result import Failure, Success
from gymaccess.domain.entities import (
    AccessDoor,
    AccessZone,
    Member,
    MemberAccessCredential,
    MembershipAccessPermission,
    VendorPersonMapping,
)
from gymaccess.domain.enums import AccessType, CredentialType, SyncLogStatus
from gymaccess.domain.errors import VendorResourceError
from gymaccess.infrastructure.sync_log import SyncLog
from tests.fakes import InMemoryAccessStore

OK = Success(value={"code": "0", "data": {}})


def _vendor_failure(message: str = "device offline") -> Failure:
    return Failure(
        error=VendorResourceError(
            code=ErrorCode.VENDOR_DEVICE_OFFLINE,
            message=message,
            vendor_code="DEVICE_OFFLINE",
        )
    )


@pytest.fixture
def gateway() -> MagicMock:
    gateway = MagicMock()
    gateway.call = AsyncMock(return_value=OK)
    return gateway


@pytest.fixture
def service(
    store: InMemoryAccessStore,
    gateway: MagicMock,
    sync_log: SyncLog,
    mock_logger: MagicMock,
) -> CredentialSyncService:
    return CredentialSyncService(
        store=store,
        resolver=AccessResolver(store=store),
        gateway=gateway,
        sync_log=sync_log,
        logger=mock_logger,
    )


@pytest.fixture
def doors(store: InMemoryAccessStore, member: Member, branch_id: UUID) -> list[str]:
    """Member's membership allows one zone with two doors."""
    zone = AccessZone(id=uuid7(), name="Gym Floor", branch_id=branch_id)
    store.zones.append(zone)
    store.permissions.append(
        MembershipAccessPermission(
            membership_id=store.memberships[0].membership_id,
            zone_id=zone.id,
            access_type=AccessType.ALLOWED,
        )
    )
    for vendor_id in ("D1", "D2"):
        store.doors.append(
            AccessDoor(id=uuid7(), vendor_door_id=vendor_id, zone_id=zone.id, branch_id=branch_id)
        )
    return ["D1", "D2"]


@pytest.fixture
def card(store: InMemoryAccessStore, member: Member) -> MemberAccessCredential:
    credential = MemberAccessCredential(
        member_id=member.id,
        credential_type=CredentialType.CARD,
        credential_value="CARD-001",
    )
    store.credentials[credential.id] = credential
    return credential


@pytest.fixture
def face(store: InMemoryAccessStore, member: Member) -> MemberAccessCredential:
    credential = MemberAccessCredential(
        member_id=member.id,
        credential_type=CredentialType.FACE,
        credential_value="face-template-1",
    )
    store.credentials[credential.id] = credential
    return credential


def _paths(gateway: MagicMock) -> list[str]:
    return [call.args[1] for call in gateway.call.await_args_list]


def _body(gateway: MagicMock, index: int) -> dict:
    return gateway.call.await_args_list[index].kwargs["body"]


# =============================================================================
# sync_member
# =============================================================================


class TestSyncMemberShortCircuits:
    async def test_unknown_member(self, service, gateway, store, branch_id):
        assert await service.sync_member(uuid7(), branch_id) is False
        gateway.call.assert_not_awaited()
        assert store.sync_log[0].status is SyncLogStatus.ERROR
        assert store.sync_log[0].details == CredentialSyncError.MEMBER_NOT_FOUND

    async def test_no_active_membership(self, service, gateway, store, member, branch_id):
        store.memberships[0].status = "expired"

        assert await service.sync_member(member.id, branch_id) is False
        gateway.call.assert_not_awaited()

    async def test_no_doors_is_success_without_vendor_calls(
        self, service, gateway, store, member, card, branch_id
    ):
        assert await service.sync_member(member.id, branch_id) is True
        gateway.call.assert_not_awaited()
        assert store.sync_log[0].status is SyncLogStatus.SUCCESS

    async def test_no_credentials_fails_without_vendor_calls(
        self, service, gateway, store, member, doors, branch_id
    ):
        assert await service.sync_member(member.id, branch_id) is False
        gateway.call.assert_not_awaited()
        assert store.sync_log[0].status is SyncLogStatus.WARNING

    async def test_revoked_credentials_do_not_count(
        self, service, gateway, store, member, doors, card, branch_id
    ):
        store.credentials[card.id].is_active = False

        assert await service.sync_member(member.id, branch_id) is False
        gateway.call.assert_not_awaited()


class TestSyncMemberPush:
    async def test_upserts_person_then_configures_doors(
        self, service, gateway, store, member, doors, card, face, branch_id
    ):
        assert await service.sync_member(member.id, branch_id) is True

        assert _paths(gateway) == [VENDOR_PERSON_UPSERT_PATH, VENDOR_ACCESS_CONFIG_PATH]
        person = _body(gateway, 0)
        assert person["personId"] == str(member.id)
        assert person["personName"] == "Jane Doe"
        assert person["email"] == "jane@example.com"
        assert person["orgIndexCode"] == str(branch_id)
        assert person["cards"] == [{"cardNo": "CARD-001"}]
        assert person["faces"] == [{"faceData": "face-template-1"}]

        access = _body(gateway, 1)
        assert access == {
            "personId": str(member.id),
            "doorIndexCodes": doors,
            "startTime": "2025-01-01",
            "endTime": "2025-12-31",
        }

    async def test_records_person_mapping(
        self, service, store, member, doors, card, branch_id
    ):
        await service.sync_member(member.id, branch_id)

        mapping = await store.find_person_mapping(member.id, branch_id)
        assert mapping is not None
        assert mapping.person_id == str(member.id)

    async def test_existing_mapping_reuses_person_id(
        self, service, gateway, store, member, doors, card, branch_id
    ):
        store.mappings.append(
            VendorPersonMapping(member_id=member.id, person_id="P-77", branch_id=branch_id)
        )

        await service.sync_member(member.id, branch_id)

        assert _body(gateway, 0)["personId"] == "P-77"
        assert _body(gateway, 1)["personId"] == "P-77"

    async def test_success_resolves_pending_entry(
        self, service, store, member, doors, card, branch_id
    ):
        await service.sync_member(member.id, branch_id)

        assert len(store.sync_log) == 1
        entry = store.sync_log[0]
        assert entry.status is SyncLogStatus.SUCCESS
        assert entry.entity_id == member.id
        assert "2 door(s)" in entry.details


class TestSyncMemberFailures:
    async def test_upsert_failure_stops_before_doors(
        self, service, gateway, store, member, doors, card, branch_id
    ):
        gateway.call.return_value = _vendor_failure()

        assert await service.sync_member(member.id, branch_id) is False

        assert _paths(gateway) == [VENDOR_PERSON_UPSERT_PATH]
        assert store.mappings == []
        entry = store.sync_log[0]
        assert entry.status is SyncLogStatus.ERROR
        assert entry.details.startswith(CredentialSyncError.PERSON_UPSERT_FAILED)

    async def test_access_config_failure(
        self, service, gateway, store, member, doors, card, branch_id
    ):
        gateway.call.side_effect = [OK, _vendor_failure("invalid door")]

        assert await service.sync_member(member.id, branch_id) is False

        assert store.sync_log[0].details == (
            f"{CredentialSyncError.ACCESS_CONFIG_FAILED}: invalid door"
        )

    async def test_store_crash_is_reported(
        self, service, gateway, store, member, doors, card, branch_id
    ):
        store.fail_on.add("list_active_credentials")

        assert await service.sync_member(member.id, branch_id) is False

        assert store.sync_log[0].status is SyncLogStatus.ERROR
        assert store.sync_log[0].details.startswith(CredentialSyncError.UNEXPECTED)


# =============================================================================
# register_card
# =============================================================================


class TestRegisterCard:
    async def test_creates_person_when_unmapped(
        self, service, gateway, store, member, branch_id
    ):
        gateway.call.side_effect = [
            Success(value={"code": "0", "data": {"personId": "P-900"}}),
            OK,
        ]

        assert await service.register_card(member.id, branch_id, "CARD-9") is True

        assert _paths(gateway) == [VENDOR_PERSON_ADD_PATH, VENDOR_PERSON_SYNC_PATH]
        assert _body(gateway, 0)["cardNo"] == "CARD-9"
        assert _body(gateway, 1) == {"personId": "P-900"}
        mapping = await store.find_person_mapping(member.id, branch_id)
        assert mapping.person_id == "P-900"
        assert await store.find_member_by_credential(CredentialType.CARD, "CARD-9") == member.id

    async def test_updates_existing_person(self, service, gateway, store, member, branch_id):
        store.mappings.append(
            VendorPersonMapping(member_id=member.id, person_id="P-77", branch_id=branch_id)
        )

        assert await service.register_card(member.id, branch_id, "CARD-9") is True

        assert _paths(gateway) == [VENDOR_PERSON_UPDATE_PATH, VENDOR_PERSON_SYNC_PATH]
        assert _body(gateway, 0) == {"personId": "P-77", "cardNo": "CARD-9"}

    async def test_create_without_person_id_fails(
        self, service, gateway, store, member, branch_id
    ):
        gateway.call.return_value = Success(value={"code": "0", "data": {}})

        assert await service.register_card(member.id, branch_id, "CARD-9") is False

        assert store.mappings == []
        assert store.credentials == {}
        assert store.sync_log[0].details.startswith(CredentialSyncError.PERSON_CREATE_FAILED)

    async def test_device_sync_failure_keeps_local_card(
        self, service, gateway, store, member, branch_id
    ):
        store.mappings.append(
            VendorPersonMapping(member_id=member.id, person_id="P-77", branch_id=branch_id)
        )
        gateway.call.side_effect = [OK, _vendor_failure()]

        assert await service.register_card(member.id, branch_id, "CARD-9") is False

        assert len(store.credentials) == 1
        assert store.sync_log[0].details.startswith(CredentialSyncError.PERSON_SYNC_FAILED)

    async def test_unknown_member(self, service, gateway, branch_id):
        assert await service.register_card(uuid7(), branch_id, "CARD-9") is False
        gateway.call.assert_not_awaited()

    async def test_same_card_twice_keeps_one_credential(
        self, service, store, member, branch_id
    ):
        store.mappings.append(
            VendorPersonMapping(member_id=member.id, person_id="P-77", branch_id=branch_id)
        )

        assert await service.register_card(member.id, branch_id, "CARD-9") is True
        assert await service.register_card(member.id, branch_id, "CARD-9") is True

        [credential] = store.credentials.values()
        assert credential.credential_value == "CARD-9"
        assert credential.is_active

    async def test_revoked_card_is_reactivated(self, service, store, member, card, branch_id):
        store.mappings.append(
            VendorPersonMapping(member_id=member.id, person_id="P-77", branch_id=branch_id)
        )
        store.credentials[card.id].deactivate()

        assert await service.register_card(member.id, branch_id, card.credential_value) is True

        assert list(store.credentials) == [card.id]
        assert store.credentials[card.id].is_active


# =============================================================================
# revoke_credential
# =============================================================================


class TestRevokeCredential:
    async def test_deactivates_and_logs(self, service, store, card, member, branch_id):
        assert await service.revoke_credential(card.id, branch_id) is True

        assert card.id in store.credentials
        assert store.credentials[card.id].is_active is False
        assert store.sync_log[-1].message == "Credential revoked (card)"
        assert store.sync_log[-1].entity_id == member.id

    async def test_already_revoked_is_idempotent(self, service, store, card):
        store.credentials[card.id].is_active = False

        assert await service.revoke_credential(card.id) is True
        assert store.credentials[card.id].is_active is False

    async def test_unknown_credential(self, service, store):
        assert await service.revoke_credential(uuid7()) is False
        assert store.sync_log == []
