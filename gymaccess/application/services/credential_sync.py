"""Credential sync: push members, credentials and door lists to the vendor.

Flow of sync_member(member_id, branch_id):
    1. Load member and active membership (missing -> error, False)
    2. Resolve accessible vendor door ids across the branch's zones
    3. No doors -> nothing to push, True
    4. Load active credentials (none -> False, no vendor call)
    5. Upsert the vendor person (faces + cards), then configure door
       privileges for the membership period

Any vendor error aborts the sync. Steps already applied stay applied; the
person upsert is idempotent, so the next sync converges. Each sync is
bracketed by a pending Sync Log entry resolved to success/warning/error.
"""

from typing import Any
from uuid import UUID

from gymaccess.application.services.access_resolution import AccessResolver
from gymaccess.core.constants import (
    VENDOR_ACCESS_CONFIG_PATH,
    VENDOR_PERSON_ADD_PATH,
    VENDOR_PERSON_SYNC_PATH,
    VENDOR_PERSON_UPDATE_PATH,
    VENDOR_PERSON_UPSERT_PATH,
)
from gymaccess.core.result import Failure, Success
from gymaccess.domain.entities import (
    Member,
    MemberAccessCredential,
    MemberMembership,
    SyncLogEntry,
    VendorPersonMapping,
)
from gymaccess.domain.enums import CredentialType, SyncLogCategory, SyncLogStatus
from gymaccess.domain.protocols import (
    AccessStoreProtocol,
    LoggerProtocol,
    SyncLogProtocol,
    VendorGatewayProtocol,
)

PERSON_GENDER_UNKNOWN = "unknown"
PERSON_TYPE_MEMBER = 1


class CredentialSyncError:
    """CredentialSync-specific errors (Sync Log details)."""

    MEMBER_NOT_FOUND = "Member not found"
    NO_ACTIVE_MEMBERSHIP = "Member has no active membership"
    NO_CREDENTIALS = "Member has no active credentials"
    PERSON_UPSERT_FAILED = "Failed to upsert vendor person"
    ACCESS_CONFIG_FAILED = "Failed to configure door privileges"
    PERSON_CREATE_FAILED = "Failed to create vendor person"
    PERSON_UPDATE_FAILED = "Failed to update vendor person"
    PERSON_SYNC_FAILED = "Failed to synchronize person to devices"
    CREDENTIAL_NOT_FOUND = "Credential not found"
    UNEXPECTED = "Unexpected error"


class CredentialSyncService:
    """Pushes member identity, credentials and door privileges to the vendor.

    Dependencies (injected via constructor):
        - AccessStoreProtocol: members, memberships, credentials, mappings
        - AccessResolver: which zones (and therefore doors) are allowed
        - VendorGatewayProtocol: vendor calls
        - SyncLogProtocol: operator audit trail
        - LoggerProtocol: structured logs
    """

    def __init__(
        self,
        *,
        store: AccessStoreProtocol,
        resolver: AccessResolver,
        gateway: VendorGatewayProtocol,
        sync_log: SyncLogProtocol,
        logger: LoggerProtocol,
    ) -> None:
        self._store = store
        self._resolver = resolver
        self._gateway = gateway
        self._sync_log = sync_log
        self._logger = logger

    async def sync_member(self, member_id: UUID, branch_id: UUID) -> bool:
        """Push one member's credentials and door privileges to the vendor.

        Args:
            member_id: Member to sync.
            branch_id: Branch whose devices receive the member.

        Returns:
            True when the vendor is up to date (including "no doors"),
            False on missing data, missing credentials or vendor errors.
        """
        log = self._logger.bind(member_id=str(member_id), branch_id=str(branch_id))
        pending = await self._open(branch_id, member_id, "Syncing member access")

        try:
            member = await self._store.get_member(member_id)
            if member is None:
                await self._close(pending, SyncLogStatus.ERROR, CredentialSyncError.MEMBER_NOT_FOUND)
                log.warning("member_sync_member_not_found")
                return False

            membership = await self._store.find_active_membership(member_id)
            if membership is None:
                await self._close(
                    pending,
                    SyncLogStatus.ERROR,
                    f"{CredentialSyncError.NO_ACTIVE_MEMBERSHIP}: {member.full_name}",
                )
                log.warning("member_sync_no_active_membership")
                return False

            door_ids = await self._resolver.accessible_door_ids(member_id, branch_id)
            if not door_ids:
                await self._close(
                    pending,
                    SyncLogStatus.SUCCESS,
                    f"No accessible doors for {member.full_name}",
                )
                log.info("member_sync_no_doors")
                return True

            credentials = await self._store.list_active_credentials(member_id)
            if not credentials:
                await self._close(
                    pending,
                    SyncLogStatus.WARNING,
                    f"{CredentialSyncError.NO_CREDENTIALS}: {member.full_name}",
                )
                log.info("member_sync_no_credentials")
                return False

            person_id = await self._person_id(member_id, branch_id)

            upsert = await self._gateway.call(
                branch_id,
                VENDOR_PERSON_UPSERT_PATH,
                method="POST",
                body=_person_payload(person_id, member, branch_id, credentials),
            )
            if isinstance(upsert, Failure):
                await self._close(
                    pending,
                    SyncLogStatus.ERROR,
                    f"{CredentialSyncError.PERSON_UPSERT_FAILED}: {upsert.error.message}",
                )
                log.warning("member_sync_person_upsert_failed", error_code=upsert.error.code.value)
                return False

            await self._store.save_person_mapping(
                VendorPersonMapping(member_id=member_id, person_id=person_id, branch_id=branch_id)
            )

            access = await self._gateway.call(
                branch_id,
                VENDOR_ACCESS_CONFIG_PATH,
                method="POST",
                body=_access_payload(person_id, door_ids, membership),
            )
            if isinstance(access, Failure):
                await self._close(
                    pending,
                    SyncLogStatus.ERROR,
                    f"{CredentialSyncError.ACCESS_CONFIG_FAILED}: {access.error.message}",
                )
                log.warning("member_sync_access_config_failed", error_code=access.error.code.value)
                return False

            await self._close(
                pending,
                SyncLogStatus.SUCCESS,
                f"Synced {member.full_name}: {len(credentials)} credential(s), "
                f"{len(door_ids)} door(s)",
            )
            log.info("member_synced", doors=len(door_ids), credentials=len(credentials))
            return True

        except Exception as e:
            await self._close(pending, SyncLogStatus.ERROR, f"{CredentialSyncError.UNEXPECTED}: {e}")
            log.error("member_sync_crashed", error=e)
            return False

    async def register_card(self, member_id: UUID, branch_id: UUID, card_number: str) -> bool:
        """Enroll a card for a member and push it to the devices.

        Creates the vendor person (and the mapping) when the member has none
        in this branch, otherwise attaches the card to the existing person.
        The card is stored locally before the device synchronization call;
        re-registering a known card number reactivates that credential
        instead of adding a second one.

        Returns:
            True once the vendor confirmed the synchronization.
        """
        log = self._logger.bind(member_id=str(member_id), branch_id=str(branch_id))
        pending = await self._open(branch_id, member_id, "Registering card")

        try:
            member = await self._store.get_member(member_id)
            if member is None:
                await self._close(pending, SyncLogStatus.ERROR, CredentialSyncError.MEMBER_NOT_FOUND)
                return False

            mapping = await self._store.find_person_mapping(member_id, branch_id)
            if mapping is None:
                created = await self._gateway.call(
                    branch_id,
                    VENDOR_PERSON_ADD_PATH,
                    method="POST",
                    body={
                        "name": member.full_name,
                        "gender": PERSON_GENDER_UNKNOWN,
                        "cardNo": card_number,
                        "personType": PERSON_TYPE_MEMBER,
                    },
                )
                person_id = (
                    _vendor_value(created.value, "personId")
                    if isinstance(created, Success)
                    else None
                )
                if person_id is None:
                    reason = (
                        created.error.message
                        if isinstance(created, Failure)
                        else "response has no personId"
                    )
                    await self._close(
                        pending,
                        SyncLogStatus.ERROR,
                        f"{CredentialSyncError.PERSON_CREATE_FAILED}: {reason}",
                    )
                    return False
                await self._store.save_person_mapping(
                    VendorPersonMapping(member_id=member_id, person_id=person_id, branch_id=branch_id)
                )
            else:
                person_id = mapping.person_id
                updated = await self._gateway.call(
                    branch_id,
                    VENDOR_PERSON_UPDATE_PATH,
                    method="POST",
                    body={"personId": person_id, "cardNo": card_number},
                )
                if isinstance(updated, Failure):
                    await self._close(
                        pending,
                        SyncLogStatus.ERROR,
                        f"{CredentialSyncError.PERSON_UPDATE_FAILED}: {updated.error.message}",
                    )
                    return False

            existing = await self._store.find_credential(
                member_id, CredentialType.CARD, card_number
            )
            if existing is None:
                await self._store.save_credential(
                    MemberAccessCredential(
                        member_id=member_id,
                        credential_type=CredentialType.CARD,
                        credential_value=card_number,
                    )
                )
            elif not existing.is_active:
                existing.activate()
                await self._store.save_credential(existing)

            synced = await self._gateway.call(
                branch_id,
                VENDOR_PERSON_SYNC_PATH,
                method="POST",
                body={"personId": person_id},
            )
            if isinstance(synced, Failure):
                await self._close(
                    pending,
                    SyncLogStatus.ERROR,
                    f"{CredentialSyncError.PERSON_SYNC_FAILED}: {synced.error.message}",
                )
                return False

            await self._close(pending, SyncLogStatus.SUCCESS, f"Card registered for {member.full_name}")
            log.info("card_registered", person_id=person_id)
            return True

        except Exception as e:
            await self._close(pending, SyncLogStatus.ERROR, f"{CredentialSyncError.UNEXPECTED}: {e}")
            log.error("card_registration_crashed", error=e)
            return False

    async def revoke_credential(self, credential_id: UUID, branch_id: UUID | None = None) -> bool:
        """Deactivate a credential. Credentials are never hard-deleted.

        Returns:
            False when the credential does not exist.
        """
        credential = await self._store.get_credential(credential_id)
        if credential is None:
            self._logger.warning("credential_revoke_not_found", credential_id=str(credential_id))
            return False

        if credential.is_active:
            credential.deactivate()
            await self._store.save_credential(credential)

        await self._sync_log.record(
            branch_id=branch_id,
            category=SyncLogCategory.SYNC,
            message=f"Credential revoked ({credential.credential_type.value})",
            status=SyncLogStatus.SUCCESS,
            entity_type="member",
            entity_id=credential.member_id,
        )
        self._logger.info(
            "credential_revoked",
            credential_id=str(credential_id),
            member_id=str(credential.member_id),
        )
        return True

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _person_id(self, member_id: UUID, branch_id: UUID) -> str:
        """Existing vendor person id, else the member id (first sync)."""
        mapping = await self._store.find_person_mapping(member_id, branch_id)
        return mapping.person_id if mapping else str(member_id)

    async def _open(self, branch_id: UUID, member_id: UUID, message: str) -> SyncLogEntry | None:
        result = await self._sync_log.record(
            branch_id=branch_id,
            category=SyncLogCategory.SYNC,
            message=message,
            status=SyncLogStatus.PENDING,
            entity_type="member",
            entity_id=member_id,
        )
        return result.value if isinstance(result, Success) else None

    async def _close(
        self,
        pending: SyncLogEntry | None,
        status: SyncLogStatus,
        details: str,
    ) -> None:
        if pending is None:
            return
        await self._sync_log.resolve(pending, status, details)


def _person_payload(
    person_id: str,
    member: Member,
    branch_id: UUID,
    credentials: list[MemberAccessCredential],
) -> dict[str, Any]:
    return {
        "personId": person_id,
        "personName": member.full_name,
        "gender": PERSON_GENDER_UNKNOWN,
        "orgIndexCode": str(branch_id),
        "phoneNo": "",
        "email": member.email or "",
        "faces": [
            {"faceData": c.credential_value}
            for c in credentials
            if c.credential_type is CredentialType.FACE
        ],
        "cards": [
            {"cardNo": c.credential_value}
            for c in credentials
            if c.credential_type is CredentialType.CARD
        ],
    }


def _access_payload(
    person_id: str,
    door_ids: list[str],
    membership: MemberMembership,
) -> dict[str, Any]:
    return {
        "personId": person_id,
        "doorIndexCodes": door_ids,
        "startTime": membership.start_date.isoformat() if membership.start_date else None,
        "endTime": membership.end_date.isoformat() if membership.end_date else None,
    }


def _vendor_value(body: dict[str, Any], key: str) -> str | None:
    """Read `key` from the envelope top level or its ``data`` object."""
    value = body.get(key)
    if value is None and isinstance(body.get("data"), dict):
        value = body["data"].get(key)
    return str(value) if value is not None else None
