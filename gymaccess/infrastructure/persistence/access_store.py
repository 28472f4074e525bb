"""SQLAlchemyAccessStore - SQLAlchemy implementation of AccessStoreProtocol.

Adapter for hexagonal architecture. Maps between domain entities and the
database models in `gymaccess.infrastructure.persistence.models`.

Each operation runs in its own session (commit on success, rollback on
error), so the store can be shared by long-lived services such as the
event poller and the token manager.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, or_, select, update

from gymaccess.domain.entities import (
    AccessDevice,
    AccessDoor,
    AccessEvent,
    AccessSchedule,
    AccessToken,
    AccessZone,
    AttendanceSession,
    BranchApiSettings,
    Member,
    MemberAccessCredential,
    MemberAccessOverride,
    MemberMembership,
    MembershipAccessPermission,
    SyncLogEntry,
    VendorPersonMapping,
)
from gymaccess.domain.enums import (
    AccessEventType,
    AccessType,
    CredentialType,
    SyncLogStatus,
    VendorSyncStatus,
)
from gymaccess.infrastructure.persistence.database import Database
from gymaccess.infrastructure.persistence.models import (
    AccessDeviceModel,
    AccessDoorModel,
    AccessEventModel,
    AccessZoneModel,
    AttendanceSessionModel,
    BranchApiSettingsModel,
    MemberAccessCredentialModel,
    MemberAccessOverrideModel,
    MemberMembershipModel,
    MemberModel,
    MembershipAccessPermissionModel,
    SyncLogModel,
    VendorPersonMappingModel,
    VendorTokenModel,
)

ACTIVE_MEMBERSHIP_STATUS = "active"


class SQLAlchemyAccessStore:
    """SQLAlchemy implementation of AccessStoreProtocol.

    This class does NOT inherit from the protocol (Protocol uses structural typing).

    Attributes:
        database: Database providing transactional sessions.

    Example:
        >>> store = SQLAlchemyAccessStore(Database(settings.database_url))
        >>> api_settings = await store.get_api_settings(branch_id)
    """

    def __init__(self, database: Database) -> None:
        self.database = database

    # =========================================================================
    # Branch settings and tokens
    # =========================================================================

    async def get_api_settings(self, branch_id: UUID) -> BranchApiSettings | None:
        stmt = select(BranchApiSettingsModel).where(
            BranchApiSettingsModel.branch_id == branch_id
        )
        async with self.database.get_session() as session:
            model = (await session.execute(stmt)).scalar_one_or_none()
        return _settings_to_domain(model) if model else None

    async def list_active_api_settings(self) -> list[BranchApiSettings]:
        stmt = select(BranchApiSettingsModel).where(
            BranchApiSettingsModel.is_active.is_(True)
        )
        async with self.database.get_session() as session:
            models = (await session.execute(stmt)).scalars().all()
        return [_settings_to_domain(model) for model in models]

    async def save_sync_state(self, api_settings: BranchApiSettings) -> None:
        stmt = (
            update(BranchApiSettingsModel)
            .where(BranchApiSettingsModel.branch_id == api_settings.branch_id)
            .values(
                subscription_id=api_settings.subscription_id,
                message_offset=api_settings.message_offset,
                last_sync=api_settings.last_sync,
                last_sync_status=(
                    api_settings.last_sync_status.value
                    if api_settings.last_sync_status
                    else None
                ),
                last_sync_error=api_settings.last_sync_error,
            )
        )
        async with self.database.get_session() as session:
            await session.execute(stmt)

    async def load_token(self, branch_id: UUID) -> AccessToken | None:
        stmt = select(VendorTokenModel).where(VendorTokenModel.branch_id == branch_id)
        async with self.database.get_session() as session:
            model = (await session.execute(stmt)).scalar_one_or_none()
        if model is None:
            return None
        return AccessToken(
            branch_id=model.branch_id,
            token=model.token,
            expires_at=model.expires_at,
        )

    async def save_token(self, token: AccessToken) -> None:
        """Upsert the branch token (one row per branch)."""
        stmt = select(VendorTokenModel).where(VendorTokenModel.branch_id == token.branch_id)
        async with self.database.get_session() as session:
            model = (await session.execute(stmt)).scalar_one_or_none()
            if model is None:
                session.add(
                    VendorTokenModel(
                        branch_id=token.branch_id,
                        token=token.token,
                        expires_at=token.expires_at,
                    )
                )
            else:
                model.token = token.token
                model.expires_at = token.expires_at

    async def delete_token(self, branch_id: UUID) -> None:
        stmt = delete(VendorTokenModel).where(VendorTokenModel.branch_id == branch_id)
        async with self.database.get_session() as session:
            await session.execute(stmt)

    async def delete_expired_tokens(self, now: datetime) -> int:
        stmt = delete(VendorTokenModel).where(VendorTokenModel.expires_at <= now)
        async with self.database.get_session() as session:
            result = await session.execute(stmt)
        return result.rowcount or 0  # type: ignore[attr-defined]

    # =========================================================================
    # Zones, doors, devices and permissions
    # =========================================================================

    async def list_zones(self, branch_id: UUID) -> list[AccessZone]:
        stmt = (
            select(AccessZoneModel)
            .where(AccessZoneModel.branch_id == branch_id)
            .order_by(AccessZoneModel.name)
        )
        async with self.database.get_session() as session:
            models = (await session.execute(stmt)).scalars().all()
        return [
            AccessZone(
                id=model.id,
                name=model.name,
                branch_id=model.branch_id,
                description=model.description,
            )
            for model in models
        ]

    async def list_active_doors(
        self,
        branch_id: UUID,
        zone_id: UUID | None = None,
    ) -> list[AccessDoor]:
        stmt = select(AccessDoorModel).where(
            AccessDoorModel.branch_id == branch_id,
            AccessDoorModel.is_active.is_(True),
        )
        if zone_id is not None:
            stmt = stmt.where(AccessDoorModel.zone_id == zone_id)
        async with self.database.get_session() as session:
            models = (await session.execute(stmt)).scalars().all()
        return [_door_to_domain(model) for model in models]

    async def find_door_by_vendor_id(
        self,
        branch_id: UUID,
        vendor_door_id: str,
    ) -> AccessDoor | None:
        stmt = select(AccessDoorModel).where(
            AccessDoorModel.branch_id == branch_id,
            AccessDoorModel.vendor_door_id == vendor_door_id,
        )
        async with self.database.get_session() as session:
            model = (await session.execute(stmt)).scalars().first()
        return _door_to_domain(model) if model else None

    async def list_devices(self, branch_id: UUID) -> list[AccessDevice]:
        stmt = (
            select(AccessDeviceModel)
            .where(AccessDeviceModel.branch_id == branch_id)
            .order_by(AccessDeviceModel.name, AccessDeviceModel.device_id)
        )
        async with self.database.get_session() as session:
            models = (await session.execute(stmt)).scalars().all()
        return [_device_to_domain(model) for model in models]

    async def save_devices(self, devices: list[AccessDevice]) -> None:
        """Upsert by (branch_id, device_id) in one transaction."""
        if not devices:
            return
        async with self.database.get_session() as session:
            for device in devices:
                stmt = select(AccessDeviceModel).where(
                    AccessDeviceModel.branch_id == device.branch_id,
                    AccessDeviceModel.device_id == device.device_id,
                )
                model = (await session.execute(stmt)).scalar_one_or_none()
                if model is None:
                    session.add(
                        AccessDeviceModel(
                            id=device.id,
                            branch_id=device.branch_id,
                            device_id=device.device_id,
                            name=device.name,
                            model=device.model,
                            is_online=device.is_online,
                            last_synced_at=device.last_synced_at,
                        )
                    )
                else:
                    model.name = device.name
                    model.model = device.model
                    model.is_online = device.is_online
                    model.last_synced_at = device.last_synced_at

    async def find_active_override(
        self,
        member_id: UUID,
        zone_id: UUID,
        at: datetime,
    ) -> MemberAccessOverride | None:
        stmt = (
            select(MemberAccessOverrideModel)
            .where(
                MemberAccessOverrideModel.member_id == member_id,
                MemberAccessOverrideModel.zone_id == zone_id,
                MemberAccessOverrideModel.valid_from <= at,
                or_(
                    MemberAccessOverrideModel.valid_until.is_(None),
                    MemberAccessOverrideModel.valid_until >= at,
                ),
            )
            .order_by(MemberAccessOverrideModel.valid_from.desc())
            .limit(1)
        )
        async with self.database.get_session() as session:
            model = (await session.execute(stmt)).scalar_one_or_none()
        if model is None:
            return None
        return MemberAccessOverride(
            id=model.id,
            member_id=model.member_id,
            zone_id=model.zone_id,
            access_type=AccessType(model.access_type),
            valid_from=model.valid_from,
            valid_until=model.valid_until,
            schedule=AccessSchedule.from_raw(model.start_time, model.end_time, model.days),
            reason=model.reason,
        )

    async def find_active_membership(self, member_id: UUID) -> MemberMembership | None:
        stmt = (
            select(MemberMembershipModel)
            .where(
                MemberMembershipModel.member_id == member_id,
                MemberMembershipModel.status == ACTIVE_MEMBERSHIP_STATUS,
            )
            .order_by(MemberMembershipModel.start_date.desc().nulls_last())
            .limit(1)
        )
        async with self.database.get_session() as session:
            model = (await session.execute(stmt)).scalar_one_or_none()
        if model is None:
            return None
        return MemberMembership(
            member_id=model.member_id,
            membership_id=model.membership_id,
            status=model.status,
            start_date=model.start_date,
            end_date=model.end_date,
        )

    async def find_membership_permission(
        self,
        membership_id: UUID,
        zone_id: UUID,
    ) -> MembershipAccessPermission | None:
        stmt = select(MembershipAccessPermissionModel).where(
            MembershipAccessPermissionModel.membership_id == membership_id,
            MembershipAccessPermissionModel.zone_id == zone_id,
        )
        async with self.database.get_session() as session:
            model = (await session.execute(stmt)).scalars().first()
        if model is None:
            return None
        return MembershipAccessPermission(
            id=model.id,
            membership_id=model.membership_id,
            zone_id=model.zone_id,
            access_type=AccessType(model.access_type),
            schedule=AccessSchedule.from_raw(model.start_time, model.end_time, model.days),
        )

    # =========================================================================
    # Members, credentials and vendor person mappings
    # =========================================================================

    async def get_member(self, member_id: UUID) -> Member | None:
        async with self.database.get_session() as session:
            model = await session.get(MemberModel, member_id)
        if model is None:
            return None
        return Member(
            id=model.id,
            first_name=model.first_name,
            last_name=model.last_name,
            email=model.email,
            role=model.role,
        )

    async def list_active_credentials(
        self,
        member_id: UUID,
    ) -> list[MemberAccessCredential]:
        stmt = (
            select(MemberAccessCredentialModel)
            .where(
                MemberAccessCredentialModel.member_id == member_id,
                MemberAccessCredentialModel.is_active.is_(True),
            )
            .order_by(MemberAccessCredentialModel.issued_at)
        )
        async with self.database.get_session() as session:
            models = (await session.execute(stmt)).scalars().all()
        return [_credential_to_domain(model) for model in models]

    async def get_credential(self, credential_id: UUID) -> MemberAccessCredential | None:
        async with self.database.get_session() as session:
            model = await session.get(MemberAccessCredentialModel, credential_id)
        return _credential_to_domain(model) if model else None

    async def find_credential(
        self,
        member_id: UUID,
        credential_type: CredentialType,
        credential_value: str,
    ) -> MemberAccessCredential | None:
        stmt = (
            select(MemberAccessCredentialModel)
            .where(
                MemberAccessCredentialModel.member_id == member_id,
                MemberAccessCredentialModel.credential_type == credential_type.value,
                MemberAccessCredentialModel.credential_value == credential_value,
            )
            .order_by(
                MemberAccessCredentialModel.is_active.desc(),
                MemberAccessCredentialModel.issued_at.desc(),
            )
            .limit(1)
        )
        async with self.database.get_session() as session:
            model = (await session.execute(stmt)).scalar_one_or_none()
        return _credential_to_domain(model) if model else None

    async def save_credential(self, credential: MemberAccessCredential) -> None:
        async with self.database.get_session() as session:
            model = await session.get(MemberAccessCredentialModel, credential.id)
            if model is None:
                session.add(
                    MemberAccessCredentialModel(
                        id=credential.id,
                        member_id=credential.member_id,
                        credential_type=credential.credential_type.value,
                        credential_value=credential.credential_value,
                        is_active=credential.is_active,
                        issued_at=credential.issued_at,
                        expires_at=credential.expires_at,
                    )
                )
            else:
                model.credential_value = credential.credential_value
                model.is_active = credential.is_active
                model.expires_at = credential.expires_at

    async def find_member_by_credential(
        self,
        credential_type: CredentialType,
        credential_value: str,
    ) -> UUID | None:
        stmt = select(MemberAccessCredentialModel.member_id).where(
            MemberAccessCredentialModel.credential_type == credential_type.value,
            MemberAccessCredentialModel.credential_value == credential_value,
            MemberAccessCredentialModel.is_active.is_(True),
        )
        async with self.database.get_session() as session:
            return (await session.execute(stmt)).scalars().first()

    async def find_person_mapping(
        self,
        member_id: UUID,
        branch_id: UUID,
    ) -> VendorPersonMapping | None:
        stmt = select(VendorPersonMappingModel).where(
            VendorPersonMappingModel.member_id == member_id,
            VendorPersonMappingModel.branch_id == branch_id,
        )
        async with self.database.get_session() as session:
            model = (await session.execute(stmt)).scalar_one_or_none()
        if model is None:
            return None
        return VendorPersonMapping(
            member_id=model.member_id,
            person_id=model.person_id,
            branch_id=model.branch_id,
        )

    async def find_member_by_person(self, branch_id: UUID, person_id: str) -> UUID | None:
        stmt = select(VendorPersonMappingModel.member_id).where(
            VendorPersonMappingModel.branch_id == branch_id,
            VendorPersonMappingModel.person_id == person_id,
        )
        async with self.database.get_session() as session:
            return (await session.execute(stmt)).scalars().first()

    async def save_person_mapping(self, mapping: VendorPersonMapping) -> None:
        stmt = select(VendorPersonMappingModel).where(
            VendorPersonMappingModel.member_id == mapping.member_id,
            VendorPersonMappingModel.branch_id == mapping.branch_id,
        )
        async with self.database.get_session() as session:
            model = (await session.execute(stmt)).scalar_one_or_none()
            if model is None:
                session.add(
                    VendorPersonMappingModel(
                        member_id=mapping.member_id,
                        branch_id=mapping.branch_id,
                        person_id=mapping.person_id,
                    )
                )
            else:
                model.person_id = mapping.person_id

    # =========================================================================
    # Events and attendance
    # =========================================================================

    async def find_event_by_vendor_id(
        self,
        branch_id: UUID,
        vendor_event_id: str,
    ) -> AccessEvent | None:
        stmt = select(AccessEventModel).where(
            AccessEventModel.branch_id == branch_id,
            AccessEventModel.vendor_event_id == vendor_event_id,
        )
        async with self.database.get_session() as session:
            model = (await session.execute(stmt)).scalar_one_or_none()
        return _event_to_domain(model) if model else None

    async def save_event(self, event: AccessEvent) -> None:
        async with self.database.get_session() as session:
            session.add(
                AccessEventModel(
                    id=event.id,
                    vendor_event_id=event.vendor_event_id,
                    branch_id=event.branch_id,
                    member_id=event.member_id,
                    door_id=event.door_id,
                    door_name=event.door_name,
                    device_id=event.device_id,
                    event_time=event.event_time,
                    event_type=event.event_type.value,
                    processed=event.processed,
                    processed_at=event.processed_at,
                    processing_note=event.processing_note,
                )
            )

    async def list_unprocessed_events(self, branch_id: UUID, limit: int) -> list[AccessEvent]:
        stmt = (
            select(AccessEventModel)
            .where(
                AccessEventModel.branch_id == branch_id,
                AccessEventModel.processed.is_(False),
            )
            .order_by(AccessEventModel.event_time.asc(), AccessEventModel.id.asc())
            .limit(limit)
        )
        async with self.database.get_session() as session:
            models = (await session.execute(stmt)).scalars().all()
        return [_event_to_domain(model) for model in models]

    async def mark_events_processed(self, events: list[AccessEvent]) -> None:
        """Bulk UPDATE by primary key (one statement per batch)."""
        if not events:
            return
        rows = [
            {
                "id": event.id,
                "processed": event.processed,
                "processed_at": event.processed_at,
                "processing_note": event.processing_note,
            }
            for event in events
        ]
        async with self.database.get_session() as session:
            await session.execute(update(AccessEventModel), rows)

    async def find_open_session(
        self,
        member_id: UUID,
        branch_id: UUID,
    ) -> AttendanceSession | None:
        stmt = (
            select(AttendanceSessionModel)
            .where(
                AttendanceSessionModel.member_id == member_id,
                AttendanceSessionModel.branch_id == branch_id,
                AttendanceSessionModel.check_out.is_(None),
            )
            .order_by(AttendanceSessionModel.check_in.desc())
            .limit(1)
        )
        async with self.database.get_session() as session:
            model = (await session.execute(stmt)).scalar_one_or_none()
        return _session_to_domain(model) if model else None

    async def find_session_by_checkout_event(
        self,
        branch_id: UUID,
        vendor_event_id: str,
    ) -> AttendanceSession | None:
        stmt = select(AttendanceSessionModel).where(
            AttendanceSessionModel.branch_id == branch_id,
            AttendanceSessionModel.check_out_event_id == vendor_event_id,
        )
        async with self.database.get_session() as session:
            model = (await session.execute(stmt)).scalars().first()
        return _session_to_domain(model) if model else None

    async def save_session(self, attendance: AttendanceSession) -> None:
        async with self.database.get_session() as session:
            model = await session.get(AttendanceSessionModel, attendance.id)
            if model is None:
                session.add(
                    AttendanceSessionModel(
                        id=attendance.id,
                        member_id=attendance.member_id,
                        branch_id=attendance.branch_id,
                        check_in=attendance.check_in,
                        check_out=attendance.check_out,
                        duration_minutes=attendance.duration_minutes,
                        source=attendance.source,
                        device_id=attendance.device_id,
                        door_id=attendance.door_id,
                        member_role=attendance.member_role,
                        notes=attendance.notes,
                        check_in_event_id=attendance.check_in_event_id,
                        check_out_event_id=attendance.check_out_event_id,
                    )
                )
            else:
                model.check_out = attendance.check_out
                model.duration_minutes = attendance.duration_minutes
                model.notes = attendance.notes
                model.check_out_event_id = attendance.check_out_event_id

    # =========================================================================
    # Sync Log
    # =========================================================================

    async def append_sync_log(self, entry: SyncLogEntry) -> None:
        async with self.database.get_session() as session:
            session.add(
                SyncLogModel(
                    id=entry.id,
                    created_at=entry.created_at,
                    branch_id=entry.branch_id,
                    category=entry.category.value,
                    message=entry.message,
                    details=entry.details,
                    status=entry.status.value,
                    entity_type=entry.entity_type,
                    entity_id=entry.entity_id,
                    entity_name=entry.entity_name,
                )
            )

    async def update_sync_log(self, entry: SyncLogEntry) -> None:
        stmt = (
            update(SyncLogModel)
            .where(
                SyncLogModel.id == entry.id,
                SyncLogModel.status == SyncLogStatus.PENDING.value,
            )
            .values(status=entry.status.value, details=entry.details)
        )
        async with self.database.get_session() as session:
            await session.execute(stmt)


# =============================================================================
# Model -> domain mapping
# =============================================================================


def _settings_to_domain(model: BranchApiSettingsModel) -> BranchApiSettings:
    return BranchApiSettings(
        branch_id=model.branch_id,
        api_url=model.api_url,
        app_key=model.app_key,
        app_secret=model.app_secret,
        is_active=model.is_active,
        subscription_id=model.subscription_id,
        message_offset=model.message_offset,
        last_sync=model.last_sync,
        last_sync_status=(
            VendorSyncStatus(model.last_sync_status) if model.last_sync_status else None
        ),
        last_sync_error=model.last_sync_error,
    )


def _door_to_domain(model: AccessDoorModel) -> AccessDoor:
    return AccessDoor(
        id=model.id,
        vendor_door_id=model.vendor_door_id,
        zone_id=model.zone_id,
        branch_id=model.branch_id,
        device_id=model.device_id,
        is_active=model.is_active,
        name=model.name,
    )


def _device_to_domain(model: AccessDeviceModel) -> AccessDevice:
    return AccessDevice(
        id=model.id,
        branch_id=model.branch_id,
        device_id=model.device_id,
        name=model.name,
        model=model.model,
        is_online=model.is_online,
        last_synced_at=model.last_synced_at,
    )


def _credential_to_domain(model: MemberAccessCredentialModel) -> MemberAccessCredential:
    return MemberAccessCredential(
        id=model.id,
        member_id=model.member_id,
        credential_type=CredentialType(model.credential_type),
        credential_value=model.credential_value,
        is_active=model.is_active,
        issued_at=model.issued_at,
        expires_at=model.expires_at,
    )


def _event_to_domain(model: AccessEventModel) -> AccessEvent:
    return AccessEvent(
        id=model.id,
        vendor_event_id=model.vendor_event_id,
        branch_id=model.branch_id,
        member_id=model.member_id,
        door_id=model.door_id,
        door_name=model.door_name,
        device_id=model.device_id,
        event_time=model.event_time,
        event_type=AccessEventType(model.event_type),
        processed=model.processed,
        processed_at=model.processed_at,
        processing_note=model.processing_note,
    )


def _session_to_domain(model: AttendanceSessionModel) -> AttendanceSession:
    return AttendanceSession(
        id=model.id,
        member_id=model.member_id,
        branch_id=model.branch_id,
        check_in=model.check_in,
        check_out=model.check_out,
        duration_minutes=model.duration_minutes,
        source=model.source,
        device_id=model.device_id,
        door_id=model.door_id,
        member_role=model.member_role,
        notes=model.notes,
        check_in_event_id=model.check_in_event_id,
        check_out_event_id=model.check_out_event_id,
    )
