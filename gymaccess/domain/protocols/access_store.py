"""AccessStoreProtocol: persistence port for the access-control core.

Port (interface) for hexagonal architecture. The SQLAlchemy implementation
lives in the infrastructure layer; tests use an in-memory fake.

The core never reaches the database directly: every read/write of branch
settings, tokens, zones, permissions, credentials, events, attendance and
Sync Log rows goes through this protocol.

Reference:
    - gymaccess/infrastructure/persistence/access_store.py
"""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from gymaccess.domain.entities import (
    AccessDevice,
    AccessDoor,
    AccessEvent,
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
from gymaccess.domain.enums import CredentialType


class AccessStoreProtocol(Protocol):
    """Access-control store protocol (port).

    This is a Protocol (not ABC) for structural typing.
    Implementations don't need to inherit from this.

    Implementations may raise on infrastructure failure; services catch at
    their boundary and record the failure in the Sync Log.
    """

    # ------------------------------------------------------------------
    # Branch settings and tokens
    # ------------------------------------------------------------------

    async def get_api_settings(self, branch_id: UUID) -> BranchApiSettings | None:
        """Vendor API settings for a branch (active or not)."""
        ...

    async def list_active_api_settings(self) -> list[BranchApiSettings]:
        """Settings of every branch with the integration enabled."""
        ...

    async def save_sync_state(self, api_settings: BranchApiSettings) -> None:
        """Persist subscription_id, message_offset and the last_sync fields.

        Credentials and is_active belong to the configuration UI and are
        never written.
        """
        ...

    async def load_token(self, branch_id: UUID) -> AccessToken | None:
        """Persisted token for a branch, if any (may be expired)."""
        ...

    async def save_token(self, token: AccessToken) -> None:
        """Upsert the branch token."""
        ...

    async def delete_token(self, branch_id: UUID) -> None: ...

    async def delete_expired_tokens(self, now: datetime) -> int:
        """Delete tokens with expires_at <= now.

        Returns:
            Number of rows deleted.
        """
        ...

    # ------------------------------------------------------------------
    # Zones, doors, devices and permissions
    # ------------------------------------------------------------------

    async def list_zones(self, branch_id: UUID) -> list[AccessZone]: ...

    async def list_active_doors(
        self,
        branch_id: UUID,
        zone_id: UUID | None = None,
    ) -> list[AccessDoor]:
        """Active doors of a branch, optionally restricted to one zone."""
        ...

    async def find_door_by_vendor_id(
        self,
        branch_id: UUID,
        vendor_door_id: str,
    ) -> AccessDoor | None: ...

    async def list_devices(self, branch_id: UUID) -> list[AccessDevice]:
        """Devices of a branch ordered by name."""
        ...

    async def save_devices(self, devices: list[AccessDevice]) -> None:
        """Upsert devices by (branch_id, device_id)."""
        ...

    async def find_active_override(
        self,
        member_id: UUID,
        zone_id: UUID,
        at: datetime,
    ) -> MemberAccessOverride | None:
        """Most recent override active at `at` for member + zone."""
        ...

    async def find_active_membership(self, member_id: UUID) -> MemberMembership | None:
        """The member's membership with status "active", if any."""
        ...

    async def find_membership_permission(
        self,
        membership_id: UUID,
        zone_id: UUID,
    ) -> MembershipAccessPermission | None: ...

    # ------------------------------------------------------------------
    # Members, credentials and vendor person mappings
    # ------------------------------------------------------------------

    async def get_member(self, member_id: UUID) -> Member | None: ...

    async def list_active_credentials(
        self,
        member_id: UUID,
    ) -> list[MemberAccessCredential]: ...

    async def get_credential(self, credential_id: UUID) -> MemberAccessCredential | None: ...

    async def find_credential(
        self,
        member_id: UUID,
        credential_type: CredentialType,
        credential_value: str,
    ) -> MemberAccessCredential | None:
        """The member's credential with this type and value, active or not."""
        ...

    async def save_credential(self, credential: MemberAccessCredential) -> None:
        """Create or update a credential (never deletes)."""
        ...

    async def find_member_by_credential(
        self,
        credential_type: CredentialType,
        credential_value: str,
    ) -> UUID | None:
        """Member holding an active credential with this value."""
        ...

    async def find_person_mapping(
        self,
        member_id: UUID,
        branch_id: UUID,
    ) -> VendorPersonMapping | None: ...

    async def find_member_by_person(self, branch_id: UUID, person_id: str) -> UUID | None: ...

    async def save_person_mapping(self, mapping: VendorPersonMapping) -> None: ...

    # ------------------------------------------------------------------
    # Events and attendance
    # ------------------------------------------------------------------

    async def find_event_by_vendor_id(
        self,
        branch_id: UUID,
        vendor_event_id: str,
    ) -> AccessEvent | None: ...

    async def save_event(self, event: AccessEvent) -> None: ...

    async def list_unprocessed_events(self, branch_id: UUID, limit: int) -> list[AccessEvent]:
        """Unprocessed events of a branch, ordered by event_time ascending."""
        ...

    async def mark_events_processed(self, events: list[AccessEvent]) -> None:
        """Persist processed / processed_at / processing_note in one batch."""
        ...

    async def find_open_session(
        self,
        member_id: UUID,
        branch_id: UUID,
    ) -> AttendanceSession | None:
        """Most recent session without a check-out."""
        ...

    async def find_session_by_checkout_event(
        self,
        branch_id: UUID,
        vendor_event_id: str,
    ) -> AttendanceSession | None: ...

    async def save_session(self, session: AttendanceSession) -> None:
        """Create or update an attendance session."""
        ...

    # ------------------------------------------------------------------
    # Sync Log
    # ------------------------------------------------------------------

    async def append_sync_log(self, entry: SyncLogEntry) -> None: ...

    async def update_sync_log(self, entry: SyncLogEntry) -> None:
        """Persist the pending -> final status transition of an entry."""
        ...
