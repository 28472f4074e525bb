"""Access-control request and response schemas.

Pydantic schemas for the integration's HTTP endpoints. Includes:
- Request schemas (client → API)
- Response schemas (API → client)
- Conversion from service results

Vendor webhook payloads are not defined here: they are the vendor's wire
format and live with the vendor adapter.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from gymaccess.application.services.access_resolution import AccessRuleMatch
from gymaccess.domain.entities import AccessDevice, AccessEvent, BranchApiSettings
from gymaccess.infrastructure.vendor import TokenStatus


# =============================================================================
# Request Schemas
# =============================================================================


class RegisterCardRequest(BaseModel):
    """Request to enroll a card for a member.

    Attributes:
        card_number: Card number printed on / encoded in the card.
    """

    card_number: str = Field(
        ...,
        min_length=1,
        max_length=64,
        description="Card number",
        examples=["0012345678"],
    )


# =============================================================================
# Response Schemas
# =============================================================================


class OperationResponse(BaseModel):
    """Outcome of a vendor-facing operation.

    The detailed reason of a failed operation is in the branch Sync Log.
    """

    success: bool = Field(..., description="Whether the operation completed")
    message: str = Field(..., description="Human-readable summary")


class ReconcileResponse(BaseModel):
    """Result of a reconciliation pass for one branch."""

    branch_id: UUID = Field(..., description="Reconciled branch")
    processed: int = Field(..., description="Events marked processed")


class WebhookAcceptedResponse(BaseModel):
    """Acknowledgement returned to the vendor for a delivery."""

    received: bool = Field(True, description="Delivery accepted")
    duplicate: bool = Field(False, description="Event id was already stored")
    event_id: UUID | None = Field(None, description="Stored event id")
    event_type: str | None = Field(None, description="Normalized event type")

    @classmethod
    def from_event(cls, event: AccessEvent | None) -> "WebhookAcceptedResponse":
        if event is None:
            return cls(duplicate=True)
        return cls(event_id=event.id, event_type=event.event_type.value)


class TokenStatusResponse(BaseModel):
    """Vendor token state of a branch. Never includes the token itself."""

    branch_id: UUID = Field(..., description="Branch")
    has_token: bool = Field(..., description="A token is cached or stored")
    is_valid: bool = Field(..., description="Token has not expired")
    expires_at: datetime | None = Field(None, description="Token expiry (UTC)")
    expires_in: int | None = Field(None, description="Seconds until expiry")
    refresh_in_flight: bool = Field(
        False, description="A background refresh is running"
    )

    @classmethod
    def from_status(cls, status: TokenStatus) -> "TokenStatusResponse":
        """Convert TokenStatus to response schema.

        Args:
            status: Token status from the token manager.

        Returns:
            TokenStatusResponse.
        """
        return cls(
            branch_id=status.branch_id,
            has_token=status.has_token,
            is_valid=status.is_valid,
            expires_at=status.expires_at,
            expires_in=status.expires_in,
            refresh_in_flight=status.refresh_in_flight,
        )


class ZoneAccessResponse(BaseModel):
    """Access decision for a member and a zone at a moment."""

    member_id: UUID = Field(..., description="Member")
    zone_id: UUID = Field(..., description="Zone")
    at: datetime = Field(..., description="Moment evaluated (branch-local)")
    allowed: bool = Field(..., description="Whether the member may enter")
    decision: str = Field(
        ..., description="Matched rule decision", examples=["allowed", "scheduled"]
    )
    source: str | None = Field(
        None, description="Rule layer that matched", examples=["override"]
    )

    @classmethod
    def from_match(
        cls,
        member_id: UUID,
        zone_id: UUID,
        at: datetime,
        match: AccessRuleMatch,
        allowed: bool,
    ) -> "ZoneAccessResponse":
        return cls(
            member_id=member_id,
            zone_id=zone_id,
            at=at,
            allowed=allowed,
            decision=match.decision.value,
            source=match.source,
        )


class PollResponse(BaseModel):
    """Result of one poll over all active branches."""

    processed: dict[str, int] = Field(
        default_factory=dict, description="Events processed per branch id"
    )
    failed: dict[str, str] = Field(
        default_factory=dict, description="Error per failed branch id"
    )


class DeviceResponse(BaseModel):
    """Vendor device registered to a branch."""

    id: UUID = Field(..., description="Device record id")
    device_id: str = Field(..., description="Vendor device serial", examples=["Q12345678"])
    name: str | None = Field(None, description="Display name")
    model: str | None = Field(None, description="Vendor model or device type")
    is_online: bool = Field(..., description="Online at the last device sync")
    last_synced_at: datetime | None = Field(
        None, description="When the vendor last listed the device"
    )

    @classmethod
    def from_entity(cls, device: AccessDevice) -> "DeviceResponse":
        return cls(
            id=device.id,
            device_id=device.device_id,
            name=device.name,
            model=device.model,
            is_online=device.is_online,
            last_synced_at=device.last_synced_at,
        )


class DeviceListResponse(BaseModel):
    """Devices of a branch."""

    branch_id: UUID = Field(..., description="Branch")
    devices: list[DeviceResponse] = Field(default_factory=list)
    online: int = Field(0, description="Devices online at the last sync")

    @classmethod
    def from_entities(cls, branch_id: UUID, devices: list[AccessDevice]) -> "DeviceListResponse":
        return cls(
            branch_id=branch_id,
            devices=[DeviceResponse.from_entity(d) for d in devices],
            online=sum(1 for d in devices if d.is_online),
        )


class VendorSyncStatusResponse(BaseModel):
    """Outcome of the last vendor synchronization of a branch.

    Never includes the branch credentials.
    """

    branch_id: UUID = Field(..., description="Branch")
    is_active: bool = Field(..., description="Integration enabled")
    last_sync: datetime | None = Field(None, description="Last pull or device sync (UTC)")
    last_sync_status: str | None = Field(
        None, description="Outcome", examples=["success", "failed", "in_progress"]
    )
    last_sync_error: str | None = Field(None, description="Error of a failed sync")
    subscription_id: str | None = Field(None, description="Vendor event subscription")
    message_offset: str | None = Field(None, description="Last acknowledged queue offset")

    @classmethod
    def from_settings(cls, api_settings: BranchApiSettings) -> "VendorSyncStatusResponse":
        status = api_settings.last_sync_status
        return cls(
            branch_id=api_settings.branch_id,
            is_active=api_settings.is_active,
            last_sync=api_settings.last_sync,
            last_sync_status=status.value if status else None,
            last_sync_error=api_settings.last_sync_error,
            subscription_id=api_settings.subscription_id,
            message_offset=api_settings.message_offset,
        )
