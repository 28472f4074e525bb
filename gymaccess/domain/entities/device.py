"""Vendor devices (door controllers, face terminals) registered to a branch."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from uuid_extensions import uuid7


@dataclass(slots=True, kw_only=True)
class AccessDevice:
    """Device reported by the vendor device list.

    Business Rules:
        - One row per (branch_id, device_id); a device sync updates in place
        - Devices missing from a later listing are kept, marked offline

    Attributes:
        branch_id: Owning branch.
        device_id: Vendor device serial / id (matches door and event device ids).
        name: Display name.
        model: Vendor model or device type.
        is_online: Online state at the last device sync.
        last_synced_at: When the vendor last reported the device.
    """

    branch_id: UUID
    device_id: str
    id: UUID = field(default_factory=uuid7)
    name: str | None = None
    model: str | None = None
    is_online: bool = False
    last_synced_at: datetime | None = None
