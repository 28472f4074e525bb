"""Access zones and the physical doors grouped under them."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(slots=True, kw_only=True)
class AccessZone:
    """Named group of doors sharing one access policy."""

    id: UUID
    name: str
    branch_id: UUID
    description: str | None = None


@dataclass(slots=True, kw_only=True)
class AccessDoor:
    """Physical door known to the vendor.

    Attributes:
        id: Local door identifier.
        vendor_door_id: Door index code on the vendor side.
        zone_id: Zone the door belongs to.
        branch_id: Owning branch.
        device_id: Vendor device controlling the door.
        is_active: Inactive doors are never pushed to devices.
        name: Display name used in Sync Log messages.
    """

    id: UUID
    vendor_door_id: str
    zone_id: UUID
    branch_id: UUID
    device_id: str | None = None
    is_active: bool = True
    name: str | None = None
