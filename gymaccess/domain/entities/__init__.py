"""Domain entities.

Pure data and business rules, no framework dependencies.
"""

from gymaccess.domain.entities.access_event import AccessEvent
from gymaccess.domain.entities.attendance import AttendanceSession, AttendanceSessionError
from gymaccess.domain.entities.branch import AccessToken, BranchApiSettings
from gymaccess.domain.entities.credential import MemberAccessCredential
from gymaccess.domain.entities.device import AccessDevice
from gymaccess.domain.entities.member import (
    Member,
    MemberMembership,
    VendorPersonMapping,
)
from gymaccess.domain.entities.permission import (
    AccessSchedule,
    MemberAccessOverride,
    MembershipAccessPermission,
)
from gymaccess.domain.entities.sync_log_entry import SyncLogEntry
from gymaccess.domain.entities.zone import AccessDoor, AccessZone

__all__ = [
    "AccessDevice",
    "AccessDoor",
    "AccessEvent",
    "AccessSchedule",
    "AccessToken",
    "AccessZone",
    "AttendanceSession",
    "AttendanceSessionError",
    "BranchApiSettings",
    "Member",
    "MemberAccessCredential",
    "MemberAccessOverride",
    "MemberMembership",
    "MembershipAccessPermission",
    "SyncLogEntry",
    "VendorPersonMapping",
]
