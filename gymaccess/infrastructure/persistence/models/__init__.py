"""Database models.

Importing this package registers every table on BaseModel.metadata.
"""

from gymaccess.infrastructure.persistence.models.attendance import AttendanceSessionModel
from gymaccess.infrastructure.persistence.models.branch import (
    BranchApiSettingsModel,
    VendorTokenModel,
)
from gymaccess.infrastructure.persistence.models.device import AccessDeviceModel
from gymaccess.infrastructure.persistence.models.event import AccessEventModel
from gymaccess.infrastructure.persistence.models.member import (
    MemberAccessCredentialModel,
    MemberMembershipModel,
    MemberModel,
    VendorPersonMappingModel,
)
from gymaccess.infrastructure.persistence.models.permission import (
    MemberAccessOverrideModel,
    MembershipAccessPermissionModel,
)
from gymaccess.infrastructure.persistence.models.sync_log import SyncLogModel
from gymaccess.infrastructure.persistence.models.zone import AccessDoorModel, AccessZoneModel

__all__ = [
    "AccessDeviceModel",
    "AccessDoorModel",
    "AccessEventModel",
    "AccessZoneModel",
    "AttendanceSessionModel",
    "BranchApiSettingsModel",
    "MemberAccessCredentialModel",
    "MemberAccessOverrideModel",
    "MemberMembershipModel",
    "MemberModel",
    "MembershipAccessPermissionModel",
    "SyncLogModel",
    "VendorPersonMappingModel",
    "VendorTokenModel",
]
