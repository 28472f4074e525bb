"""API request/response schemas.

Usage:
    from gymaccess.schemas import RegisterCardRequest, OperationResponse
"""

from gymaccess.schemas.access_schemas import (
    DeviceListResponse,
    DeviceResponse,
    OperationResponse,
    PollResponse,
    ReconcileResponse,
    RegisterCardRequest,
    TokenStatusResponse,
    VendorSyncStatusResponse,
    WebhookAcceptedResponse,
    ZoneAccessResponse,
)

__all__ = [
    "DeviceListResponse",
    "DeviceResponse",
    "OperationResponse",
    "PollResponse",
    "ReconcileResponse",
    "RegisterCardRequest",
    "TokenStatusResponse",
    "VendorSyncStatusResponse",
    "WebhookAcceptedResponse",
    "ZoneAccessResponse",
]
