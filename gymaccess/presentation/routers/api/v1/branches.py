"""Branch-level operations: reconciliation, devices and vendor state.

Handlers:
    reconcile_all_branches - Pull and reconcile every active branch once
    reconcile_branch       - Reconcile queued events of one branch
    list_devices           - Devices stored by the last device sync
    sync_devices           - Refresh the device list from the vendor
    get_vendor_status      - Last vendor sync outcome and queue position
    get_vendor_token       - Token status (never the token itself)
    clear_vendor_token     - Forget the token; next call re-authenticates
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Request, status
from fastapi.responses import JSONResponse, Response

from gymaccess.application.services.device_sync import DeviceSyncService
from gymaccess.application.services.event_poller import EventPoller
from gymaccess.application.services.event_reconciliation import EventReconciler
from gymaccess.core.container import (
    get_access_store,
    get_device_sync_service,
    get_event_poller,
    get_event_reconciler,
    get_token_manager,
)
from gymaccess.core.result import Failure
from gymaccess.domain.protocols import AccessStoreProtocol
from gymaccess.infrastructure.vendor import TokenManager
from gymaccess.presentation.routers.api.v1.errors import ErrorResponseBuilder
from gymaccess.schemas import (
    DeviceListResponse,
    PollResponse,
    ReconcileResponse,
    TokenStatusResponse,
    VendorSyncStatusResponse,
)

router = APIRouter(prefix="/branches", tags=["Branches"])

BranchId = Annotated[UUID, Path(description="Branch identifier")]


@router.post("/reconcile", response_model=PollResponse)
async def reconcile_all_branches(
    poller: Annotated[EventPoller, Depends(get_event_poller)],
) -> PollResponse:
    """Run one poll (vendor pull, then reconciliation) over all active branches.

    POST /api/v1/branches/reconcile → 200 OK
    """
    outcomes = await poller.poll_once()
    return PollResponse(
        processed={str(b): o for b, o in outcomes.items() if isinstance(o, int)},
        failed={str(b): str(o) for b, o in outcomes.items() if isinstance(o, BaseException)},
    )


@router.post("/{branch_id}/reconcile", response_model=ReconcileResponse)
async def reconcile_branch(
    branch_id: BranchId,
    reconciler: Annotated[EventReconciler, Depends(get_event_reconciler)],
) -> ReconcileResponse:
    """Reconcile queued door events of one branch.

    POST /api/v1/branches/{branch_id}/reconcile → 200 OK
    """
    processed = await reconciler.process_events(branch_id)
    return ReconcileResponse(branch_id=branch_id, processed=processed)


@router.get("/{branch_id}/devices", response_model=DeviceListResponse)
async def list_devices(
    branch_id: BranchId,
    store: Annotated[AccessStoreProtocol, Depends(get_access_store)],
) -> DeviceListResponse:
    """Devices of a branch as of the last device sync.

    GET /api/v1/branches/{branch_id}/devices → 200 OK
    """
    return DeviceListResponse.from_entities(branch_id, await store.list_devices(branch_id))


@router.post("/{branch_id}/devices/sync", response_model=DeviceListResponse)
async def sync_devices(
    request: Request,
    branch_id: BranchId,
    devices: Annotated[DeviceSyncService, Depends(get_device_sync_service)],
) -> DeviceListResponse | JSONResponse:
    """Refresh the branch device list from the vendor.

    POST /api/v1/branches/{branch_id}/devices/sync → 200 OK

    Returns:
        DeviceListResponse with every stored device of the branch.
        JSONResponse with RFC 7807 error for unconfigured branches (404)
        and vendor failures (502/503).
    """
    result = await devices.sync_devices(branch_id)
    if isinstance(result, Failure):
        return ErrorResponseBuilder.from_domain_error(result.error, request)
    return DeviceListResponse.from_entities(branch_id, result.value)


@router.get("/{branch_id}/vendor-status", response_model=VendorSyncStatusResponse)
async def get_vendor_status(
    request: Request,
    branch_id: BranchId,
    store: Annotated[AccessStoreProtocol, Depends(get_access_store)],
) -> VendorSyncStatusResponse | JSONResponse:
    """Last vendor synchronization outcome of a branch.

    GET /api/v1/branches/{branch_id}/vendor-status → 200 OK
    """
    api_settings = await store.get_api_settings(branch_id)
    if api_settings is None:
        return ErrorResponseBuilder.not_found(
            "Vendor integration is not configured for this branch", request
        )
    return VendorSyncStatusResponse.from_settings(api_settings)


@router.get("/{branch_id}/vendor-token", response_model=TokenStatusResponse)
async def get_vendor_token(
    branch_id: BranchId,
    tokens: Annotated[TokenManager, Depends(get_token_manager)],
) -> TokenStatusResponse:
    """Vendor token state of a branch.

    GET /api/v1/branches/{branch_id}/vendor-token → 200 OK
    """
    return TokenStatusResponse.from_status(await tokens.token_status(branch_id))


@router.delete("/{branch_id}/vendor-token", status_code=status.HTTP_204_NO_CONTENT)
async def clear_vendor_token(
    branch_id: BranchId,
    tokens: Annotated[TokenManager, Depends(get_token_manager)],
) -> Response:
    """Drop the branch token from memory and the store.

    DELETE /api/v1/branches/{branch_id}/vendor-token → 204 No Content
    """
    await tokens.clear_token(branch_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
