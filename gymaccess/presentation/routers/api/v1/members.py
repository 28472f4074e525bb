"""Member access endpoints: vendor sync, card enrollment, access checks.

Handlers:
    sync_member        - Push member credentials and doors to the vendor
    register_card      - Enroll a card and push it to the devices
    revoke_credential  - Deactivate a credential
    check_zone_access  - Evaluate the access rules for a zone

Sync failures carry no error object: the reason is in the branch Sync Log.
"""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Request, status
from fastapi.responses import JSONResponse

from gymaccess.application.services.access_resolution import (
    AccessResolver,
    evaluate,
)
from gymaccess.application.services.credential_sync import CredentialSyncService
from gymaccess.core.container import get_access_resolver, get_credential_sync_service
from gymaccess.presentation.routers.api.v1.errors import ErrorResponseBuilder
from gymaccess.schemas import (
    OperationResponse,
    RegisterCardRequest,
    ZoneAccessResponse,
)

router = APIRouter(tags=["Members"])

SYNC_FAILED_CODE = "credential_sync_failed"

BranchId = Annotated[UUID, Path(description="Branch identifier")]
MemberId = Annotated[UUID, Path(description="Member identifier")]
SyncService = Annotated[CredentialSyncService, Depends(get_credential_sync_service)]


def _sync_failed(request: Request, detail: str) -> JSONResponse:
    return ErrorResponseBuilder.problem(
        status_code=422,
        title="Sync Failed",
        detail=detail,
        request=request,
        code=SYNC_FAILED_CODE,
    )


@router.post(
    "/branches/{branch_id}/members/{member_id}/sync",
    response_model=OperationResponse,
)
async def sync_member(
    request: Request,
    branch_id: BranchId,
    member_id: MemberId,
    service: SyncService,
) -> OperationResponse | JSONResponse:
    """Push a member to the branch devices.

    POST /api/v1/branches/{branch_id}/members/{member_id}/sync → 200 OK
    """
    if not await service.sync_member(member_id, branch_id):
        return _sync_failed(request, "Member sync failed, see the branch sync log")
    return OperationResponse(success=True, message="Member synced")


@router.post(
    "/branches/{branch_id}/members/{member_id}/cards",
    response_model=OperationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_card(
    request: Request,
    branch_id: BranchId,
    member_id: MemberId,
    data: RegisterCardRequest,
    service: SyncService,
) -> OperationResponse | JSONResponse:
    """Enroll a card for a member.

    POST /api/v1/branches/{branch_id}/members/{member_id}/cards → 201 Created
    """
    if not await service.register_card(member_id, branch_id, data.card_number):
        return _sync_failed(request, "Card registration failed, see the branch sync log")
    return OperationResponse(success=True, message="Card registered")


@router.delete(
    "/credentials/{credential_id}",
    response_model=OperationResponse,
)
async def revoke_credential(
    request: Request,
    credential_id: Annotated[UUID, Path(description="Credential identifier")],
    service: SyncService,
    branch_id: Annotated[UUID | None, Query(description="Branch for the sync log")] = None,
) -> OperationResponse | JSONResponse:
    """Deactivate a credential (credentials are never deleted).

    DELETE /api/v1/credentials/{credential_id} → 200 OK
    """
    if not await service.revoke_credential(credential_id, branch_id):
        return ErrorResponseBuilder.not_found(f"Credential {credential_id} not found", request)
    return OperationResponse(success=True, message="Credential revoked")


@router.get(
    "/members/{member_id}/zones/{zone_id}/access",
    response_model=ZoneAccessResponse,
)
async def check_zone_access(
    member_id: MemberId,
    zone_id: Annotated[UUID, Path(description="Zone identifier")],
    resolver: Annotated[AccessResolver, Depends(get_access_resolver)],
    at: Annotated[
        datetime | None,
        Query(description="Branch-local moment to evaluate (default: now)"),
    ] = None,
) -> ZoneAccessResponse:
    """Evaluate the layered access rules for a member and zone.

    GET /api/v1/members/{member_id}/zones/{zone_id}/access → 200 OK
    """
    moment = at or datetime.now().astimezone()
    if moment.tzinfo is None:
        moment = moment.astimezone()
    match = await resolver.resolve(member_id, zone_id, at=moment)
    return ZoneAccessResponse.from_match(
        member_id, zone_id, moment, match, evaluate(match, moment)
    )
