"""Vendor webhook endpoint.

Handlers:
    receive_vendor_event - Accept one door event delivery for a branch

The raw body is passed through untouched: the vendor signs the exact bytes.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Request, status
from fastapi.responses import JSONResponse

from gymaccess.application.services.event_ingestion import EventIngestionService
from gymaccess.core.container import get_event_ingestion_service
from gymaccess.core.result import Failure
from gymaccess.presentation.routers.api.v1.errors import ErrorResponseBuilder
from gymaccess.schemas import WebhookAcceptedResponse

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


@router.post(
    "/vendor/{branch_id}",
    response_model=WebhookAcceptedResponse,
    status_code=status.HTTP_200_OK,
)
async def receive_vendor_event(
    request: Request,
    branch_id: Annotated[UUID, Path(description="Branch the webhook is registered for")],
    ingestion: Annotated[EventIngestionService, Depends(get_event_ingestion_service)],
) -> WebhookAcceptedResponse | JSONResponse:
    """Accept a vendor event delivery.

    POST /api/v1/webhooks/vendor/{branch_id} → 200 OK

    Returns:
        WebhookAcceptedResponse (duplicate deliveries included).
        JSONResponse with RFC 7807 error for unknown branches (404),
        bad signatures (401) and malformed payloads (400).
    """
    body = await request.body()
    result = await ingestion.ingest(branch_id, body, dict(request.headers))
    if isinstance(result, Failure):
        return ErrorResponseBuilder.from_domain_error(result.error, request)
    return WebhookAcceptedResponse.from_event(result.value)
