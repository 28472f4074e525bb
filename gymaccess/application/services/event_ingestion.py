"""Event ingestion: accept a vendor webhook delivery into the event queue.

Flow:
    1. Load branch vendor settings (missing or inactive: rejected)
    2. Verify the HMAC signature when the signature headers are present
    3. Parse the payload
    4. Skip deliveries whose vendor event id is already stored
    5. Normalize the event type, resolve member and door
    6. Store the event unprocessed; optionally reconcile the branch at once

Steps 4 to 6 are `accept`, which the event poller also uses for messages
pulled from the vendor queue (already authenticated, so no signature).

The vendor retries deliveries it considers failed, so a duplicate is a
successful no-op (Success(None)), not an error.
"""

from collections.abc import Mapping
from datetime import UTC, datetime
from uuid import UUID

from pydantic import ValidationError

from gymaccess.application.services.event_reconciliation import EventReconciler
from gymaccess.core.constants import (
    WEBHOOK_NONCE_HEADER,
    WEBHOOK_SIGNATURE_HEADER,
    WEBHOOK_TIMESTAMP_HEADER,
)
from gymaccess.core.enums import ErrorCode
from gymaccess.core.result import Failure, Result, Success
from gymaccess.domain.entities import AccessDoor, AccessEvent, BranchApiSettings
from gymaccess.domain.enums import AccessEventType, CredentialType
from gymaccess.domain.errors import IngestionError
from gymaccess.domain.protocols import AccessStoreProtocol, LoggerProtocol
from gymaccess.infrastructure.vendor.signing import verify_webhook_signature
from gymaccess.infrastructure.vendor.webhook_payload import (
    VendorEventData,
    VendorWebhookPayload,
)

VENDOR_EVENT_TYPES: dict[str, AccessEventType] = {
    "door.open": AccessEventType.ENTRY,
    "card.swiped": AccessEventType.ENTRY,
    "face.recognized": AccessEventType.ENTRY,
    "fingerprint.matched": AccessEventType.ENTRY,
    "door.exit": AccessEventType.EXIT,
    "access.denied": AccessEventType.DENIED,
}


def map_event_type(vendor_type: str) -> AccessEventType:
    """Normalize a vendor event type name.

    Known names map directly; otherwise names containing "entry" or
    "access_granted" are entries and names containing "exit" are exits.
    Anything else is treated as denied.
    """
    name = vendor_type.strip().lower()
    if name in VENDOR_EVENT_TYPES:
        return VENDOR_EVENT_TYPES[name]
    if "entry" in name or "access_granted" in name:
        return AccessEventType.ENTRY
    if "exit" in name:
        return AccessEventType.EXIT
    return AccessEventType.DENIED


class EventIngestionService:
    """Turns webhook deliveries into queued AccessEvents.

    Dependencies (injected via constructor):
        - AccessStoreProtocol: settings, member/door lookups, event queue
        - LoggerProtocol: structured logs
        - EventReconciler: optional immediate reconciliation
    """

    def __init__(
        self,
        *,
        store: AccessStoreProtocol,
        logger: LoggerProtocol,
        reconciler: EventReconciler | None = None,
        process_immediately: bool = True,
    ) -> None:
        self._store = store
        self._logger = logger
        self._reconciler = reconciler
        self._process_immediately = process_immediately

    async def ingest(
        self,
        branch_id: UUID,
        body: bytes,
        headers: Mapping[str, str],
    ) -> Result[AccessEvent | None, IngestionError]:
        """Accept one webhook delivery.

        Args:
            branch_id: Branch the webhook URL belongs to.
            body: Raw request body (signed bytes).
            headers: Request headers (any casing).

        Returns:
            Success(AccessEvent): Event stored.
            Success(None): Duplicate delivery, nothing stored.
            Failure(IngestionError): Unknown branch, bad signature or
                malformed payload.
        """
        log = self._logger.bind(branch_id=str(branch_id))

        api_settings = await self._store.get_api_settings(branch_id)
        if api_settings is None or not api_settings.is_active:
            log.warning("webhook_branch_not_configured")
            return Failure(
                error=IngestionError(
                    code=ErrorCode.VENDOR_SETTINGS_NOT_FOUND,
                    message="Vendor API settings not found or inactive for branch",
                    branch_id=branch_id,
                )
            )

        signature_check = self._check_signature(api_settings, body, headers)
        if isinstance(signature_check, Failure):
            log.warning("webhook_signature_invalid")
            return signature_check

        try:
            payload = VendorWebhookPayload.model_validate_json(body)
        except ValidationError as e:
            log.warning("webhook_payload_invalid", error_count=e.error_count())
            return Failure(
                error=IngestionError(
                    code=ErrorCode.WEBHOOK_PAYLOAD_INVALID,
                    message="Webhook payload is not a valid vendor event",
                    branch_id=branch_id,
                    details={"error_count": e.error_count()},
                )
            )
        return await self.accept(branch_id, payload.data)

    async def accept(
        self,
        branch_id: UUID,
        data: VendorEventData,
        *,
        reconcile: bool = True,
    ) -> Result[AccessEvent | None, IngestionError]:
        """Queue one vendor event for a branch.

        Args:
            branch_id: Branch the event belongs to.
            data: Parsed event body.
            reconcile: Run immediate reconciliation (when enabled) after
                storing. Batch callers pass False and reconcile once.

        Returns:
            Success(AccessEvent): Event stored.
            Success(None): Vendor event id already stored.
        """
        log = self._logger.bind(branch_id=str(branch_id))

        if await self._store.find_event_by_vendor_id(branch_id, data.event_id) is not None:
            log.info("webhook_duplicate_ignored", vendor_event_id=data.event_id)
            return Success(value=None)

        door = await self._resolve_door(branch_id, data)
        event = AccessEvent(
            vendor_event_id=data.event_id,
            branch_id=branch_id,
            event_time=data.event_time or datetime.now(UTC),
            event_type=map_event_type(data.event_type),
            member_id=await self._resolve_member(branch_id, data),
            door_id=door.id if door else None,
            door_name=data.door_name or (door.name if door else None),
            device_id=data.device_id or (door.device_id if door else None),
        )
        await self._store.save_event(event)
        log.info(
            "webhook_event_stored",
            vendor_event_id=event.vendor_event_id,
            event_type=event.event_type.value,
            vendor_event_type=data.event_type,
            member_resolved=event.member_id is not None,
            door_resolved=event.door_id is not None,
        )

        if reconcile and self._process_immediately and self._reconciler is not None:
            try:
                await self._reconciler.process_events(branch_id)
            except Exception as e:
                # Event stays queued for the next poll
                log.error("webhook_reconciliation_failed", error=e)

        return Success(value=event)

    def _check_signature(
        self,
        api_settings: BranchApiSettings,
        body: bytes,
        headers: Mapping[str, str],
    ) -> Result[None, IngestionError]:
        lowered = {key.lower(): value for key, value in headers.items()}
        signature = lowered.get(WEBHOOK_SIGNATURE_HEADER)
        timestamp = lowered.get(WEBHOOK_TIMESTAMP_HEADER)
        nonce = lowered.get(WEBHOOK_NONCE_HEADER)

        if not (api_settings.app_secret and signature and timestamp and nonce):
            self._logger.warning(
                "webhook_signature_not_verified",
                branch_id=str(api_settings.branch_id),
                has_signature=bool(signature),
            )
            return Success(value=None)

        if verify_webhook_signature(
            api_settings.app_secret,
            signature=signature,
            timestamp=timestamp,
            nonce=nonce,
            body=body,
        ):
            return Success(value=None)

        return Failure(
            error=IngestionError(
                code=ErrorCode.WEBHOOK_SIGNATURE_INVALID,
                message="Webhook signature does not match",
                branch_id=api_settings.branch_id,
            )
        )

    async def _resolve_member(self, branch_id: UUID, data: VendorEventData) -> UUID | None:
        """Person mapping first, then card number, then face id."""
        if data.person_id:
            member_id = await self._store.find_member_by_person(branch_id, data.person_id)
            if member_id is not None:
                return member_id
        if data.card_no:
            member_id = await self._store.find_member_by_credential(
                CredentialType.CARD, data.card_no
            )
            if member_id is not None:
                return member_id
        if data.face_id:
            return await self._store.find_member_by_credential(CredentialType.FACE, data.face_id)
        return None

    async def _resolve_door(self, branch_id: UUID, data: VendorEventData) -> AccessDoor | None:
        if data.door_id:
            door = await self._store.find_door_by_vendor_id(branch_id, data.door_id)
            if door is not None:
                return door
        if data.door_name:
            wanted = data.door_name.strip().lower()
            for door in await self._store.list_active_doors(branch_id):
                if door.name and door.name.strip().lower() == wanted:
                    return door
        return None
