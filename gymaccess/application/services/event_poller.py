"""Event poller: periodic pull and reconciliation of every active branch.

Per branch and poll:
    1. Pull (when a gateway and ingestion service are configured):
       subscribe to door events once, pull the messages after the
       acknowledged offset, queue them, acknowledge the last offset
    2. Record the pull outcome in the branch sync status
    3. Reconcile the branch's unprocessed events

Webhook deliveries reconcile their own branch immediately; the poller
catches events left behind (reconciliation errors, deliveries stored while
the branch was busy, immediate processing disabled) and events the vendor
only queued. The offset is stored only after the vendor accepted the
acknowledge, so an interrupted pull is pulled again and dropped as a
duplicate by ingestion.
"""

import asyncio
from typing import Any
from uuid import UUID

from pydantic import ValidationError

from gymaccess.application.services.event_ingestion import EventIngestionService
from gymaccess.application.services.event_reconciliation import EventReconciler
from gymaccess.core.constants import (
    VENDOR_DOOR_EVENT_TOPIC,
    VENDOR_MQ_MESSAGES_PATH,
    VENDOR_MQ_OFFSET_PATH,
    VENDOR_MQ_SUBSCRIBE_PATH,
)
from gymaccess.core.enums import ErrorCode
from gymaccess.core.result import Failure, Result, Success
from gymaccess.domain.entities import BranchApiSettings
from gymaccess.domain.enums import VendorSyncStatus
from gymaccess.domain.errors import VendorError, VendorInvalidResponseError
from gymaccess.domain.protocols import (
    AccessStoreProtocol,
    LoggerProtocol,
    VendorGatewayProtocol,
)
from gymaccess.infrastructure.vendor.message_payload import (
    VendorMessageBatch,
    VendorQueueMessage,
    VendorSubscription,
)


class EventPoller:
    """Runs the vendor pull and EventReconciler.process_events across branches.

    Branches are polled concurrently; one branch failing never stops the
    others. A failed pull is recorded on the branch and does not skip its
    reconciliation.
    """

    def __init__(
        self,
        *,
        store: AccessStoreProtocol,
        reconciler: EventReconciler,
        logger: LoggerProtocol,
        gateway: VendorGatewayProtocol | None = None,
        ingestion: EventIngestionService | None = None,
        pull_batch_size: int = 10,
    ) -> None:
        self._store = store
        self._reconciler = reconciler
        self._logger = logger
        self._gateway = gateway
        self._ingestion = ingestion
        self._pull_batch_size = pull_batch_size

    @property
    def pulls_events(self) -> bool:
        return self._gateway is not None and self._ingestion is not None

    async def poll_once(self) -> dict[UUID, int | BaseException]:
        """Pull and reconcile every branch with the integration enabled.

        Returns:
            Per branch: number of events processed, or the exception the
            branch failed with.
        """
        active = await self._store.list_active_api_settings()
        if not active:
            return {}
        branches = [s.branch_id for s in active]

        outcomes = await asyncio.gather(
            *(self._poll_branch(api_settings) for api_settings in active),
            return_exceptions=True,
        )

        results: dict[UUID, int | BaseException] = {}
        for branch_id, outcome in zip(branches, outcomes, strict=True):
            results[branch_id] = outcome
            if isinstance(outcome, BaseException):
                self._logger.error(
                    "branch_reconciliation_failed",
                    error=outcome if isinstance(outcome, Exception) else None,
                    branch_id=str(branch_id),
                )

        self._logger.info(
            "event_poll_completed",
            branches=len(branches),
            failed=sum(1 for o in outcomes if isinstance(o, BaseException)),
            processed=sum(o for o in outcomes if isinstance(o, int)),
        )
        return results

    async def _poll_branch(self, api_settings: BranchApiSettings) -> int:
        if self.pulls_events:
            await self.pull_events(api_settings)
        return await self._reconciler.process_events(api_settings.branch_id)

    async def pull_events(self, api_settings: BranchApiSettings) -> Result[int, VendorError]:
        """Pull one batch of queued vendor events for a branch.

        Updates and persists the branch subscription, offset and sync
        status whatever the outcome.

        Returns:
            Success(int): Number of new events queued.
            Failure(VendorError): Subscribe, pull or acknowledge failed.
        """
        if self._gateway is None or self._ingestion is None:
            return Success(value=0)
        result = await self._pull(api_settings, self._gateway, self._ingestion)
        match result:
            case Success(value=queued):
                api_settings.record_sync(VendorSyncStatus.SUCCESS)
                self._logger.info(
                    "vendor_pull_completed",
                    branch_id=str(api_settings.branch_id),
                    queued=queued,
                )
            case Failure(error=error):
                api_settings.record_sync(VendorSyncStatus.FAILED, error.message)
                self._logger.warning(
                    "vendor_pull_failed",
                    branch_id=str(api_settings.branch_id),
                    error_code=error.code.value,
                    error_message=error.message,
                )
        await self._store.save_sync_state(api_settings)
        return result

    async def _pull(
        self,
        api_settings: BranchApiSettings,
        gateway: VendorGatewayProtocol,
        ingestion: EventIngestionService,
    ) -> Result[int, VendorError]:
        branch_id = api_settings.branch_id
        log = self._logger.bind(branch_id=str(branch_id))

        if api_settings.subscription_id is None:
            subscribed = await _subscribe(gateway, branch_id)
            if isinstance(subscribed, Failure):
                return subscribed
            api_settings.subscription_id = subscribed.value
            log.info("vendor_subscription_created", subscription_id=subscribed.value)

        request: dict[str, Any] = {
            "subscriptionId": api_settings.subscription_id,
            "maxReturnNum": self._pull_batch_size,
        }
        if api_settings.message_offset is not None:
            request["offset"] = api_settings.message_offset

        pulled = await gateway.call(branch_id, VENDOR_MQ_MESSAGES_PATH, "POST", request)
        if isinstance(pulled, Failure):
            return pulled
        try:
            batch = VendorMessageBatch.from_envelope(pulled.value)
        except ValidationError:
            return Failure(error=_invalid_response(branch_id, "message pull", pulled.value))

        queued = 0
        last_offset: str | None = None
        for raw in batch.messages:
            try:
                message = VendorQueueMessage.model_validate(raw)
            except ValidationError as e:
                log.warning("vendor_message_invalid", error_count=e.error_count())
                if raw.get("offset") is not None:
                    last_offset = str(raw["offset"])
                continue
            accepted = await ingestion.accept(branch_id, message.data, reconcile=False)
            if isinstance(accepted, Success) and accepted.value is not None:
                queued += 1
            last_offset = message.offset

        if last_offset is not None:
            acknowledged = await gateway.call(
                branch_id,
                VENDOR_MQ_OFFSET_PATH,
                "POST",
                {"subscriptionId": api_settings.subscription_id, "offset": last_offset},
            )
            if isinstance(acknowledged, Failure):
                return acknowledged
            api_settings.message_offset = last_offset

        log.debug("vendor_messages_pulled", pulled=len(batch.messages), queued=queued)
        return Success(value=queued)

    async def run(self, interval_seconds: float, stop: asyncio.Event) -> None:
        """Poll every `interval_seconds` until `stop` is set."""
        self._logger.info(
            "event_poller_started",
            interval_seconds=interval_seconds,
            pulls_events=self.pulls_events,
        )
        while not stop.is_set():
            try:
                await self.poll_once()
            except Exception as e:
                self._logger.error("event_poll_failed", error=e)
            try:
                await asyncio.wait_for(stop.wait(), timeout=interval_seconds)
            except TimeoutError:
                continue
        self._logger.info("event_poller_stopped")


async def _subscribe(gateway: VendorGatewayProtocol, branch_id: UUID) -> Result[str, VendorError]:
    """Subscribe the branch to door events; returns the subscription id."""
    response = await gateway.call(
        branch_id,
        VENDOR_MQ_SUBSCRIBE_PATH,
        "POST",
        {"eventTypes": [VENDOR_DOOR_EVENT_TOPIC]},
    )
    if isinstance(response, Failure):
        return response
    try:
        subscription = VendorSubscription.from_envelope(response.value)
    except ValidationError:
        return Failure(error=_invalid_response(branch_id, "subscribe", response.value))
    return Success(value=subscription.subscription_id)


def _invalid_response(branch_id: UUID, operation: str, body: object) -> VendorInvalidResponseError:
    return VendorInvalidResponseError(
        code=ErrorCode.VENDOR_INVALID_RESPONSE,
        message=f"Vendor {operation} response could not be parsed",
        branch_id=branch_id,
        response_body=str(body)[:500],
    )
