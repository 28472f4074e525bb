"""Device sync: mirror the vendor device list of a branch.

Flow:
    1. Open a pending Sync Log entry, mark the branch sync in progress
    2. Page through the vendor device list until a short page
    3. Upsert listed devices; devices no longer listed are kept offline
    4. Record the outcome on the branch and resolve the Sync Log entry
"""

from datetime import UTC, datetime
from uuid import UUID

from pydantic import ValidationError

from gymaccess.core.constants import VENDOR_DEVICE_LIST_PATH
from gymaccess.core.enums import ErrorCode
from gymaccess.core.result import Failure, Result, Success
from gymaccess.domain.entities import AccessDevice, BranchApiSettings, SyncLogEntry
from gymaccess.domain.enums import SyncLogCategory, SyncLogStatus, VendorSyncStatus
from gymaccess.domain.errors import (
    VendorConfigurationError,
    VendorError,
    VendorInvalidResponseError,
)
from gymaccess.domain.protocols import (
    AccessStoreProtocol,
    LoggerProtocol,
    SyncLogProtocol,
    VendorGatewayProtocol,
)
from gymaccess.infrastructure.vendor.device_payload import VendorDevicePage, VendorDeviceRecord

MAX_DEVICE_PAGES = 100


class DeviceSyncService:
    """Keeps the branch device table in line with the vendor account.

    Dependencies (injected via constructor):
        - AccessStoreProtocol: branch settings and devices
        - VendorGatewayProtocol: device list calls
        - SyncLogProtocol: operator audit trail
        - LoggerProtocol: structured logs
    """

    def __init__(
        self,
        *,
        store: AccessStoreProtocol,
        gateway: VendorGatewayProtocol,
        sync_log: SyncLogProtocol,
        logger: LoggerProtocol,
        page_size: int = 50,
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._sync_log = sync_log
        self._logger = logger
        self._page_size = page_size

    async def sync_devices(self, branch_id: UUID) -> Result[list[AccessDevice], VendorError]:
        """Fetch the vendor device list and store it for a branch.

        Returns:
            Success(list[AccessDevice]): Every stored device of the branch,
                listed or not.
            Failure(VendorError): Branch not configured, or the vendor
                listing failed. Stored devices are left untouched.
        """
        log = self._logger.bind(branch_id=str(branch_id))

        api_settings = await self._store.get_api_settings(branch_id)
        if api_settings is None or not api_settings.is_active:
            log.warning("device_sync_not_configured")
            return Failure(
                error=VendorConfigurationError(
                    code=ErrorCode.VENDOR_SETTINGS_NOT_FOUND,
                    message="Vendor integration is not configured for this branch",
                    branch_id=branch_id,
                )
            )

        pending = await self._open(branch_id)
        api_settings.record_sync(VendorSyncStatus.IN_PROGRESS)
        await self._store.save_sync_state(api_settings)

        listed = await self._fetch_all(branch_id)
        if isinstance(listed, Failure):
            await self._finish(api_settings, pending, listed.error.message)
            log.warning(
                "device_sync_failed",
                error_code=listed.error.code.value,
                error_message=listed.error.message,
            )
            return listed

        now = datetime.now(UTC)
        stored = {d.device_id: d for d in await self._store.list_devices(branch_id)}
        for record in listed.value:
            device = stored.get(record.device_id) or AccessDevice(
                branch_id=branch_id,
                device_id=record.device_id,
            )
            device.name = record.name or device.name
            device.model = record.device_model or device.model
            device.is_online = record.is_online
            device.last_synced_at = now
            stored[record.device_id] = device

        listed_ids = {record.device_id for record in listed.value}
        for device_id, device in stored.items():
            if device_id not in listed_ids:
                device.is_online = False

        await self._store.save_devices(list(stored.values()))
        await self._finish(api_settings, pending, None, count=len(listed_ids))
        log.info("device_sync_completed", listed=len(listed_ids), stored=len(stored))
        return Success(value=await self._store.list_devices(branch_id))

    async def _fetch_all(self, branch_id: UUID) -> Result[list[VendorDeviceRecord], VendorError]:
        records: dict[str, VendorDeviceRecord] = {}
        for page_no in range(1, MAX_DEVICE_PAGES + 1):
            response = await self._gateway.call(
                branch_id,
                VENDOR_DEVICE_LIST_PATH,
                "POST",
                {"pageNo": page_no, "pageSize": self._page_size},
            )
            if isinstance(response, Failure):
                return response
            try:
                page = VendorDevicePage.from_envelope(response.value)
                page_records = [VendorDeviceRecord.model_validate(d) for d in page.devices]
            except ValidationError:
                return Failure(
                    error=VendorInvalidResponseError(
                        code=ErrorCode.VENDOR_INVALID_RESPONSE,
                        message="Vendor device list could not be parsed",
                        branch_id=branch_id,
                        response_body=str(response.value)[:500],
                    )
                )
            for record in page_records:
                records[record.device_id] = record
            if len(page_records) < self._page_size:
                break
            if page.total is not None and len(records) >= page.total:
                break
        else:
            self._logger.warning(
                "device_sync_page_limit_reached",
                branch_id=str(branch_id),
                pages=MAX_DEVICE_PAGES,
            )
        return Success(value=list(records.values()))

    async def _open(self, branch_id: UUID) -> SyncLogEntry | None:
        result = await self._sync_log.record(
            branch_id=branch_id,
            category=SyncLogCategory.SYNC,
            message="Syncing devices",
            status=SyncLogStatus.PENDING,
            entity_type="branch",
            entity_id=branch_id,
        )
        return result.value if isinstance(result, Success) else None

    async def _finish(
        self,
        api_settings: BranchApiSettings,
        pending: SyncLogEntry | None,
        error: str | None,
        *,
        count: int = 0,
    ) -> None:
        if error is None:
            api_settings.record_sync(VendorSyncStatus.SUCCESS)
        else:
            api_settings.record_sync(VendorSyncStatus.FAILED, error)
        await self._store.save_sync_state(api_settings)
        if pending is not None:
            if error is None:
                await self._sync_log.resolve(
                    pending, SyncLogStatus.SUCCESS, f"{count} device(s) listed by the vendor"
                )
            else:
                await self._sync_log.resolve(pending, SyncLogStatus.ERROR, error)
