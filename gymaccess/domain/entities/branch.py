"""Branch vendor configuration and vendor access tokens.

Reference:
    - gymaccess/infrastructure/vendor/token_manager.py
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from uuid import UUID

from gymaccess.domain.enums import VendorSyncStatus


@dataclass(slots=True, kw_only=True)
class BranchApiSettings:
    """Per-branch vendor API settings.

    Created and edited by the configuration UI. This package only writes
    the synchronization state (subscription, message offset, last sync).

    Attributes:
        branch_id: Owning branch.
        api_url: Vendor base URL (no trailing slash).
        app_key: Vendor application key.
        app_secret: Vendor application secret (never logged).
        is_active: Whether the integration is enabled for the branch.
        subscription_id: Vendor message-queue subscription for door events.
        message_offset: Last acknowledged message-queue offset.
        last_sync: When the last event pull or device sync finished.
        last_sync_status: Outcome of that synchronization.
        last_sync_error: Failure reason (None after a success).
    """

    branch_id: UUID
    api_url: str
    app_key: str
    app_secret: str
    is_active: bool = True
    subscription_id: str | None = None
    message_offset: str | None = None
    last_sync: datetime | None = None
    last_sync_status: VendorSyncStatus | None = None
    last_sync_error: str | None = None

    def __post_init__(self) -> None:
        self.api_url = self.api_url.rstrip("/")

    def record_sync(
        self,
        status: VendorSyncStatus,
        error: str | None = None,
        at: datetime | None = None,
    ) -> None:
        """Record the outcome of a synchronization."""
        self.last_sync = at or datetime.now(UTC)
        self.last_sync_status = status
        self.last_sync_error = error if status is VendorSyncStatus.FAILED else None

    def __repr__(self) -> str:
        return (
            f"BranchApiSettings(branch_id={self.branch_id!r}, "
            f"api_url={self.api_url!r}, is_active={self.is_active!r})"
        )


@dataclass(slots=True, kw_only=True)
class AccessToken:
    """Vendor bearer token for one branch.

    Derived data: the vendor is the source of truth. The store copy only
    lets a restarted process reuse a token until it truly expires.

    Attributes:
        branch_id: Owning branch.
        token: Bearer token string (never logged).
        expires_at: Absolute expiry (UTC).
    """

    branch_id: UUID
    token: str
    expires_at: datetime

    def remaining(self, now: datetime | None = None) -> timedelta:
        """Remaining lifetime (negative once expired)."""
        return self.expires_at - (now or datetime.now(UTC))

    def is_valid(self, now: datetime | None = None) -> bool:
        """Token has not expired yet."""
        return self.remaining(now) > timedelta(0)

    def needs_refresh(self, threshold: timedelta, now: datetime | None = None) -> bool:
        """Token is inside the trailing refresh window of its lifetime."""
        return self.remaining(now) <= threshold

    def __repr__(self) -> str:
        return (
            f"AccessToken(branch_id={self.branch_id!r}, token='***', "
            f"expires_at={self.expires_at!r})"
        )
