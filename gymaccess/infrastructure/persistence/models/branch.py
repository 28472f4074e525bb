"""Branch vendor settings and persisted vendor tokens.

The settings table is owned by the configuration UI; this package only
writes its synchronization columns. vendor_tokens mirrors the in-memory token cache so a restarted
process can reuse a still-valid token.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from gymaccess.infrastructure.persistence.base import BaseMutableModel


class BranchApiSettingsModel(BaseMutableModel):
    """Per-branch vendor API settings.

    Fields:
        branch_id: Owning branch (one row per branch)
        api_url: Vendor base URL
        app_key: Vendor application key
        app_secret: Vendor application secret
        is_active: Integration enabled for the branch
        subscription_id: Vendor message-queue subscription
        message_offset: Last acknowledged message-queue offset
        last_sync / last_sync_status / last_sync_error: Last synchronization outcome
    """

    __tablename__ = "branch_api_settings"

    branch_id: Mapped[UUID] = mapped_column(nullable=False, unique=True, index=True)

    api_url: Mapped[str] = mapped_column(String(255), nullable=False)

    app_key: Mapped[str] = mapped_column(String(255), nullable=False)

    app_secret: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Never logged",
    )

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    subscription_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    message_offset: Mapped[str | None] = mapped_column(String(255), nullable=True)

    last_sync: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    last_sync_status: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
        comment="success, failed or in_progress",
    )

    last_sync_error: Mapped[str | None] = mapped_column(Text, nullable=True)


class VendorTokenModel(BaseMutableModel):
    """Last token obtained from the vendor for a branch."""

    __tablename__ = "vendor_tokens"

    branch_id: Mapped[UUID] = mapped_column(nullable=False, unique=True, index=True)

    token: Mapped[str] = mapped_column(Text, nullable=False)

    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
        comment="Expired rows are removed by cleanup_expired_tokens",
    )
