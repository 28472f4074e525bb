"""Vendor devices registered to a branch."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from gymaccess.infrastructure.persistence.base import BaseMutableModel


class AccessDeviceModel(BaseMutableModel):
    """Device from the vendor device list.

    Indexes:
        - idx_access_devices_vendor: unique (branch_id, device_id), device sync upsert
    """

    __tablename__ = "access_devices"

    branch_id: Mapped[UUID] = mapped_column(nullable=False)

    device_id: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Vendor device serial / id",
    )

    name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    model: Mapped[str | None] = mapped_column(String(100), nullable=True)

    is_online: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    last_synced_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    __table_args__ = (
        Index("idx_access_devices_vendor", "branch_id", "device_id", unique=True),
    )
