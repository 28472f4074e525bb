"""Vendor door events queued for reconciliation."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from gymaccess.infrastructure.persistence.base import BaseModel


class AccessEventModel(BaseModel):
    """Raw door event.

    Only processed / processed_at / processing_note change after insert.

    Indexes:
        - idx_access_events_vendor: unique (branch_id, vendor_event_id), ingestion idempotency
        - idx_access_events_pending: (branch_id, processed, event_time), reconciliation fetch
    """

    __tablename__ = "access_events"

    vendor_event_id: Mapped[str] = mapped_column(String(100), nullable=False)

    branch_id: Mapped[UUID] = mapped_column(nullable=False)

    member_id: Mapped[UUID | None] = mapped_column(nullable=True, index=True)

    door_id: Mapped[UUID | None] = mapped_column(nullable=True)

    door_name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    device_id: Mapped[str | None] = mapped_column(String(100), nullable=True)

    event_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    event_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="entry, exit, denied",
    )

    processed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    processed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    processing_note: Mapped[str | None] = mapped_column(String(100), nullable=True)

    __table_args__ = (
        Index("idx_access_events_vendor", "branch_id", "vendor_event_id", unique=True),
        Index("idx_access_events_pending", "branch_id", "processed", "event_time"),
    )
