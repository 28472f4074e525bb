"""Door events reported by the vendor, queued for reconciliation."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID

from uuid_extensions import uuid7

from gymaccess.domain.enums import AccessEventType


@dataclass(slots=True, kw_only=True)
class AccessEvent:
    """Raw door event awaiting conversion into attendance.

    Lifecycle: inserted by ingestion, consumed once by reconciliation,
    then marked processed with a timestamp (and a note for anomalies).

    Attributes:
        vendor_event_id: Vendor's event id (idempotency key for ingestion).
        branch_id: Branch the door belongs to.
        event_time: When the door reported the event.
        event_type: entry / exit / denied.
        member_id: Resolved member (None when unmapped).
        door_id: Local door id when resolvable.
        door_name: Vendor door name (for log messages).
        device_id: Vendor device id.
        processed: Consumed by reconciliation.
        processed_at: When it was consumed.
        processing_note: Why an event was consumed without attendance effect.
    """

    vendor_event_id: str
    branch_id: UUID
    event_time: datetime
    event_type: AccessEventType
    id: UUID = field(default_factory=uuid7)
    member_id: UUID | None = None
    door_id: UUID | None = None
    door_name: str | None = None
    device_id: str | None = None
    processed: bool = False
    processed_at: datetime | None = None
    processing_note: str | None = None

    @property
    def door_label(self) -> str:
        """Door description for human-readable log lines."""
        if self.door_name:
            return self.door_name
        if self.door_id:
            return str(self.door_id)
        return "unknown door"

    def mark_processed(self, at: datetime | None = None, note: str | None = None) -> None:
        self.processed = True
        self.processed_at = at or datetime.now(UTC)
        if note is not None:
            self.processing_note = note
