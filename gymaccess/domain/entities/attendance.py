"""Attendance sessions built from entry/exit events."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from uuid_extensions import uuid7

from gymaccess.core.constants import (
    ATTENDANCE_SOURCE_ACCESS_CONTROL,
    DEFAULT_MEMBER_ROLE,
)


class AttendanceSessionError:
    """AttendanceSession-specific errors."""

    CHECK_OUT_BEFORE_CHECK_IN = "check_out cannot be earlier than check_in"


@dataclass(slots=True, kw_only=True)
class AttendanceSession:
    """One visit: a check-in and (eventually) a check-out.

    Business Rules:
        - Open while check_out is None
        - Closing computes duration in whole minutes (rounded)
        - check_out is never earlier than check_in
        - check_out_event_id makes exit replays detectable

    Attributes:
        member_id: Visiting member.
        branch_id: Visited branch.
        check_in: Entry time.
        check_out: Exit time (None while open).
        duration_minutes: Computed on close.
        source: Origin tag ("access_control").
        device_id: Device that reported the entry.
        door_id: Door used for entry.
        member_role: Member role at the time of entry.
        notes: Free text (auto-close explanation).
        check_in_event_id: Vendor event id that opened the session.
        check_out_event_id: Vendor event id that closed the session.
    """

    member_id: UUID
    branch_id: UUID
    check_in: datetime
    id: UUID = field(default_factory=uuid7)
    check_out: datetime | None = None
    duration_minutes: int | None = None
    source: str = ATTENDANCE_SOURCE_ACCESS_CONTROL
    device_id: str | None = None
    door_id: UUID | None = None
    member_role: str = DEFAULT_MEMBER_ROLE
    notes: str | None = None
    check_in_event_id: str | None = None
    check_out_event_id: str | None = None

    @property
    def is_open(self) -> bool:
        return self.check_out is None

    def close(
        self,
        check_out: datetime,
        *,
        event_id: str | None = None,
        note: str | None = None,
    ) -> int:
        """Close the session and return its duration in minutes.

        Raises:
            ValueError: If check_out is earlier than check_in.
        """
        if check_out < self.check_in:
            raise ValueError(AttendanceSessionError.CHECK_OUT_BEFORE_CHECK_IN)
        self.check_out = check_out
        self.duration_minutes = round((check_out - self.check_in).total_seconds() / 60)
        self.check_out_event_id = event_id
        if note is not None:
            self.notes = note
        return self.duration_minutes
