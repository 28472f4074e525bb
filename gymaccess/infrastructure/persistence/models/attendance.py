"""Attendance sessions produced by event reconciliation."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from gymaccess.core.constants import ATTENDANCE_SOURCE_ACCESS_CONTROL, DEFAULT_MEMBER_ROLE
from gymaccess.infrastructure.persistence.base import BaseMutableModel


class AttendanceSessionModel(BaseMutableModel):
    """One visit of a member to a branch.

    Indexes:
        - idx_attendance_open: (member_id, branch_id, check_out) for open-session lookups
        - idx_attendance_checkout_event: (branch_id, check_out_event_id) for exit replays
    """

    __tablename__ = "attendance_sessions"

    member_id: Mapped[UUID] = mapped_column(nullable=False)

    branch_id: Mapped[UUID] = mapped_column(nullable=False)

    check_in: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    check_out: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)

    source: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        default=ATTENDANCE_SOURCE_ACCESS_CONTROL,
    )

    device_id: Mapped[str | None] = mapped_column(String(100), nullable=True)

    door_id: Mapped[UUID | None] = mapped_column(nullable=True)

    member_role: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=DEFAULT_MEMBER_ROLE,
    )

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    check_in_event_id: Mapped[str | None] = mapped_column(String(100), nullable=True)

    check_out_event_id: Mapped[str | None] = mapped_column(String(100), nullable=True)

    __table_args__ = (
        Index("idx_attendance_open", "member_id", "branch_id", "check_out"),
        Index("idx_attendance_checkout_event", "branch_id", "check_out_event_id"),
    )
