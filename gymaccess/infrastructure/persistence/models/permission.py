"""Membership zone permissions and per-member overrides.

Schedules are stored inline as start_time / end_time / days columns. A
row with access_type "scheduled" and any of them missing never grants
access.
"""

from datetime import datetime, time
from uuid import UUID

from sqlalchemy import JSON, DateTime, Index, String, Text, Time
from sqlalchemy.orm import Mapped, mapped_column

from gymaccess.infrastructure.persistence.base import BaseMutableModel


class MembershipAccessPermissionModel(BaseMutableModel):
    """Default zone rule of a membership plan."""

    __tablename__ = "membership_access_permissions"

    membership_id: Mapped[UUID] = mapped_column(nullable=False, index=True)

    zone_id: Mapped[UUID] = mapped_column(nullable=False, index=True)

    access_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="allowed, denied, scheduled",
    )

    start_time: Mapped[time | None] = mapped_column(Time, nullable=True)

    end_time: Mapped[time | None] = mapped_column(Time, nullable=True)

    days: Mapped[list[str] | None] = mapped_column(
        JSON,
        nullable=True,
        comment="Lowercase weekday names",
    )

    __table_args__ = (
        Index("idx_membership_permissions_lookup", "membership_id", "zone_id"),
    )


class MemberAccessOverrideModel(BaseMutableModel):
    """Member-specific rule that beats the membership default."""

    __tablename__ = "member_access_overrides"

    member_id: Mapped[UUID] = mapped_column(nullable=False, index=True)

    zone_id: Mapped[UUID] = mapped_column(nullable=False, index=True)

    access_type: Mapped[str] = mapped_column(String(20), nullable=False)

    valid_from: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    valid_until: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="NULL = open-ended",
    )

    start_time: Mapped[time | None] = mapped_column(Time, nullable=True)

    end_time: Mapped[time | None] = mapped_column(Time, nullable=True)

    days: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)

    reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("idx_member_overrides_lookup", "member_id", "zone_id", "valid_from"),
    )
