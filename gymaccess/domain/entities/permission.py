"""Layered access rules: membership permissions and member overrides.

Reference:
    - gymaccess/application/services/access_resolution.py
"""

from dataclasses import dataclass, field
from datetime import datetime, time
from uuid import UUID

from gymaccess.domain.enums import AccessType

WEEKDAYS: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


def parse_time_of_day(value: str | time | None) -> time | None:
    """Parse "HH:MM" or "HH:MM:SS" into a time (minute precision is what matters)."""
    if value is None or isinstance(value, time):
        return value
    parts = value.strip().split(":")
    if len(parts) < 2:
        raise ValueError(f"invalid time of day: {value!r}")
    return time(hour=int(parts[0]), minute=int(parts[1]))


@dataclass(frozen=True, slots=True, kw_only=True)
class AccessSchedule:
    """Weekday set plus an inclusive time-of-day window.

    Evaluated on the branch's local wall clock with no timezone conversion.
    A schedule missing its start, end or days never grants access.

    Attributes:
        start_time: Window start (inclusive).
        end_time: Window end (inclusive).
        days: Lowercase weekday names ("monday" ... "sunday").
    """

    start_time: time | None = None
    end_time: time | None = None
    days: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_raw(
        cls,
        start_time: str | time | None,
        end_time: str | time | None,
        days: list[str] | tuple[str, ...] | frozenset[str] | None,
    ) -> "AccessSchedule":
        """Build a schedule from stored column values."""
        return cls(
            start_time=parse_time_of_day(start_time),
            end_time=parse_time_of_day(end_time),
            days=frozenset(d.strip().lower() for d in (days or ())),
        )

    def includes(self, moment: datetime) -> bool:
        """Whether `moment` (wall clock) falls inside the schedule."""
        start_time, end_time = self.start_time, self.end_time
        if start_time is None or end_time is None or not self.days:
            return False

        if WEEKDAYS[moment.weekday()] not in self.days:
            return False

        current = moment.hour * 60 + moment.minute
        start = start_time.hour * 60 + start_time.minute
        end = end_time.hour * 60 + end_time.minute
        return start <= current <= end


@dataclass(slots=True, kw_only=True)
class MembershipAccessPermission:
    """Default zone rule attached to a membership plan."""

    membership_id: UUID
    zone_id: UUID
    access_type: AccessType
    schedule: AccessSchedule | None = None
    id: UUID | None = None


@dataclass(slots=True, kw_only=True)
class MemberAccessOverride:
    """Member-specific zone rule that beats the membership default.

    Business Rules:
        - Active when valid_from <= now and (valid_until is None or valid_until >= now)
        - Expires naturally; never deleted by this package

    Attributes:
        member_id: Member the override applies to.
        zone_id: Zone the override applies to.
        access_type: allowed / denied / scheduled.
        valid_from: Start of validity.
        valid_until: End of validity (None = open-ended).
        schedule: Required for scheduled overrides.
        reason: Staff note.
    """

    member_id: UUID
    zone_id: UUID
    access_type: AccessType
    valid_from: datetime
    valid_until: datetime | None = None
    schedule: AccessSchedule | None = None
    reason: str | None = None
    id: UUID | None = None

    def is_active_at(self, moment: datetime) -> bool:
        if moment < self.valid_from:
            return False
        return self.valid_until is None or self.valid_until >= moment
