"""Member-side records owned by the wider gym application.

These are read-only here except VendorPersonMapping, which records the
vendor's person id for a member once one has been created.
"""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from gymaccess.core.constants import DEFAULT_MEMBER_ROLE


@dataclass(slots=True, kw_only=True)
class Member:
    """Member profile fields needed for vendor enrollment and logging."""

    id: UUID
    first_name: str
    last_name: str
    email: str | None = None
    role: str = DEFAULT_MEMBER_ROLE

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(slots=True, kw_only=True)
class MemberMembership:
    """A member's subscription to a membership plan.

    Attributes:
        member_id: Subscribed member.
        membership_id: Membership plan (permissions hang off this id).
        status: "active" for the membership that governs access.
        start_date: Start of validity pushed to the vendor.
        end_date: End of validity pushed to the vendor.
    """

    member_id: UUID
    membership_id: UUID
    status: str
    start_date: date | None = None
    end_date: date | None = None

    @property
    def is_active(self) -> bool:
        return self.status == "active"


@dataclass(slots=True, kw_only=True)
class VendorPersonMapping:
    """Link between a member and the vendor's person record."""

    member_id: UUID
    person_id: str
    branch_id: UUID
