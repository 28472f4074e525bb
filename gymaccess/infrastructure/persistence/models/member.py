"""Members, memberships, credentials and vendor person mappings.

members and member_memberships belong to the wider gym application and
are read-only here.
"""

from datetime import date, datetime
from uuid import UUID

from sqlalchemy import Boolean, Date, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from gymaccess.core.constants import DEFAULT_MEMBER_ROLE
from gymaccess.infrastructure.persistence.base import BaseMutableModel


class MemberModel(BaseMutableModel):
    __tablename__ = "members"

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)

    last_name: Mapped[str] = mapped_column(String(100), nullable=False)

    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    role: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=DEFAULT_MEMBER_ROLE,
    )


class MemberMembershipModel(BaseMutableModel):
    __tablename__ = "member_memberships"

    member_id: Mapped[UUID] = mapped_column(nullable=False, index=True)

    membership_id: Mapped[UUID] = mapped_column(nullable=False)

    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)


class MemberAccessCredentialModel(BaseMutableModel):
    """Card, face, fingerprint or PIN enrolled for a member.

    Rows are deactivated (is_active = false), never deleted.
    """

    __tablename__ = "member_access_credentials"

    member_id: Mapped[UUID] = mapped_column(nullable=False, index=True)

    credential_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="card, face, fingerprint, pin",
    )

    credential_value: Mapped[str] = mapped_column(String(255), nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    issued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("idx_member_credentials_value", "credential_type", "credential_value"),
    )


class VendorPersonMappingModel(BaseMutableModel):
    """Link between a member and the vendor's person record in one branch."""

    __tablename__ = "vendor_person_mappings"

    member_id: Mapped[UUID] = mapped_column(nullable=False, index=True)

    branch_id: Mapped[UUID] = mapped_column(nullable=False)

    person_id: Mapped[str] = mapped_column(String(100), nullable=False)

    __table_args__ = (
        Index("idx_vendor_person_member", "member_id", "branch_id", unique=True),
        Index("idx_vendor_person_lookup", "branch_id", "person_id"),
    )
