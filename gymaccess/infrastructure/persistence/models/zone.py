"""Access zones and the vendor doors that belong to them."""

from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from gymaccess.infrastructure.persistence.base import BaseMutableModel


class AccessZoneModel(BaseMutableModel):
    """Named area of a branch (gym floor, pool, studio)."""

    __tablename__ = "access_zones"

    branch_id: Mapped[UUID] = mapped_column(nullable=False, index=True)

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    description: Mapped[str | None] = mapped_column(Text, nullable=True)


class AccessDoorModel(BaseMutableModel):
    """Vendor-controlled door mapped to a zone.

    Indexes:
        - idx_access_doors_vendor: (branch_id, vendor_door_id) for event lookups
    """

    __tablename__ = "access_doors"

    branch_id: Mapped[UUID] = mapped_column(nullable=False, index=True)

    zone_id: Mapped[UUID] = mapped_column(
        ForeignKey("access_zones.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    vendor_door_id: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Door index code on the vendor side",
    )

    device_id: Mapped[str | None] = mapped_column(String(100), nullable=True)

    name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        Index("idx_access_doors_vendor", "branch_id", "vendor_door_id"),
    )
