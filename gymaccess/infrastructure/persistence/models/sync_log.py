"""Sync Log table: operator-facing audit trail.

Append-only. The single permitted UPDATE is the pending -> final status
transition of an entry.
"""

from uuid import UUID

from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from gymaccess.infrastructure.persistence.base import BaseModel


class SyncLogModel(BaseModel):
    """Sync Log entry.

    Fields:
        branch_id: Branch (NULL for global entries)
        category: sync, error, info, warning
        message: Operator-readable summary
        details: Longer free text
        status: success, error, pending, warning
        entity_type / entity_id / entity_name: Optional subject reference
    """

    __tablename__ = "sync_logs"

    branch_id: Mapped[UUID | None] = mapped_column(nullable=True)

    category: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    message: Mapped[str] = mapped_column(Text, nullable=False)

    details: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(String(20), nullable=False)

    entity_type: Mapped[str | None] = mapped_column(String(50), nullable=True)

    entity_id: Mapped[UUID | None] = mapped_column(nullable=True)

    entity_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    __table_args__ = (
        Index("idx_sync_logs_branch_created", "branch_id", "created_at"),
    )
