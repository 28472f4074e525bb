"""Errors raised while accepting vendor webhook events."""

from dataclasses import dataclass
from uuid import UUID

from gymaccess.core.errors import DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class IngestionError(DomainError):
    """Webhook event rejected before it reached the event queue.

    Attributes:
        branch_id: Branch the webhook was addressed to.
    """

    branch_id: UUID | None = None
