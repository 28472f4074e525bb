"""Member access credentials (cards, faces, fingerprints, PINs)."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID

from uuid_extensions import uuid7

from gymaccess.domain.enums import CredentialType


@dataclass(slots=True, kw_only=True)
class MemberAccessCredential:
    """Credential enrolled for a member.

    Business Rules:
        - Revocation deactivates; credentials are never hard-deleted
        - Only active credentials are pushed to the vendor

    Attributes:
        member_id: Credential holder.
        credential_type: card / face / fingerprint / pin.
        credential_value: Card number, face template reference, etc.
        is_active: False once revoked.
        issued_at: Enrollment time.
        expires_at: Optional natural expiry.
    """

    member_id: UUID
    credential_type: CredentialType
    credential_value: str
    id: UUID = field(default_factory=uuid7)
    is_active: bool = True
    issued_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    expires_at: datetime | None = None

    def deactivate(self) -> None:
        self.is_active = False

    def activate(self) -> None:
        self.is_active = True
