"""TokenProviderProtocol: what the gateway client needs from token management."""

from typing import Protocol
from uuid import UUID

from gymaccess.core.result import Result
from gymaccess.domain.errors import VendorError


class TokenProviderProtocol(Protocol):
    async def get_token(self, branch_id: UUID) -> Result[str, VendorError]:
        """Valid bearer token for the branch, refreshing if needed."""
        ...

    def invalidate(self, branch_id: UUID) -> None:
        """Evict the cached token so the next get_token refreshes."""
        ...
