"""VendorGatewayProtocol: authenticated, retried calls to the vendor API."""

from typing import Any, Protocol
from uuid import UUID

from gymaccess.core.result import Result
from gymaccess.domain.errors import VendorError


class VendorGatewayProtocol(Protocol):
    async def call(
        self,
        branch_id: UUID,
        endpoint: str,
        method: str = "GET",
        body: dict[str, Any] | None = None,
    ) -> Result[dict[str, Any], VendorError]:
        """Call a vendor endpoint for a branch.

        Returns:
            Success(dict) with the decoded response envelope, or
            Failure(VendorError) once retries are exhausted or the error
            is not retryable.
        """
        ...
