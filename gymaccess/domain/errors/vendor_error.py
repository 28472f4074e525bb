"""Vendor error types returned by the token manager and gateway client.

Architecture:
- Inherit from DomainError (core layer)
- Used in Result types (railway-oriented programming)
- Each error carries a stable ErrorCode so callers can decide whether to
  skip, retry later, or alert

Taxonomy:
    VendorConfigurationError   missing/inactive branch settings, never retried
    VendorAuthenticationError  token refresh failed, 401 / TOKEN_EXPIRED
    VendorUnavailableError     timeouts, connection errors, 5xx (transient)
    VendorRateLimitError       429 (transient, honours Retry-After)
    VendorResourceError        person not found, device offline, rejected
    VendorInvalidResponseError malformed body
    VendorCallFailedError      retries exhausted, enriched with call context
"""

from dataclasses import dataclass
from typing import Any
from uuid import UUID

from gymaccess.core.errors import DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class VendorError(DomainError):
    """Base door-controller vendor error.

    Attributes:
        code: ErrorCode.
        message: Human-readable message.
        branch_id: Branch whose vendor account was used.
        status_code: HTTP status if a response was received.
        vendor_code: Vendor application error code, if any.
        details: Additional context.
    """

    branch_id: UUID | None = None
    status_code: int | None = None
    vendor_code: str | None = None
    details: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class VendorConfigurationError(VendorError):
    """Branch has no active vendor API settings. Fatal to the operation."""


@dataclass(frozen=True, slots=True, kw_only=True)
class VendorAuthenticationError(VendorError):
    """Vendor rejected our credentials or token.

    Attributes:
        is_token_expired: Token was rejected (401 / TOKEN_EXPIRED) rather
            than the app key/secret failing at the token endpoint.
    """

    is_token_expired: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class VendorUnavailableError(VendorError):
    """Vendor unreachable or failing (timeout, connection error, 5xx)."""

    is_transient: bool = True


@dataclass(frozen=True, slots=True, kw_only=True)
class VendorRateLimitError(VendorError):
    """Vendor returned 429.

    Attributes:
        retry_after: Seconds suggested by the Retry-After header.
    """

    retry_after: int | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class VendorResourceError(VendorError):
    """Vendor reported a permanent problem with the target resource.

    PERSON_NOT_FOUND, DEVICE_OFFLINE and generic non-zero result codes land
    here. Not retried.
    """


@dataclass(frozen=True, slots=True, kw_only=True)
class VendorInvalidResponseError(VendorError):
    """Vendor body could not be parsed.

    Attributes:
        response_body: Truncated raw body for debugging.
    """

    response_body: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class VendorCallFailedError(VendorError):
    """A vendor call exhausted its retries.

    Attributes:
        endpoint: Path that was called.
        method: HTTP method.
        attempts: Attempts made before giving up.
        last_error: Final underlying cause.
    """

    endpoint: str
    method: str
    attempts: int
    last_error: VendorError | None = None
