"""Domain errors.

Usage:
    from gymaccess.domain.errors import VendorError, VendorAuthenticationError
"""

from gymaccess.domain.errors.ingestion_error import IngestionError
from gymaccess.domain.errors.vendor_error import (
    VendorAuthenticationError,
    VendorCallFailedError,
    VendorConfigurationError,
    VendorError,
    VendorInvalidResponseError,
    VendorRateLimitError,
    VendorResourceError,
    VendorUnavailableError,
)

__all__ = [
    "IngestionError",
    "VendorAuthenticationError",
    "VendorCallFailedError",
    "VendorConfigurationError",
    "VendorError",
    "VendorInvalidResponseError",
    "VendorRateLimitError",
    "VendorResourceError",
    "VendorUnavailableError",
]
