"""Machine-readable error codes.

Error codes follow ENTITY_ACTION_REASON naming. They are stable: callers
branch on them to decide whether to skip, retry later, or alert an operator.

Categories:
- Configuration errors (branch settings missing or inactive)
- Vendor authentication errors
- Vendor transport errors (timeouts, 5xx, rate limits)
- Vendor domain errors (person not found, device offline, rejected)
- Ingestion errors (bad signature, malformed payload)
- Store errors
"""

from enum import Enum


class ErrorCode(Enum):
    """Machine-readable error codes."""

    # Configuration
    VENDOR_SETTINGS_NOT_FOUND = "vendor_settings_not_found"

    # Authentication
    VENDOR_AUTHENTICATION_FAILED = "vendor_authentication_failed"
    VENDOR_TOKEN_EXPIRED = "vendor_token_expired"

    # Transport
    VENDOR_UNAVAILABLE = "vendor_unavailable"
    VENDOR_RATE_LIMITED = "vendor_rate_limited"
    VENDOR_CALL_FAILED = "vendor_call_failed"
    VENDOR_INVALID_RESPONSE = "vendor_invalid_response"

    # Vendor domain
    VENDOR_PERSON_NOT_FOUND = "vendor_person_not_found"
    VENDOR_DEVICE_OFFLINE = "vendor_device_offline"
    VENDOR_REQUEST_REJECTED = "vendor_request_rejected"

    # Ingestion
    WEBHOOK_SIGNATURE_INVALID = "webhook_signature_invalid"
    WEBHOOK_PAYLOAD_INVALID = "webhook_payload_invalid"

    # Store
    STORE_OPERATION_FAILED = "store_operation_failed"
    SYNC_LOG_WRITE_FAILED = "sync_log_write_failed"
