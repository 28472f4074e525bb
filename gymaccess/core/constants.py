"""Centralized constants for internal implementation details.

Vendor protocol details (paths, header names, envelope codes) are fixed by
the door-controller vendor and are NOT environment configuration. Tunable
values (timeouts, thresholds, batch sizes) live in `gymaccess/core/config.py`.
"""

# =============================================================================
# Vendor API paths
# =============================================================================

VENDOR_TOKEN_PATH: str = "/api/hpcgw/v1/token/get"
"""Token endpoint (HMAC-signed headers, JSON body with app key/secret)."""

VENDOR_PERSON_UPSERT_PATH: str = "/api/resource/v1/person/single/add"
"""Person upsert with faces and cards."""

VENDOR_ACCESS_CONFIG_PATH: str = "/api/acs/v1/door/permission/configuration"
"""Door privilege configuration for a person."""

VENDOR_PERSON_ADD_PATH: str = "/api/hpcgw/v1/person/add"
"""Create a person with a single card."""

VENDOR_PERSON_UPDATE_PATH: str = "/api/hpcgw/v1/person/update"
"""Attach a card to an existing person."""

VENDOR_PERSON_SYNC_PATH: str = "/api/hpcgw/v1/person/synchronize"
"""Push a person's credentials down to the physical devices."""

VENDOR_MQ_SUBSCRIBE_PATH: str = "/api/hpcgw/v1/mq/subscribe"
"""Create a message-queue subscription for event topics."""

VENDOR_MQ_MESSAGES_PATH: str = "/api/hpcgw/v1/mq/messages"
"""Pull queued messages after an offset."""

VENDOR_MQ_OFFSET_PATH: str = "/api/hpcgw/v1/mq/offset"
"""Acknowledge consumed messages up to an offset."""

VENDOR_DEVICE_LIST_PATH: str = "/api/hpcgw/v1/device/list"
"""Paged list of devices registered to the vendor account."""

VENDOR_DOOR_EVENT_TOPIC: str = "acs.event.door_access"
"""Message-queue topic carrying door access events."""


# =============================================================================
# Signing headers
# =============================================================================

HEADER_CA_KEY: str = "X-Ca-Key"
HEADER_CA_TIMESTAMP: str = "X-Ca-Timestamp"
HEADER_CA_NONCE: str = "X-Ca-Nonce"
HEADER_CA_SIGNATURE: str = "X-Ca-Signature"
HEADER_CA_SIGNATURE_HEADERS: str = "X-Ca-Signature-Headers"

WEBHOOK_SIGNATURE_HEADER: str = "x-hikvision-signature"
WEBHOOK_TIMESTAMP_HEADER: str = "x-hikvision-timestamp"
WEBHOOK_NONCE_HEADER: str = "x-hikvision-nonce"

NONCE_BYTES: int = 16
"""Random bytes in a request nonce (hex encoded to 32 characters)."""

BEARER_PREFIX: str = "Bearer "
"""HTTP Authorization header prefix for Bearer tokens."""


# =============================================================================
# Vendor envelope codes
# =============================================================================

VENDOR_CODE_OK: str = "0"
VENDOR_CODE_TOKEN_EXPIRED: str = "TOKEN_EXPIRED"
VENDOR_CODE_PERSON_NOT_FOUND: str = "PERSON_NOT_FOUND"
VENDOR_CODE_DEVICE_OFFLINE: str = "DEVICE_OFFLINE"


# =============================================================================
# Attendance
# =============================================================================

ATTENDANCE_SOURCE_ACCESS_CONTROL: str = "access_control"
"""Source tag on attendance sessions created from door events."""

AUTO_CLOSE_NOTE: str = "Auto-closed by system - missed exit event"

UNMAPPED_MEMBER_NOTE: str = "unmapped_member"
"""processing_note on events dropped because no member could be resolved."""

DEFAULT_MEMBER_ROLE: str = "member"


# =============================================================================
# Response Limits
# =============================================================================

RESPONSE_BODY_MAX_LENGTH: int = 500
"""Maximum vendor response body length kept in error details."""
