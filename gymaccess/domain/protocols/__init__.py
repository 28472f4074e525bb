"""Domain protocols (ports) package.

Infrastructure adapters implement these protocols without inheritance.

Usage:
    from gymaccess.domain.protocols import AccessStoreProtocol, SyncLogProtocol
"""

from gymaccess.domain.protocols.access_store import AccessStoreProtocol
from gymaccess.domain.protocols.logger_protocol import LoggerProtocol
from gymaccess.domain.protocols.sync_log_protocol import SyncLogProtocol
from gymaccess.domain.protocols.token_provider_protocol import TokenProviderProtocol
from gymaccess.domain.protocols.vendor_gateway_protocol import VendorGatewayProtocol

__all__ = [
    "AccessStoreProtocol",
    "LoggerProtocol",
    "SyncLogProtocol",
    "TokenProviderProtocol",
    "VendorGatewayProtocol",
]
