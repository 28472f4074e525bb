"""Door event types reported by the vendor."""

from enum import Enum


class AccessEventType(str, Enum):
    """Normalized door event type.

    Vendor event names are mapped onto these three values during ingestion.
    """

    ENTRY = "entry"
    EXIT = "exit"
    DENIED = "denied"
