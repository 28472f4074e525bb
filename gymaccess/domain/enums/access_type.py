"""Access rule types and resolver decisions.

AccessType is what staff configure on a permission or override.
AccessDecision is what a resolver in the access chain returns; NOT_FOUND is
the only decision that lets resolution fall through to the next resolver.
"""

from enum import Enum


class AccessType(str, Enum):
    """Access rule type stored on permissions and overrides."""

    ALLOWED = "allowed"
    DENIED = "denied"
    SCHEDULED = "scheduled"


class AccessDecision(str, Enum):
    """Tagged outcome of a single resolver in the access chain."""

    ALLOWED = "allowed"
    DENIED = "denied"
    SCHEDULED = "scheduled"
    NOT_FOUND = "not_found"

    @classmethod
    def from_access_type(cls, access_type: AccessType) -> "AccessDecision":
        """Map a configured access type onto a resolver decision."""
        return cls(access_type.value)
