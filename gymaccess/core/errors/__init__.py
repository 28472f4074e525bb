"""Core errors package.

Usage:
    from gymaccess.core.errors import DomainError
"""

from gymaccess.core.errors.domain_error import DomainError

__all__ = ["DomainError"]
