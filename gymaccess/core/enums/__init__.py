"""Core enums package.

Usage:
    from gymaccess.core.enums import ErrorCode, Environment
"""

from gymaccess.core.enums.environment import Environment
from gymaccess.core.enums.error_code import ErrorCode

__all__ = ["ErrorCode", "Environment"]
