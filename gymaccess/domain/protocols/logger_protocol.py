"""LoggerProtocol definition for structured logging.

Implementations MUST keep logs structured (message + key-value context) and
safe: vendor app secrets and bearer tokens are never logged.

Usage:
    from gymaccess.core.container import get_logger

    logger: LoggerProtocol = get_logger()
    logger.info("member_synced", member_id=str(member_id), doors=3)

    branch_logger = logger.bind(branch_id=str(branch_id))
    branch_logger.warning("orphan_exit")  # branch_id auto-included
"""

from __future__ import annotations

from typing import Any, Protocol


class LoggerProtocol(Protocol):
    """Protocol for structured logging adapters.

    Supports the 5 standard levels and context binding. Implementations
    may enrich logs with timestamp and level.
    """

    def debug(self, message: str, /, **context: Any) -> None: ...

    def info(self, message: str, /, **context: Any) -> None: ...

    def warning(self, message: str, /, **context: Any) -> None: ...

    def error(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None:
        """Log an error-level message with optional exception details.

        Args:
            message: Human-readable message (avoid f-strings; use context).
            error: Optional exception instance; implementation may include
                error_type and error_message fields.
            **context: Structured key-value context fields.
        """
        ...

    def critical(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None: ...

    def bind(self, **context: Any) -> LoggerProtocol:
        """Return new logger with permanently bound context.

        Original logger instance remains unchanged (immutable pattern).
        """
        ...

    def with_context(self, **context: Any) -> LoggerProtocol:
        """Alias for bind()."""
        ...
