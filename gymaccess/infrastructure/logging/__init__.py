"""Structured logging adapters."""

from gymaccess.infrastructure.logging.console_adapter import ConsoleAdapter

__all__ = ["ConsoleAdapter"]
