"""Result types for railway-oriented programming.

Vendor calls, token refreshes and ingestion steps can fail for many
expected reasons (rate limits, offline devices, bad signatures). Those
failures flow through the system as data instead of exceptions, which keeps
retry classification explicit.

Usage:
    async def fetch_person(person_id: str) -> Result[dict, VendorError]:
        if not person_id:
            return Failure(error=VendorResourceError(...))
        return Success(value={"personId": person_id})

    result = await fetch_person("p-1")
    if isinstance(result, Failure):
        logger.warning("person_fetch_failed", code=result.error.code.value)
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type


@dataclass(frozen=True, slots=True, kw_only=True)
class Success(Generic[T]):
    """Successful operation result.

    Attributes:
        value: The successful result value.
    """

    value: T


@dataclass(frozen=True, slots=True, kw_only=True)
class Failure(Generic[E]):
    """Failed operation result.

    Attributes:
        error: The error that occurred.
    """

    error: E


Result = Success[T] | Failure[E]
