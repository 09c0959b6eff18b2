"""
Error types raised by the data-access services.
"""
from typing import Optional

from postgrest.exceptions import APIError

# PostgreSQL error codes surfaced by PostgREST
POSTGRES_UNIQUE_VIOLATION = "23505"


class DataAccessError(Exception):
    """
    A query against the hosted database failed.

    Attributes:
        operation: Name of the failing operation, e.g.
            "get_daily_entry_bundle - food_events"
        cause: The underlying exception (usually a PostgREST APIError)
    """

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.cause = cause
        message = f"{operation} failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)

    @property
    def code(self) -> Optional[str]:
        """PostgREST error code of the cause, when there is one."""
        return getattr(self.cause, "code", None)


def is_unique_violation(exc: BaseException) -> bool:
    return isinstance(exc, APIError) and getattr(exc, "code", None) == POSTGRES_UNIQUE_VIOLATION


__all__ = ["DataAccessError", "is_unique_violation", "POSTGRES_UNIQUE_VIOLATION"]
