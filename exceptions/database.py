"""
Store Exception Classes for HostWatch

Provides specialized exceptions for failures of the host store:
connection issues, failed reads and failed writes.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from config.constants import ErrorCodes
from exceptions.base import HostWatchException


class StoreError(HostWatchException):
    """
    Base Store Exception

    Parent class for all host store exceptions. Surfaces as a server
    error to check-in callers and aborts the current sweep cycle.
    """

    default_error_code = ErrorCodes.STORE
    default_recoverable = False

    def __init__(
        self,
        message: str,
        query: Optional[str] = None,
        host_key: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        """
        Initialize store exception.

        Args:
            message: Error message
            query: The SQL statement that failed (sanitized)
            host_key: The host key involved, masked before storing
            **kwargs: Additional arguments
        """
        super().__init__(message, **kwargs)

        if query:
            self.details["query"] = self._sanitize_query(query)

        if host_key:
            self.details["host_key"] = mask_host_key(host_key)

    @staticmethod
    def _sanitize_query(query: str) -> str:
        """
        Sanitize SQL query by removing literal values.

        Args:
            query: The original SQL query

        Returns:
            Sanitized query string
        """
        query = re.sub(r"'[^']*'", "'***'", query)
        query = re.sub(r"= \d+", "= ***", query)

        if len(query) > 500:
            query = query[:500] + "..."

        return query


class StoreConnectionError(StoreError):
    """
    Store Connection Error

    Raised when unable to establish or maintain the database connection.
    """

    default_error_code = ErrorCodes.STORE_CONNECTION

    def __init__(
        self,
        message: str = "Unable to connect to database",
        url: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        if url:
            self.details["url"] = url


class StoreReadError(StoreError):
    """
    Store Read Error

    Raised when host records cannot be read.
    """

    default_error_code = ErrorCodes.STORE_READ

    def __init__(self, message: str = "Failed to read host records", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class StoreWriteError(StoreError):
    """
    Store Write Error

    Raised when an update to a host record fails.
    """

    default_error_code = ErrorCodes.STORE_WRITE

    def __init__(
        self,
        message: str = "Failed to write host record",
        fields: Optional[dict] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        if fields:
            self.details["fields"] = sorted(fields)


def mask_host_key(host_key: str) -> str:
    """Keep only the first four characters of a host key."""
    if len(host_key) <= 4:
        return "****"
    return host_key[:4] + "****"
