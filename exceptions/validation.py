"""
Request Exception Classes for HostWatch

Exceptions raised for bad check-in requests: missing input and
unknown host keys. Neither touches the store.
"""

from __future__ import annotations

from typing import Any, Optional

from config.constants import ErrorCodes
from exceptions.base import HostWatchException
from exceptions.database import mask_host_key


class ClientError(HostWatchException):
    """
    Base Client Exception

    Parent class for errors caused by the caller's input.
    """

    default_error_code = ErrorCodes.CLIENT
    http_status = 400
    default_recoverable = True

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        """
        Initialize client exception.

        Args:
            message: Error message
            field: The request field that failed validation
            **kwargs: Additional arguments
        """
        super().__init__(message, **kwargs)

        if field:
            self.details["field"] = field


class MissingHostKeyError(ClientError):
    """
    Missing Host Key Error

    Raised when a check-in arrives without a host key.
    """

    default_error_code = ErrorCodes.MISSING_HOST_KEY

    def __init__(self, message: str = "Host key is required", **kwargs: Any) -> None:
        super().__init__(message, field="hostkey", **kwargs)


class HostNotFoundError(HostWatchException):
    """
    Host Not Found Error

    Raised when no host record matches the supplied key. The key acts
    as the host's shared secret, so this doubles as an auth failure.
    """

    default_error_code = ErrorCodes.HOST_NOT_FOUND
    http_status = 401
    default_recoverable = True

    def __init__(
        self,
        message: str = "Unknown host key",
        host_key: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        if host_key:
            self.details["host_key"] = mask_host_key(host_key)
