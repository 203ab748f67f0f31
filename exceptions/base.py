"""
Base Exception Classes for HostWatch

Every error raised on purpose by HostWatch derives from
HostWatchException. Each class carries a numeric code for log
correlation and the HTTP status the check-in endpoint answers with
when the error escapes a request.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Type

from config.constants import ErrorCodes


class HostWatchException(Exception):
    """
    Root of the HostWatch exception hierarchy.

    Attributes:
        message: Human-readable description
        error_code: Numeric code from ErrorCodes
        details: Structured context (host key mask, fields, status codes)
        cause: Lower-level exception this one wraps, if any
        recoverable: False when the process cannot carry on
        occurred_at: UTC time the error was raised
    """

    default_error_code: int = ErrorCodes.GENERAL
    default_recoverable: bool = True
    http_status: int = 500

    def __init__(
        self,
        message: str = "An error occurred",
        error_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
        recoverable: Optional[bool] = None
    ) -> None:
        super().__init__(message)

        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = dict(details) if details else {}
        self.cause = cause
        self.recoverable = self.default_recoverable if recoverable is None else recoverable
        self.occurred_at = datetime.now(timezone.utc)

    @property
    def full_message(self) -> str:
        """Message prefixed with its error code, e.g. ``[3001] ...``."""
        return f"[{self.error_code}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """
        Serializable view of the error.

        Returns:
            Dictionary suitable for JSON logs and report payloads
        """
        return {
            "type": type(self).__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
            "occurred_at": self.occurred_at.isoformat(),
            "cause": repr(self.cause) if self.cause else None,
        }

    def log_format(self) -> str:
        """One-line rendering used in log messages."""
        parts = [type(self).__name__, self.full_message]
        if self.details:
            parts.append(f"details={self.details}")
        if self.cause:
            parts.append(f"cause={type(self.cause).__name__}: {self.cause}")
        return " | ".join(parts)

    def __str__(self) -> str:
        return self.full_message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, error_code={self.error_code})"


class ConfigurationError(HostWatchException):
    """
    Raised when settings are missing or contradictory, for example
    real alert delivery without Pushover credentials.
    """

    default_error_code = ErrorCodes.CONFIGURATION
    default_recoverable = False

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        expected_type: Optional[Type] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        if config_key:
            self.details["config_key"] = config_key
        if expected_type:
            self.details["expected_type"] = expected_type.__name__


class InitializationError(HostWatchException):
    """Raised when a component cannot start, e.g. the server port is taken."""

    default_error_code = ErrorCodes.INITIALIZATION
    default_recoverable = False

    def __init__(
        self,
        message: str,
        component: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        if component:
            self.details["component"] = component
