"""
Notification Exception Classes for HostWatch

Alert delivery is best-effort: these exceptions are raised inside an
alert channel, logged there, and never reach the check-in or sweep flow.
"""

from __future__ import annotations

from typing import Any, Optional

from config.constants import ErrorCodes
from exceptions.base import HostWatchException


class NotificationError(HostWatchException):
    """
    Base Notification Exception
    """

    default_error_code = ErrorCodes.NOTIFICATION
    default_recoverable = True

    def __init__(
        self,
        message: str,
        channel: Optional[str] = None,
        title: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        if channel:
            self.details["channel"] = channel

        if title:
            self.details["title"] = title


class NotificationDeliveryError(NotificationError):
    """
    Notification Delivery Error

    Raised when the notification service could not be reached
    (connection failure, timeout, non-JSON reply).
    """

    default_error_code = ErrorCodes.NOTIFICATION_DELIVERY


class NotificationRejectedError(NotificationError):
    """
    Notification Rejected Error

    Raised when the notification service answered but did not
    acknowledge the message.
    """

    default_error_code = ErrorCodes.NOTIFICATION_REJECTED

    def __init__(
        self,
        message: str = "Notification was not acknowledged",
        status_code: Optional[int] = None,
        response: Optional[Any] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        if status_code is not None:
            self.details["status_code"] = status_code

        if response is not None:
            self.details["response"] = response
