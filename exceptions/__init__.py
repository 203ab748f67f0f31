"""
Exceptions Package for HostWatch

Provides the exception hierarchy for error handling
throughout the application.
"""

from exceptions.base import (
    HostWatchException,
    ConfigurationError,
    InitializationError,
)

from exceptions.database import (
    StoreError,
    StoreConnectionError,
    StoreReadError,
    StoreWriteError,
)

from exceptions.validation import (
    ClientError,
    MissingHostKeyError,
    HostNotFoundError,
)

from exceptions.notification import (
    NotificationError,
    NotificationDeliveryError,
    NotificationRejectedError,
)

__all__ = [
    # Base exceptions
    "HostWatchException",
    "ConfigurationError",
    "InitializationError",

    # Store exceptions
    "StoreError",
    "StoreConnectionError",
    "StoreReadError",
    "StoreWriteError",

    # Request exceptions
    "ClientError",
    "MissingHostKeyError",
    "HostNotFoundError",

    # Notification exceptions
    "NotificationError",
    "NotificationDeliveryError",
    "NotificationRejectedError",
]
