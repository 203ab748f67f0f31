"""
Constants Module for HostWatch

Contains constant values, enumerations and message templates used
throughout the application.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Final


class ThresholdPolicyName(str, Enum):
    """
    Threshold Policy Enumeration

    Selects how the sweep decides that a host changed state.
    """

    SINGLE = "single"
    DUAL = "dual"

    @property
    def description(self) -> str:
        """Get a short description of the policy."""
        descriptions = {
            ThresholdPolicyName.SINGLE: "One disconnection threshold, recovery only on check-in",
            ThresholdPolicyName.DUAL: "Disconnection and reconnection thresholds (hysteresis)",
        }
        return descriptions.get(self, "Unknown policy")


class HostStatus(str, Enum):
    """Host status as derived from the ``disconnected`` flag."""

    ONLINE = "online"
    OFFLINE = "offline"

    @classmethod
    def from_flag(cls, disconnected: bool) -> "HostStatus":
        return cls.OFFLINE if disconnected else cls.ONLINE


class AlertKind(str, Enum):
    """Kinds of alert the monitor emits."""

    OFFLINE = "offline"
    RECOVERY = "recovery"


class AlertPriority(IntEnum):
    """
    Alert Priority Levels

    Mirrors the priority scale of the Pushover API.
    """

    LOWEST = -2
    LOW = -1
    NORMAL = 0
    HIGH = 1
    EMERGENCY = 2


class MessageTemplates:
    """
    Message Templates for Alerts

    Plain-text templates; Pushover renders them as-is.
    """

    OFFLINE_TITLE: Final[str] = "{hostname} is offline!"
    OFFLINE_BODY: Final[str] = "{hostname} seems to be offline.\nLast check-in: {last_checkin}"

    RECOVERY_TITLE: Final[str] = "{hostname} is back online!"
    RECOVERY_BODY: Final[str] = "{hostname} is back online. It was offline for {duration}"

    NEVER_CHECKED_IN: Final[str] = "never"
    SUB_SECOND: Final[str] = "less than a second"


class Defaults:
    """
    Default Values

    Provides default values for the monitoring settings.
    """

    # Threshold defaults (seconds)
    DISCONNECTION_THRESHOLD_DUAL: Final[int] = 75
    DISCONNECTION_THRESHOLD_SINGLE: Final[int] = 185
    RECONNECTION_THRESHOLD: Final[int] = 60

    # Scheduler defaults
    SWEEP_INTERVAL: Final[int] = 180  # every 3 minutes

    # Display defaults
    DISPLAY_TIMEZONE: Final[str] = "Australia/Melbourne"
    TIMESTAMP_FORMAT: Final[str] = "%d/%m/%Y, %I:%M:%S %p"

    # Notification defaults
    PUSHOVER_API_URL: Final[str] = "https://api.pushover.net/1/messages.json"
    PUSHOVER_TIMEOUT: Final[int] = 10
    PUSHOVER_TITLE_LIMIT: Final[int] = 250
    PUSHOVER_MESSAGE_LIMIT: Final[int] = 1024

    # Local development marker value for IS_LOCAL_DEV
    LOCAL_DEV_MARKER: Final[str] = "local-dev"

    # Host key generation
    HOST_KEY_BYTES: Final[int] = 24


class ErrorCodes:
    """Numeric error codes grouped by category."""

    GENERAL: Final[int] = 1000
    CONFIGURATION: Final[int] = 1100
    INITIALIZATION: Final[int] = 1200

    STORE: Final[int] = 2000
    STORE_CONNECTION: Final[int] = 2001
    STORE_READ: Final[int] = 2002
    STORE_WRITE: Final[int] = 2003

    CLIENT: Final[int] = 3000
    MISSING_HOST_KEY: Final[int] = 3001
    HOST_NOT_FOUND: Final[int] = 3100

    NOTIFICATION: Final[int] = 4000
    NOTIFICATION_DELIVERY: Final[int] = 4001
    NOTIFICATION_REJECTED: Final[int] = 4002
