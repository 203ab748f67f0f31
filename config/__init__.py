"""
Configuration Package for HostWatch

This package contains all configuration-related modules including:
- Settings management with environment variable support
- Constants and enums used throughout the application
"""

from config.settings import (
    Settings,
    DatabaseSettings,
    MonitorSettings,
    PushoverSettings,
    WebSettings,
    LoggingSettings,
    get_settings,
)

from config.constants import (
    ThresholdPolicyName,
    HostStatus,
    AlertKind,
    AlertPriority,
    MessageTemplates,
    Defaults,
    ErrorCodes,
)

__all__ = [
    # Settings
    "Settings",
    "DatabaseSettings",
    "MonitorSettings",
    "PushoverSettings",
    "WebSettings",
    "LoggingSettings",
    "get_settings",

    # Constants
    "ThresholdPolicyName",
    "HostStatus",
    "AlertKind",
    "AlertPriority",
    "MessageTemplates",
    "Defaults",
    "ErrorCodes",
]
