"""
Alert message formatting for offline and recovery alerts.
"""

from config.constants import AlertKind, AlertPriority, Defaults, MessageTemplates
from database.models import HostRecord
from monitoring.alerts import AlertPayload
from utils.helpers import TimeHelper


def format_last_checkin(last_checkin: int, tz_name: str = Defaults.DISPLAY_TIMEZONE) -> str:
    """Render a last check-in timestamp for humans, ``never`` for 0."""
    if not last_checkin:
        return MessageTemplates.NEVER_CHECKED_IN
    return TimeHelper.format_timestamp(last_checkin, tz_name)


def format_offline_duration(seconds: int) -> str:
    return TimeHelper.humanize_duration(seconds) or MessageTemplates.SUB_SECOND


def build_offline_alert(host: HostRecord, tz_name: str = Defaults.DISPLAY_TIMEZONE) -> AlertPayload:
    """Alert for a host that stopped checking in."""
    return AlertPayload(
        kind=AlertKind.OFFLINE,
        hostname=host.hostname,
        title=MessageTemplates.OFFLINE_TITLE.format(hostname=host.hostname),
        message=MessageTemplates.OFFLINE_BODY.format(
            hostname=host.hostname,
            last_checkin=format_last_checkin(host.last_checkin, tz_name),
        ),
        priority=AlertPriority.NORMAL,
        metadata={"last_checkin": host.last_checkin},
    )


def build_recovery_alert(host: HostRecord, offline_for: int) -> AlertPayload:
    """Alert for a host that is back after ``offline_for`` seconds."""
    return AlertPayload(
        kind=AlertKind.RECOVERY,
        hostname=host.hostname,
        title=MessageTemplates.RECOVERY_TITLE.format(hostname=host.hostname),
        message=MessageTemplates.RECOVERY_BODY.format(
            hostname=host.hostname,
            duration=format_offline_duration(offline_for),
        ),
        priority=AlertPriority.NORMAL,
        metadata={"offline_for": offline_for},
    )
