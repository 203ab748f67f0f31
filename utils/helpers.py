"""
============================================================================
HOSTWATCH - HELPERS UTILITY
============================================================================
Time formatting, duration humanizing and key generation helpers.
============================================================================
"""

import secrets
import time
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from config.constants import Defaults


# ============================================================================
# TIME UTILITIES
# ============================================================================

class TimeHelper:
    """
    Time and date manipulation utilities.
    """

    UNITS = (("hour", 3600), ("minute", 60), ("second", 1))

    @staticmethod
    def now_epoch() -> int:
        """Current time as whole seconds since the epoch."""
        return int(time.time())

    @staticmethod
    def humanize_duration(seconds: int) -> str:
        """
        Convert seconds to words.

        Hours, minutes and seconds are split by truncating division, zero
        parts are dropped, and the last two parts are joined with "and".

        Args:
            seconds: Number of seconds

        Returns:
            e.g. "1 hour, 1 minute and 1 second"; "" for 0
        """
        parts = []
        remainder = max(int(seconds), 0)
        for unit, size in TimeHelper.UNITS:
            value, remainder = divmod(remainder, size)
            if value:
                parts.append(f"{value} {unit}{'' if value == 1 else 's'}")

        if len(parts) < 2:
            return "".join(parts)
        return ", ".join(parts[:-1]) + " and " + parts[-1]

    @staticmethod
    def format_timestamp(
        epoch_seconds: float,
        tz_name: str = Defaults.DISPLAY_TIMEZONE,
        fmt: str = Defaults.TIMESTAMP_FORMAT,
    ) -> str:
        """
        Format an epoch timestamp in the given timezone.

        Args:
            epoch_seconds: Seconds since the epoch
            tz_name: IANA timezone name
            fmt: strftime format string

        Returns:
            e.g. "19/10/2026, 02:03:04 PM"
        """
        dt = datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
        return dt.astimezone(ZoneInfo(tz_name)).strftime(fmt)


# ============================================================================
# STRING UTILITIES
# ============================================================================

class StringHelper:
    """
    String manipulation utilities.
    """

    @staticmethod
    def generate_host_key(nbytes: int = Defaults.HOST_KEY_BYTES) -> str:
        """Generate a URL-safe random host key."""
        return secrets.token_urlsafe(nbytes)

    @staticmethod
    def truncate(text: str, max_length: int = 100, suffix: str = "...") -> str:
        """
        Truncate text to maximum length.

        Args:
            text: Text to truncate
            max_length: Maximum length
            suffix: Suffix to add if truncated

        Returns:
            Truncated text
        """
        if len(text) <= max_length:
            return text
        return text[: max_length - len(suffix)] + suffix
