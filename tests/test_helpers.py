from __future__ import annotations

import pytest

from utils.helpers import StringHelper, TimeHelper


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [
        (0, ""),
        (1, "1 second"),
        (59, "59 seconds"),
        (60, "1 minute"),
        (61, "1 minute and 1 second"),
        (3600, "1 hour"),
        (3661, "1 hour, 1 minute and 1 second"),
        (7200, "2 hours"),
        (7320, "2 hours and 2 minutes"),
        (90061, "25 hours, 1 minute and 1 second"),
    ],
)
def test_humanize_duration(seconds: int, expected: str) -> None:
    assert TimeHelper.humanize_duration(seconds) == expected


def test_humanize_duration_clamps_negative_to_empty() -> None:
    # Clock skew between hosts can make elapsed time negative
    assert TimeHelper.humanize_duration(-5) == ""


def test_format_timestamp_uses_timezone() -> None:
    assert TimeHelper.format_timestamp(0, "UTC") == "01/01/1970, 12:00:00 AM"
    assert TimeHelper.format_timestamp(0, "Australia/Melbourne") == "01/01/1970, 10:00:00 AM"


def test_generate_host_key_is_random_and_url_safe() -> None:
    first = StringHelper.generate_host_key()
    second = StringHelper.generate_host_key()
    assert first != second
    assert len(first) >= 32
    assert all(c.isalnum() or c in "-_" for c in first)


def test_truncate() -> None:
    assert StringHelper.truncate("short", 10) == "short"
    assert StringHelper.truncate("x" * 20, 10) == "xxxxxxx..."
