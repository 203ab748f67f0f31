from __future__ import annotations

import pytest
from pydantic import ValidationError

from config.constants import ThresholdPolicyName
from config.settings import MonitorSettings, Settings


ENV_VARS = (
    "THRESHOLD_POLICY",
    "DISCONNECTION_THRESHOLD",
    "RECONNECTION_THRESHOLD",
    "RECOVER_ON_CHECKIN",
    "SWEEP_INTERVAL",
    "DISPLAY_TIMEZONE",
    "IS_LOCAL_DEV",
    "PO_APPTOKEN",
    "PO_USERKEY",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep a developer's .env out of the way
    monkeypatch.chdir(tmp_path)


def test_monitor_defaults() -> None:
    settings = MonitorSettings()
    assert settings.threshold_policy is ThresholdPolicyName.DUAL
    assert settings.disconnection_threshold == 75
    assert settings.reconnection_threshold == 60
    assert settings.sweep_interval == 180
    assert settings.display_timezone == "Australia/Melbourne"
    assert settings.recover_on_checkin is True


def test_single_policy_default_threshold(monkeypatch) -> None:
    monkeypatch.setenv("THRESHOLD_POLICY", "single")
    assert MonitorSettings().disconnection_threshold == 185


def test_thresholds_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("DISCONNECTION_THRESHOLD", "600")
    monkeypatch.setenv("RECONNECTION_THRESHOLD", "300")
    settings = MonitorSettings()
    assert (settings.disconnection_threshold, settings.reconnection_threshold) == (600, 300)


@pytest.mark.parametrize(("disconnection", "reconnection"), [(60, 60), (60, 75)])
def test_dual_rejects_reconnection_not_below_disconnection(disconnection, reconnection) -> None:
    with pytest.raises(ValidationError):
        MonitorSettings(
            disconnection_threshold=disconnection,
            reconnection_threshold=reconnection,
        )


def test_single_ignores_reconnection_ordering() -> None:
    settings = MonitorSettings(
        threshold_policy="single",
        disconnection_threshold=30,
        reconnection_threshold=60,
    )
    assert settings.disconnection_threshold == 30


def test_unknown_timezone_rejected() -> None:
    with pytest.raises(ValidationError):
        MonitorSettings(display_timezone="Mars/Olympus_Mons")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("local-dev", True),
        ("LOCAL-DEV", True),
        ("true", True),
        ("", False),
        ("false", False),
        ("production", False),
        ("prod", False),
        ("remote", False),
    ],
)
def test_local_dev_marker(monkeypatch, raw, expected) -> None:
    monkeypatch.setenv("IS_LOCAL_DEV", raw)
    assert Settings().local_dev is expected


def test_local_dev_off_by_default() -> None:
    assert Settings().local_dev is False


def test_to_dict_hides_credentials(monkeypatch) -> None:
    monkeypatch.setenv("PO_APPTOKEN", "secret-token")
    monkeypatch.setenv("PO_USERKEY", "secret-user")
    data = Settings().to_dict()
    assert "apptoken" not in data["pushover"]
    assert "userkey" not in data["pushover"]
    assert "secret-token" not in str(data)
