from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import pytest
from loguru import logger

from config.constants import AlertPriority
from database.models import HostRecord
from database.repositories import HostStore, validate_fields
from exceptions import StoreReadError, StoreWriteError
from monitoring.alerts import AlertChannel
from monitoring.policy import MonitorConfig, ThresholdPolicy


NOW = 1_760_000_000


class FakeClock:
    def __init__(self, now: int = NOW) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


class FakeHostStore(HostStore):
    """In-memory store with switchable failures and a call log."""

    def __init__(self, hosts: Tuple[HostRecord, ...] = ()) -> None:
        self.hosts: Dict[str, HostRecord] = {h.host_key: h for h in hosts}
        self.calls: List[tuple] = []
        self.fail_read_one = False
        self.fail_read_all = False
        self.fail_update_for: set = set()
        # Runs once, just before the next update, to simulate another writer
        self.before_update: Optional[Callable[["FakeHostStore"], None]] = None

    @property
    def updates(self) -> List[tuple]:
        return [c for c in self.calls if c[0] == "update"]

    async def read_one(self, host_key: str) -> Optional[HostRecord]:
        self.calls.append(("read_one", host_key))
        if self.fail_read_one:
            raise StoreReadError(host_key=host_key)
        return self.hosts.get(host_key)

    async def read_all(self) -> List[HostRecord]:
        self.calls.append(("read_all",))
        if self.fail_read_all:
            raise StoreReadError("D1 unavailable")
        return list(self.hosts.values())

    async def update(
        self,
        host_key: str,
        fields: Mapping[str, Any],
        expected_disconnected: Optional[bool] = None,
    ) -> bool:
        validate_fields(fields)
        self.calls.append(("update", host_key, dict(fields), expected_disconnected))
        if self.before_update is not None:
            hook, self.before_update = self.before_update, None
            hook(self)
        if host_key in self.fail_update_for:
            raise StoreWriteError(host_key=host_key, fields=dict(fields))
        host = self.hosts.get(host_key)
        if host is None:
            return False
        if expected_disconnected is not None and host.disconnected != expected_disconnected:
            return False
        self.hosts[host_key] = host.with_changes(**fields)
        return True


class RecordingChannel(AlertChannel):
    name = "recording"

    def __init__(self) -> None:
        self.sent: List[Tuple[str, str, AlertPriority]] = []

    async def send(self, title: str, message: str, priority: AlertPriority = AlertPriority.NORMAL) -> bool:
        self.sent.append((title, message, priority))
        return True

    @property
    def titles(self) -> List[str]:
        return [t for t, _m, _p in self.sent]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def channel() -> RecordingChannel:
    return RecordingChannel()


@pytest.fixture
def dual_config() -> MonitorConfig:
    return MonitorConfig(policy=ThresholdPolicy.dual(75, 60), display_timezone="UTC")


@pytest.fixture
def single_config() -> MonitorConfig:
    return MonitorConfig(policy=ThresholdPolicy.single(185), display_timezone="UTC")


@pytest.fixture
def log_messages():
    """Capture loguru output as (level, message) tuples."""
    messages: List[Tuple[str, str]] = []
    handler_id = logger.add(
        lambda msg: messages.append((msg.record["level"].name, msg.record["message"])),
        level="DEBUG",
    )
    yield messages
    logger.remove(handler_id)


def make_host(
    key: str = "key-alpha",
    name: str = "alpha",
    elapsed: int = 0,
    disconnected: bool = False,
    now: int = NOW,
) -> HostRecord:
    return HostRecord(host_key=key, hostname=name, last_checkin=now - elapsed, disconnected=disconnected)
