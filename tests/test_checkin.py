from __future__ import annotations

from dataclasses import replace

import pytest

from conftest import NOW, FakeHostStore, make_host
from exceptions import HostNotFoundError, MissingHostKeyError, StoreReadError, StoreWriteError
from monitoring.checkin import CheckinHandler
from monitoring.policy import MonitorConfig, ThresholdPolicy


def _handler(store, channel, config, clock) -> CheckinHandler:
    return CheckinHandler(store, channel, config, clock=clock)


@pytest.mark.asyncio
@pytest.mark.parametrize("host_key", [None, ""])
async def test_missing_key_never_touches_store(host_key, channel, dual_config, clock) -> None:
    store = FakeHostStore((make_host(),))

    with pytest.raises(MissingHostKeyError):
        await _handler(store, channel, dual_config, clock).handle(host_key)

    assert store.calls == []
    assert channel.sent == []


@pytest.mark.asyncio
async def test_unknown_key_writes_nothing(channel, dual_config, clock) -> None:
    store = FakeHostStore((make_host(),))

    with pytest.raises(HostNotFoundError):
        await _handler(store, channel, dual_config, clock).handle("nope")

    assert store.updates == []
    assert channel.sent == []


@pytest.mark.asyncio
async def test_online_host_only_gets_timestamp(channel, dual_config, clock) -> None:
    store = FakeHostStore((make_host(elapsed=40),))

    result = await _handler(store, channel, dual_config, clock).handle("key-alpha")

    assert not result.recovered
    assert result.host.last_checkin == NOW
    assert store.hosts["key-alpha"].last_checkin == NOW
    assert store.hosts["key-alpha"].disconnected is False
    assert store.updates == [("update", "key-alpha", {"last_checkin": NOW}, None)]
    assert channel.sent == []


@pytest.mark.asyncio
async def test_offline_host_recovers_with_single_alert(channel, dual_config, clock) -> None:
    store = FakeHostStore((make_host(elapsed=3661, disconnected=True),))
    handler = _handler(store, channel, dual_config, clock)

    result = await handler.handle("key-alpha")

    assert result.recovered
    assert result.offline_for == 3661
    assert result.host.disconnected is False
    assert store.hosts["key-alpha"].disconnected is False
    assert store.hosts["key-alpha"].last_checkin == NOW
    assert len(channel.sent) == 1
    assert channel.sent[0][:2] == (
        "alpha is back online!",
        "alpha is back online. It was offline for 1 hour, 1 minute and 1 second",
    )

    # A second check-in straight after is an ordinary one
    second = await handler.handle("key-alpha")
    assert not second.recovered
    assert len(channel.sent) == 1


@pytest.mark.asyncio
async def test_recovery_applies_under_single_policy(channel, single_config, clock) -> None:
    store = FakeHostStore((make_host(elapsed=500, disconnected=True),))

    result = await _handler(store, channel, single_config, clock).handle("key-alpha")

    assert result.recovered
    assert channel.titles == ["alpha is back online!"]


@pytest.mark.asyncio
async def test_zero_second_outage_wording(channel, dual_config, clock) -> None:
    store = FakeHostStore((make_host(elapsed=0, disconnected=True),))

    await _handler(store, channel, dual_config, clock).handle("key-alpha")

    assert channel.sent[0][1] == "alpha is back online. It was offline for less than a second"


@pytest.mark.asyncio
async def test_lost_race_sends_no_alert(channel, dual_config, clock) -> None:
    store = FakeHostStore((make_host(elapsed=200, disconnected=True),))

    def sweep_recovers_first(s: FakeHostStore) -> None:
        s.hosts["key-alpha"] = replace(s.hosts["key-alpha"], disconnected=False)

    store.before_update = sweep_recovers_first

    result = await _handler(store, channel, dual_config, clock).handle("key-alpha")

    assert not result.recovered
    assert channel.sent == []
    # Timestamp still written by the fallback update
    assert store.hosts["key-alpha"].last_checkin == NOW
    assert len(store.updates) == 2


@pytest.mark.asyncio
async def test_recover_on_checkin_disabled_leaves_flag(channel, clock) -> None:
    config = MonitorConfig(
        policy=ThresholdPolicy.dual(75, 60),
        display_timezone="UTC",
        recover_on_checkin=False,
    )
    store = FakeHostStore((make_host(elapsed=200, disconnected=True),))

    result = await _handler(store, channel, config, clock).handle("key-alpha")

    assert not result.recovered
    assert result.host.disconnected is True
    assert store.hosts["key-alpha"].disconnected is True
    assert store.hosts["key-alpha"].last_checkin == NOW
    assert channel.sent == []


@pytest.mark.asyncio
async def test_read_failure_propagates(channel, dual_config, clock) -> None:
    store = FakeHostStore((make_host(),))
    store.fail_read_one = True

    with pytest.raises(StoreReadError):
        await _handler(store, channel, dual_config, clock).handle("key-alpha")

    assert store.updates == []


@pytest.mark.asyncio
async def test_write_failure_propagates_without_alert(channel, dual_config, clock) -> None:
    store = FakeHostStore((make_host(elapsed=200, disconnected=True),))
    store.fail_update_for.add("key-alpha")

    with pytest.raises(StoreWriteError):
        await _handler(store, channel, dual_config, clock).handle("key-alpha")

    assert channel.sent == []


@pytest.mark.asyncio
async def test_host_removed_before_write_is_not_found(channel, dual_config, clock) -> None:
    store = FakeHostStore((make_host(),))
    store.before_update = lambda s: s.hosts.clear()

    with pytest.raises(HostNotFoundError):
        await _handler(store, channel, dual_config, clock).handle("key-alpha")
