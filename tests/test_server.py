from __future__ import annotations

import socket

import pytest
from aiohttp import test_utils

from config.settings import WebSettings
from conftest import NOW, FakeHostStore, make_host
from exceptions import InitializationError
from monitoring.checkin import CheckinHandler
from monitoring.server import CheckinServer
from monitoring.sweep import SweepEvaluator


def _server(store, channel, config, clock, local_dev=False) -> CheckinServer:
    return CheckinServer(
        WebSettings(),
        CheckinHandler(store, channel, config, clock=clock),
        sweep_evaluator=SweepEvaluator(store, channel, config, clock=clock),
        local_dev=local_dev,
    )


async def _request(server: CheckinServer, method: str, path: str, **params):
    async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
        response = await client.request(method, path, params=params)
        return response.status, await response.text()


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["GET", "POST", "HEAD"])
async def test_checkin_any_method(method, channel, dual_config, clock) -> None:
    store = FakeHostStore((make_host(elapsed=50),))

    status, body = await _request(
        _server(store, channel, dual_config, clock), method, "/", hostkey="key-alpha"
    )

    assert status == 200
    assert body == ""
    assert store.hosts["key-alpha"].last_checkin == NOW


@pytest.mark.asyncio
async def test_missing_key_is_400(channel, dual_config, clock) -> None:
    store = FakeHostStore((make_host(),))

    status, _ = await _request(_server(store, channel, dual_config, clock), "GET", "/")

    assert status == 400
    assert store.calls == []


@pytest.mark.asyncio
async def test_unknown_key_is_401(channel, dual_config, clock) -> None:
    store = FakeHostStore((make_host(),))

    status, _ = await _request(
        _server(store, channel, dual_config, clock), "GET", "/", hostkey="wrong"
    )

    assert status == 401
    assert store.updates == []


@pytest.mark.asyncio
async def test_store_failure_is_500(channel, dual_config, clock) -> None:
    store = FakeHostStore((make_host(),))
    store.fail_update_for.add("key-alpha")

    status, _ = await _request(
        _server(store, channel, dual_config, clock), "GET", "/", hostkey="key-alpha"
    )

    assert status == 500


@pytest.mark.asyncio
async def test_recovering_checkin_sends_alert(channel, dual_config, clock) -> None:
    store = FakeHostStore((make_host(elapsed=120, disconnected=True),))

    status, _ = await _request(
        _server(store, channel, dual_config, clock), "POST", "/", hostkey="key-alpha"
    )

    assert status == 200
    assert channel.titles == ["alpha is back online!"]


@pytest.mark.asyncio
async def test_health(channel, dual_config, clock) -> None:
    server = _server(FakeHostStore(), channel, dual_config, clock)

    async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
        response = await client.get("/health")
        data = await response.json()

    assert response.status == 200
    assert data["status"] == "healthy"
    assert data["policy"] == dual_config.policy.describe()
    assert data["checkins_recorded"] == 0


@pytest.mark.asyncio
async def test_scheduled_route_runs_sweep_in_local_dev(channel, dual_config, clock) -> None:
    store = FakeHostStore((make_host(elapsed=500),))
    server = _server(store, channel, dual_config, clock, local_dev=True)

    async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
        response = await client.get("/__scheduled")
        data = await response.json()

    assert response.status == 200
    assert data["went_offline"] == ["alpha"]
    assert channel.titles == ["alpha is offline!"]


@pytest.mark.asyncio
async def test_scheduled_route_reports_store_failure(channel, dual_config, clock) -> None:
    store = FakeHostStore((make_host(elapsed=500),))
    store.fail_read_all = True
    server = _server(store, channel, dual_config, clock, local_dev=True)

    async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
        response = await client.get("/__scheduled")

    assert response.status == 500
    assert channel.sent == []


@pytest.mark.asyncio
async def test_scheduled_route_absent_outside_local_dev(channel, dual_config, clock) -> None:
    server = _server(FakeHostStore(), channel, dual_config, clock)

    status, _ = await _request(server, "GET", "/__scheduled")

    assert status == 404


@pytest.mark.asyncio
async def test_start_fails_cleanly_when_port_taken(channel, dual_config, clock) -> None:
    blocker = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    blocker.bind(("127.0.0.1", 0))
    blocker.listen(1)
    try:
        port = blocker.getsockname()[1]
        server = CheckinServer(
            WebSettings(host="127.0.0.1", port=port),
            CheckinHandler(FakeHostStore(), channel, dual_config, clock=clock),
        )
        with pytest.raises(InitializationError):
            await server.start()
        await server.stop()
    finally:
        blocker.close()
