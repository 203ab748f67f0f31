from __future__ import annotations

import pytest

from config.settings import DatabaseSettings, Settings, get_settings
from database.manager import DatabaseManager
from database.repositories import HostRepository
from exceptions import ConfigurationError
from main import build_parser, cmd_add_host, cmd_init_db, cmd_sweep, load_settings, main


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        local_dev=True,
        database=DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path / 'hosts.db'}"),
    )


def test_parser_commands() -> None:
    parser = build_parser()
    assert parser.parse_args([]).command is None
    args = parser.parse_args(["add-host", "web-01", "--key", "abc"])
    assert (args.command, args.hostname, args.host_key) == ("add-host", "web-01", "abc")


@pytest.mark.asyncio
async def test_add_host_then_sweep(settings, capsys) -> None:
    assert await cmd_init_db(settings) == 0
    assert await cmd_add_host(settings, "web-01", None) == 0
    host_key = capsys.readouterr().out.strip()
    assert host_key

    # Never checked in, so the first sweep marks it offline
    assert await cmd_sweep(settings) == 0

    manager = DatabaseManager(settings.database)
    try:
        host = await HostRepository(manager).read_one(host_key)
    finally:
        await manager.close()
    assert host.hostname == "web-01"
    assert host.disconnected is True


@pytest.fixture
def fresh_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_invalid_environment_is_configuration_error(
    monkeypatch, tmp_path, fresh_settings_cache
) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DISCONNECTION_THRESHOLD", "30")
    monkeypatch.setenv("RECONNECTION_THRESHOLD", "60")

    with pytest.raises(ConfigurationError):
        load_settings()


def test_main_exits_1_on_bad_configuration(
    monkeypatch, tmp_path, fresh_settings_cache, log_messages
) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SWEEP_INTERVAL", "not-a-number")

    assert main(["sweep"]) == 1
    assert any(
        level == "ERROR" and "Invalid configuration" in message
        for level, message in log_messages
    )
