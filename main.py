"""
============================================================================
HOSTWATCH - MAIN APPLICATION
============================================================================
Entry point wiring every layer of the service together:

    • Settings (Pydantic) & logging (loguru)
    • DatabaseManager + HostRepository (SQLAlchemy async)
    • AlertChannel        — Pushover, or the log in local development
    • CheckinHandler      — behind the aiohttp CheckinServer
    • SweepEvaluator      — fired by the Scheduler every SWEEP_INTERVAL

Commands
--------
    python main.py serve                 check-in server + scheduled sweeps
    python main.py sweep                 run one sweep cycle and exit
    python main.py init-db               create the hosts table
    python main.py add-host NAME [--key] provision a host, print its key

Startup Order (serve)
---------------------
1.  Load settings & configure logging
2.  Initialize DatabaseManager (create tables if needed)
3.  Build the alert channel
4.  Wire up CheckinHandler, SweepEvaluator, CheckinServer, Scheduler
5.  Start CheckinServer, then Scheduler

Shutdown Order (reverse)
------------------------
    stop scheduler → stop server → close HTTP client → close DB → exit
============================================================================
"""

import argparse
import asyncio
import signal
import sys
from typing import List, Optional

import httpx
from pydantic import ValidationError

from config.settings import Settings, get_settings
from database.manager import DatabaseManager
from database.models import HostRecord
from database.repositories import HostRepository
from exceptions import ConfigurationError, HostWatchException
from monitoring.alerts import AlertChannel, create_alert_channel
from monitoring.checkin import CheckinHandler
from monitoring.policy import MonitorConfig
from monitoring.scheduler import Scheduler
from monitoring.server import CheckinServer
from monitoring.sweep import ScheduledEvent, SweepEvaluator
from utils.helpers import StringHelper
from utils.logger import get_logger, setup_logging


logger = get_logger("Main")


# ============================================================================
# APPLICATION CLASS
# ============================================================================

class HostWatchApplication:
    """
    Top-level application orchestrator.

    Owns every subsystem and is the single place that knows the startup /
    shutdown order.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.config = MonitorConfig.from_settings(settings.monitor)

        # --- subsystems (populated during startup) ---
        self.db_manager: Optional[DatabaseManager] = None
        self.store: Optional[HostRepository] = None
        self.http_client: Optional[httpx.AsyncClient] = None
        self.alert_channel: Optional[AlertChannel] = None
        self.checkin_handler: Optional[CheckinHandler] = None
        self.sweep_evaluator: Optional[SweepEvaluator] = None
        self.server: Optional[CheckinServer] = None
        self.scheduler: Optional[Scheduler] = None

        self._stop_event = asyncio.Event()

    # ==================================================================
    # WIRING
    # ==================================================================

    async def init_core(self) -> None:
        """
        Connect the database and build the check-in and sweep paths.

        Raises:
            ConfigurationError: Alert credentials missing
            StoreConnectionError: Database unreachable
        """
        logger.info(f"── {self.settings.app_name} v{self.settings.app_version} ──")
        logger.info(f"  Policy: {self.config.policy.describe()}")
        logger.debug(f"  Settings: {self.settings.to_dict()}")

        self.db_manager = DatabaseManager(self.settings.database)
        await self.db_manager.initialize()
        self.store = HostRepository(self.db_manager)

        if not self.settings.local_dev:
            self.http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.settings.pushover.timeout)
            )
        self.alert_channel = create_alert_channel(self.settings, client=self.http_client)

        self.checkin_handler = CheckinHandler(self.store, self.alert_channel, self.config)
        self.sweep_evaluator = SweepEvaluator(self.store, self.alert_channel, self.config)

    async def startup(self) -> None:
        """Start the server and the sweep schedule."""
        await self.init_core()

        self.server = CheckinServer(
            self.settings.web,
            self.checkin_handler,
            sweep_evaluator=self.sweep_evaluator,
            local_dev=self.settings.local_dev,
            version=self.settings.app_version,
        )
        self.scheduler = Scheduler()
        self.scheduler.register_job(
            "sweep", self.config.sweep_interval, self.sweep_evaluator.run
        )

        await self.server.start()
        await self.scheduler.start()

        db_info = await self.db_manager.get_database_info()
        logger.info(
            f"  ✓ Monitoring {db_info['hosts']} host(s), {db_info['offline']} offline; "
            f"sweeping every {self.config.sweep_interval}s"
        )

    async def shutdown(self) -> None:
        """
        Graceful shutdown in reverse order. A failure in one subsystem
        doesn't prevent the others from cleaning up.
        """
        logger.info("  Shutting down …")

        if self.scheduler:
            try:
                await self.scheduler.stop()
            except Exception as e:
                logger.error(f"  ✗ Scheduler stop error: {e}")

        if self.server:
            try:
                await self.server.stop()
            except Exception as e:
                logger.error(f"  ✗ Server stop error: {e}")

        if self.http_client:
            await self.http_client.aclose()

        if self.db_manager:
            try:
                await self.db_manager.close()
            except Exception as e:
                logger.error(f"  ✗ Database close error: {e}")

        logger.info("  ✓ Shutdown complete")

    def request_stop(self) -> None:
        self._stop_event.set()

    async def run_forever(self) -> None:
        await self._stop_event.wait()


# ============================================================================
# COMMANDS
# ============================================================================

def _install_signal_handlers(app: HostWatchApplication) -> None:
    """Stop gracefully on SIGTERM / SIGINT."""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, app.request_stop)
        except (NotImplementedError, RuntimeError):
            # Not supported on Windows; KeyboardInterrupt still works
            pass


async def cmd_serve(settings: Settings) -> int:
    app = HostWatchApplication(settings)
    _install_signal_handlers(app)
    try:
        await app.startup()
        await app.run_forever()
    finally:
        await app.shutdown()
    return 0


async def cmd_sweep(settings: Settings) -> int:
    app = HostWatchApplication(settings)
    try:
        await app.init_core()
        report = await app.sweep_evaluator.run(ScheduledEvent(source="cli"))
    finally:
        await app.shutdown()
    return 0 if report.ok else 1


async def cmd_init_db(settings: Settings) -> int:
    db_manager = DatabaseManager(settings.database)
    try:
        await db_manager.initialize()
    finally:
        await db_manager.close()
    return 0


async def cmd_add_host(settings: Settings, hostname: str, host_key: Optional[str]) -> int:
    db_manager = DatabaseManager(settings.database)
    try:
        await db_manager.initialize()
        record = HostRecord(
            host_key=host_key or StringHelper.generate_host_key(),
            hostname=hostname,
        )
        await HostRepository(db_manager).add(record)
    finally:
        await db_manager.close()

    print(record.host_key)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hostwatch",
        description="Host check-in monitor with offline/recovery alerts",
    )
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("serve", help="run the check-in server and scheduled sweeps")
    sub.add_parser("sweep", help="run a single sweep cycle")
    sub.add_parser("init-db", help="create database tables")

    add_host = sub.add_parser("add-host", help="provision a monitored host")
    add_host.add_argument("hostname", help="display name used in alerts")
    add_host.add_argument("--key", dest="host_key", help="host key (generated when omitted)")

    return parser


async def run_command(args: argparse.Namespace, settings: Settings) -> int:
    command = args.command or "serve"
    if command == "serve":
        return await cmd_serve(settings)
    if command == "sweep":
        return await cmd_sweep(settings)
    if command == "init-db":
        return await cmd_init_db(settings)
    if command == "add-host":
        return await cmd_add_host(settings, args.hostname, args.host_key)
    raise ValueError(f"Unknown command: {command}")


# ============================================================================
# SCRIPT ENTRY POINT
# ============================================================================

def load_settings() -> Settings:
    """
    Load and validate settings.

    Raises:
        ConfigurationError: The environment holds invalid values
    """
    try:
        return get_settings()
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise ConfigurationError(
            f"Invalid configuration: {fields or e}",
            config_key=fields or None,
            cause=e,
        ) from e


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings()
    except ConfigurationError as e:
        logger.error(f"Fatal error: {e.log_format()}")
        return 1

    setup_logging(settings.logging)

    try:
        return asyncio.run(run_command(args, settings))
    except KeyboardInterrupt:
        return 0
    except HostWatchException as e:
        logger.error(f"Fatal error: {e.log_format()}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
