"""
============================================================================
HOSTWATCH - CHECK-IN SERVER
============================================================================
aiohttp server that monitored hosts call to report in.

    ANY /?hostkey=KEY   → check-in
                          200 empty body on success
                          400 missing key
                          401 unknown key
                          500 store failure
    GET /health         → 200 JSON about this service
    GET /__scheduled    → run one sweep now (local development only)

Hosts usually call the root URL from cron a little before each sweep, e.g.

    0-57/3 * * * * curl -m 10 "https://monitor.example.com/?hostkey=KEY"
============================================================================
"""

import time
from typing import Optional

from aiohttp import web

from config.settings import WebSettings
from exceptions import ClientError, HostNotFoundError, InitializationError, StoreError
from monitoring.checkin import CheckinHandler
from monitoring.sweep import ScheduledEvent, SweepEvaluator
from utils.helpers import TimeHelper
from utils.logger import get_logger


logger = get_logger("Server")


class CheckinServer:
    """
    HTTP front end for the check-in handler.

    Attributes
    ----------
    _app : aiohttp.web.Application
    _runner : aiohttp.web.AppRunner
    _site : aiohttp.web.TCPSite
    _start_time : float          — epoch seconds when the server started
    _request_count : int         — total requests served
    """

    def __init__(
        self,
        settings: WebSettings,
        checkin_handler: CheckinHandler,
        sweep_evaluator: Optional[SweepEvaluator] = None,
        local_dev: bool = False,
        version: str = "1.0.0",
    ):
        self.settings = settings
        self.checkin_handler = checkin_handler
        self.sweep_evaluator = sweep_evaluator
        self.local_dev = local_dev
        self.version = version

        self._app = self.create_app()
        self._runner: Optional[web.AppRunner] = None
        self._site: Optional[web.TCPSite] = None
        self._start_time: float = time.time()
        self._request_count: int = 0
        self._checkin_count: int = 0

    def create_app(self) -> web.Application:
        """Build the aiohttp application with all routes registered."""
        app = web.Application()
        app.router.add_get("/health", self._handle_health)
        if self.local_dev and self.sweep_evaluator is not None:
            app.router.add_get("/__scheduled", self._handle_scheduled)
        app.router.add_route("*", "/", self._handle_checkin)
        return app

    @property
    def app(self) -> web.Application:
        return self._app

    async def start(self) -> None:
        """
        Bind and start serving.

        Raises:
            InitializationError: The address could not be bound
        """
        self._start_time = time.time()
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, self.settings.host, self.settings.port)
        try:
            await self._site.start()
        except OSError as e:
            await self._runner.cleanup()
            self._runner = None
            self._site = None
            raise InitializationError(
                f"Cannot listen on {self.settings.host}:{self.settings.port}: {e}",
                component="server",
                cause=e,
            ) from e
        logger.info(f"✓ CheckinServer listening on {self.settings.host}:{self.settings.port}")

    async def stop(self) -> None:
        """Gracefully shut down the server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            self._site = None
        logger.info("✓ CheckinServer stopped")

    # ------------------------------------------------------------------
    # ROUTE HANDLERS
    # ------------------------------------------------------------------

    async def _handle_checkin(self, request: web.Request) -> web.Response:
        """ANY / — record a check-in for ``?hostkey=``."""
        self._request_count += 1
        host_key = request.query.get("hostkey")

        try:
            await self.checkin_handler.handle(host_key)
        except ClientError as e:
            logger.debug(f"Bad check-in request from {request.remote}: {e.message}")
            return web.Response(status=e.http_status)
        except HostNotFoundError as e:
            logger.warning(f"Check-in from {request.remote} with unknown host key")
            return web.Response(status=e.http_status)
        except StoreError as e:
            logger.error(f"Database failed to write updates: {e.log_format()}")
            return web.Response(status=e.http_status)

        self._checkin_count += 1
        return web.Response(status=200)

    async def _handle_health(self, request: web.Request) -> web.Response:
        """GET /health — service health JSON."""
        self._request_count += 1
        uptime_seconds = int(time.time() - self._start_time)

        health = {
            "status": "healthy",
            "uptime_seconds": uptime_seconds,
            "uptime_human": TimeHelper.humanize_duration(uptime_seconds) or "0 seconds",
            "requests_served": self._request_count,
            "checkins_recorded": self._checkin_count,
            "policy": self.checkin_handler.config.policy.describe(),
            "version": self.version,
        }
        return web.json_response(health, status=200)

    async def _handle_scheduled(self, request: web.Request) -> web.Response:
        """GET /__scheduled — trigger a sweep by hand during development."""
        self._request_count += 1
        report = await self.sweep_evaluator.run(ScheduledEvent(source="http"))
        return web.json_response(report.to_dict(), status=200 if report.ok else 500)
