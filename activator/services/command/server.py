"""
Command Server

HTTP endpoint for remote control of the activator:

    POST /treshold         set the threshold (variable "treshold" or "threshold")
    POST /threshold        same as above
    GET  /threshold        current threshold
    POST /observe/toggle   start/stop observing the peer
    GET  /state            full node snapshot
    GET  /health           liveness

Mutating requests are handed to the service's dispatcher and answered once
it has processed them.
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from aiohttp import web

from activator.common.exceptions import InvalidThresholdInput
from activator.common.logging_setup import get_service_logger

if TYPE_CHECKING:
    from activator.service import ActivatorService

logger = get_service_logger("command")

THRESHOLD_VARIABLES = ("treshold", "threshold")


class CommandServer:
    """aiohttp front end for an ActivatorService"""

    def __init__(self, service: "ActivatorService", host: str = "127.0.0.1", port: int = 5684):
        self.service = service
        self.host = host
        self.port = port

        self._app: web.Application | None = None
        self._runner: web.AppRunner | None = None
        self._start_time = datetime.now(timezone.utc)

    def build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_post("/treshold", self._set_threshold_handler)
        app.router.add_post("/threshold", self._set_threshold_handler)
        app.router.add_get("/threshold", self._get_threshold_handler)
        app.router.add_post("/observe/toggle", self._toggle_handler)
        app.router.add_get("/state", self._state_handler)
        app.router.add_get("/health", self._health_handler)
        return app

    async def start(self) -> None:
        """Start the HTTP server"""
        self._app = self.build_app()
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()

        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()

        logger.info(f"Command server started on {self.host}:{self.port}")

    async def stop(self) -> None:
        """Stop the HTTP server"""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            logger.info("Command server stopped")

    async def _read_threshold_variable(self, request: web.Request) -> str | None:
        if request.content_type == "application/json":
            try:
                data = await request.json()
            except ValueError:
                return None
            if not isinstance(data, dict):
                return None
        else:
            data = await request.post()

        for name in THRESHOLD_VARIABLES:
            value = data.get(name, request.query.get(name))
            if value is not None:
                return str(value)
        return None

    async def _set_threshold_handler(self, request: web.Request) -> web.Response:
        raw = await self._read_threshold_variable(request)
        if raw is None:
            return web.json_response(
                {"error": "missing 'treshold' variable"},
                status=400,
            )

        try:
            value = await self.service.submit("set_threshold", raw)
        except InvalidThresholdInput as e:
            return web.json_response(
                {"error": e.message, "threshold": self.service.context.threshold.get()},
                status=400,
            )

        return web.json_response({"threshold": value})

    async def _get_threshold_handler(self, request: web.Request) -> web.Response:
        value = await self.service.submit("get_threshold")
        return web.json_response({"threshold": value})

    async def _toggle_handler(self, request: web.Request) -> web.Response:
        state = await self.service.submit("toggle_observation")
        return web.json_response({"state": state})

    async def _state_handler(self, request: web.Request) -> web.Response:
        snapshot = await self.service.submit("snapshot")
        return web.json_response(snapshot)

    async def _health_handler(self, request: web.Request) -> web.Response:
        uptime = (datetime.now(timezone.utc) - self._start_time).total_seconds()

        return web.json_response({
            "status": "healthy" if self.service.running else "unhealthy",
            "service": "fan-activator",
            "node_id": self.service.config.node_id,
            "uptime": int(uptime),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "observation": self.service.session.state.value,
        })
