#!/usr/bin/env python3
"""
Virtual Temperature Peer

Simulates the node that publishes the observable temperature resource.
This is used for running the activator without a second physical node.

Resource:
- GET /temperature/push -> { "temperature":21, "time":2412 }
  Content-Type: application/json
  Cache-Control: max-age=<publication period>

Usage:
    fan-activator-peer                      # port 5683, 5s period
    fan-activator-peer --port 8000 --period 2
"""

import argparse
import asyncio
import random
import time
from dataclasses import dataclass

from aiohttp import web

from activator.common.logging_setup import get_service_logger, setup_logging
from activator.services.observe.parser import format_reading

logger = get_service_logger("simulator.peer")

RESOURCE_PATH = "/temperature/push"


@dataclass
class ThermometerState:
    """
    Holds the simulated ambient temperature.
    """
    ambient_c: float = 24.0
    drift_c: float = 0.5  # max change per read
    floor_c: float = 10.0
    ceiling_c: float = 40.0
    correction_c: float = 0.0  # subtracted from the raw reading


class VirtualThermometer:
    """
    Simulates a digital temperature sensor with a slow random walk.
    """

    def __init__(self, state: ThermometerState | None = None, seed: int | None = None):
        self.state = state or ThermometerState()
        self._random = random.Random(seed)

    def set_ambient(self, value_c: float) -> None:
        """Pin the ambient temperature (e.g. from a test scenario)"""
        self.state.ambient_c = value_c

    def read_c(self) -> int:
        """Corrected reading, truncated like the sensor's 8-bit register"""
        s = self.state
        s.ambient_c += self._random.uniform(-s.drift_c, s.drift_c)
        s.ambient_c = max(s.floor_c, min(s.ceiling_c, s.ambient_c))

        value = int(s.ambient_c - s.correction_c)
        return max(-128, min(127, value))


class TemperaturePeer:
    """HTTP rendition of the peer's observable temperature resource"""

    def __init__(
        self,
        thermometer: VirtualThermometer | None = None,
        period_s: float = 5.0,
        observable: bool = True,
    ):
        self.thermometer = thermometer or VirtualThermometer()
        self.period_s = period_s
        self.observable = observable
        self._boot = time.monotonic()
        self.request_count = 0

    def uptime_seconds(self) -> int:
        return int(time.monotonic() - self._boot)

    def payload(self) -> str:
        return format_reading(self.thermometer.read_c(), self.uptime_seconds())

    def build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get(RESOURCE_PATH, self._temperature_handler)
        app.router.add_get("/health", self._health_handler)
        return app

    async def _temperature_handler(self, request: web.Request) -> web.Response:
        self.request_count += 1
        if not self.observable:
            return web.Response(status=405, text="observe not supported")

        body = self.payload()
        logger.debug(f"Publishing {body}")
        return web.Response(
            text=body,
            content_type="application/json",
            headers={"Cache-Control": f"max-age={self.period_s:g}"},
        )

    async def _health_handler(self, request: web.Request) -> web.Response:
        return web.json_response({
            "status": "healthy",
            "service": "temperature-peer",
            "uptime": self.uptime_seconds(),
            "requests": self.request_count,
        })


async def run_peer(host: str, port: int, period_s: float, seed: int | None = None) -> None:
    peer = TemperaturePeer(VirtualThermometer(seed=seed), period_s=period_s)

    runner = web.AppRunner(peer.build_app())
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()

    logger.info(f"Temperature peer serving http://{host}:{port}{RESOURCE_PATH} every {period_s:g}s")

    try:
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()


def main() -> None:
    parser = argparse.ArgumentParser(description="Virtual temperature peer")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    parser.add_argument("--port", "-p", type=int, default=5683, help="Port (default: 5683)")
    parser.add_argument(
        "--period", type=float, default=5.0,
        help="Publication period in seconds, sent as max-age (default: 5)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed for the thermometer")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    setup_logging(
        "simulator.peer",
        log_level="DEBUG" if args.verbose else "INFO",
        json_format=not args.verbose,
    )

    try:
        asyncio.run(run_peer(args.host, args.port, args.period, args.seed))
    except KeyboardInterrupt:
        print("\nStopped by user")


if __name__ == "__main__":
    main()
