"""
Tests for the virtual temperature peer.
"""

from __future__ import annotations

import asyncio

from aiohttp.test_utils import TestClient, TestServer

from activator.services.observe.parser import parse_reading
from activator.simulator.peer import (
    RESOURCE_PATH,
    TemperaturePeer,
    ThermometerState,
    VirtualThermometer,
)


def _get(peer: TemperaturePeer, path: str):
    async def run():
        client = TestClient(TestServer(peer.build_app()))
        await client.start_server()
        try:
            response = await client.get(path)
            return response.status, response.headers, await response.text()
        finally:
            await client.close()

    return asyncio.run(run())


class TestVirtualThermometer:
    def test_pinned_ambient_without_drift(self):
        thermometer = VirtualThermometer(ThermometerState(drift_c=0.0))
        thermometer.set_ambient(27.9)

        assert thermometer.read_c() == 27

    def test_walk_stays_within_bounds(self):
        thermometer = VirtualThermometer(
            ThermometerState(ambient_c=20.0, drift_c=5.0, floor_c=18.0, ceiling_c=22.0),
            seed=7,
        )

        readings = [thermometer.read_c() for _ in range(200)]

        assert min(readings) >= 18
        assert max(readings) <= 22

    def test_correction_applied(self):
        thermometer = VirtualThermometer(ThermometerState(ambient_c=30.0, drift_c=0.0, correction_c=4.0))

        assert thermometer.read_c() == 26


class TestTemperaturePeer:
    def test_serves_parseable_reading(self):
        thermometer = VirtualThermometer(ThermometerState(ambient_c=23.0, drift_c=0.0))
        peer = TemperaturePeer(thermometer, period_s=2.0)

        status, headers, body = _get(peer, RESOURCE_PATH)

        assert status == 200
        assert headers["Content-Type"].startswith("application/json")
        assert headers["Cache-Control"] == "max-age=2"
        record = parse_reading(body)
        assert record.temperature == 23
        assert record.timestamp >= 0
        assert peer.request_count == 1

    def test_not_observable(self):
        peer = TemperaturePeer(observable=False)

        status, _, _ = _get(peer, RESOURCE_PATH)

        assert status == 405
        assert peer.request_count == 1

    def test_health(self):
        status, _, body = _get(TemperaturePeer(), "/health")

        assert status == 200
        assert '"temperature-peer"' in body
