"""
Shared test fixtures for the fan activator test suite.

Provides:
- A recording actuator and a fixed signal source
- A context / session / control loop wired to a loopback transport
- Helpers for building payloads
"""

from __future__ import annotations

import pytest

from activator.common.config import ActivatorConfig, ControlSettings, load_activator_config
from activator.services.control.loop import ControlLoop
from activator.services.control.state import ActivatorContext
from activator.services.control.threshold import ThresholdStore
from activator.services.device.actuator import Actuator, ActuatorState
from activator.services.device.signal import StaticSignal
from activator.services.observe.history import HistoryBuffer
from activator.services.observe.parser import TemperatureRecord, format_reading
from activator.services.observe.session import ObservationSession
from activator.services.observe.transport import LoopbackTransport

PATH = "temperature/push"


class RecordingActuator(Actuator):
    """Keeps every set_state call"""

    def __init__(self):
        self.calls: list[tuple[ActuatorState, int]] = []

    def set_state(self, state: ActuatorState, intensity: int = 0) -> None:
        self.calls.append((state, intensity))


def payload(temperature: int, timestamp: int = 100) -> bytes:
    return format_reading(temperature, timestamp).encode("ascii")


def fill(history: HistoryBuffer, temperatures: list[int]) -> None:
    for i, t in enumerate(temperatures):
        history.push(TemperatureRecord(temperature=t, timestamp=i))


@pytest.fixture()
def actuator() -> RecordingActuator:
    return RecordingActuator()


@pytest.fixture()
def signal_source() -> StaticSignal:
    # 45 once the default calibration offset (55) is applied
    return StaticSignal(-10)


@pytest.fixture()
def context() -> ActivatorContext:
    return ActivatorContext(history=HistoryBuffer(4), threshold=ThresholdStore(25))


@pytest.fixture()
def loopback() -> LoopbackTransport:
    return LoopbackTransport()


@pytest.fixture()
def session(loopback, context, signal_source) -> ObservationSession:
    return ObservationSession(loopback, context, signal_source, calibration_offset=55)


@pytest.fixture()
def control_settings() -> ControlSettings:
    return ControlSettings(
        default_threshold=25,
        weighting="unity",
        max_intensity=7,
        base_period_s=1.0,
        idle_frequency_hz=5.0,
        max_frequency_hz=20.0,
    )


@pytest.fixture()
def control(context, actuator, control_settings) -> ControlLoop:
    return ControlLoop(context, actuator, control_settings)


@pytest.fixture()
def service_config() -> ActivatorConfig:
    return load_activator_config({
        "observe": {"address": "peer.local", "port": 5683, "path": PATH},
        "history": {"capacity": 4},
        "control": {"default_threshold": 25, "weighting": "unity", "base_period_s": 60.0},
        "signal": {"source": "static", "static_value": -10},
        "command": {"enabled": False},
    })
