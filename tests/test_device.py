"""
Tests for the LED actuator and signal sources.
"""

from __future__ import annotations

import pytest

from activator.services.device.actuator import ActuatorState, LedActuator
from activator.services.device.signal import SimulatedRadioSignal, StaticSignal


class TestLedActuator:
    def test_starts_off(self):
        actuator = LedActuator()

        assert actuator.to_dict() == {"state": "off", "intensity": 0, "lit": []}

    @pytest.mark.parametrize("intensity,lit", [
        (0, ()),
        (1, ("green",)),
        (2, ("blue",)),
        (5, ("green", "red")),
        (7, ("green", "blue", "red")),
    ])
    def test_intensity_bits_select_leds(self, intensity, lit):
        actuator = LedActuator()

        actuator.set_state(ActuatorState.ON, intensity)

        assert actuator.lit == lit

    def test_off_clears_leds(self):
        actuator = LedActuator()
        actuator.set_state(ActuatorState.ON, 7)

        actuator.set_state(ActuatorState.OFF, 7)

        assert actuator.intensity == 0
        assert actuator.lit == ()
        assert len(actuator.history) == 2

    def test_out_of_range_intensity(self):
        actuator = LedActuator()

        with pytest.raises(ValueError):
            actuator.set_state(ActuatorState.ON, 8)
        assert actuator.state is ActuatorState.OFF

    def test_flipped(self):
        assert ActuatorState.ON.flipped() is ActuatorState.OFF
        assert ActuatorState.OFF.flipped() is ActuatorState.ON


class TestSignalSources:
    def test_static(self):
        assert StaticSignal(-60).last_value() == -60

    def test_simulated_stays_in_band(self):
        signal = SimulatedRadioSignal(start=-45, floor=-50, ceiling=-40, step=3, seed=1)

        values = [signal.last_value() for _ in range(100)]

        assert all(-50 <= v <= -40 for v in values)

    def test_simulated_start_out_of_band(self):
        with pytest.raises(ValueError):
            SimulatedRadioSignal(start=0)
