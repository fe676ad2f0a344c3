from __future__ import annotations

import pytest

from activator.common.config import ControlSettings
from activator.services.control import algorithm
from activator.services.control.loop import ControlLoop
from activator.services.device.actuator import ActuatorState

from conftest import fill


def test_inverse_weight() -> None:
    assert algorithm.inverse_weight(50) == pytest.approx(3.0)
    assert algorithm.inverse_weight(-50) == pytest.approx(-1.0)
    assert algorithm.inverse_weight(0) == 1.0


def test_linear_weight() -> None:
    assert algorithm.linear_weight(50) == pytest.approx(1.5)
    assert algorithm.linear_weight(200) == pytest.approx(0.0)


def test_unknown_weighting_falls_back() -> None:
    assert algorithm.get_weighting("nope") is algorithm.inverse_weight
    assert algorithm.get_weighting("linear") is algorithm.linear_weight


def test_positive_delta_sets_intensity_and_frequency() -> None:
    settings = ControlSettings()
    output = algorithm.calculate(mean=28, threshold=25, weight=1.0, settings=settings)

    assert output.delta == 3
    assert output.intensity == 3
    assert output.frequency_hz == 3.0
    assert output.period_s == pytest.approx(1 / 3)


def test_intensity_saturates() -> None:
    settings = ControlSettings(max_intensity=7, max_frequency_hz=20.0)
    output = algorithm.calculate(mean=40, threshold=25, weight=2.0, settings=settings)

    assert output.delta == 30
    assert output.intensity == 7
    assert output.frequency_hz == 20.0


def test_non_positive_delta_resets_to_idle() -> None:
    settings = ControlSettings(idle_frequency_hz=5.0, base_period_s=1.0)
    output = algorithm.calculate(mean=23, threshold=25, weight=1.5, settings=settings)

    assert output.delta == -3
    assert output.intensity == 0
    assert output.frequency_hz == 5.0
    assert output.period_s == pytest.approx(0.2)


def test_delta_truncates_toward_zero() -> None:
    output = algorithm.calculate(mean=26, threshold=25, weight=0.9, settings=ControlSettings())
    assert output.delta == 0
    assert output.intensity == 0


def test_tick_without_data_is_skipped(control, actuator) -> None:
    period = control.tick()

    assert period == pytest.approx(0.2)
    assert actuator.calls == []
    assert control.state.skipped_ticks == 1
    assert control.actuator_state is ActuatorState.OFF


def test_actuator_flips_every_tick(control, context, actuator) -> None:
    fill(context.history, [30, 30, 30, 30])

    control.tick()
    control.tick()
    control.tick()

    assert actuator.calls == [
        (ActuatorState.ON, 5),
        (ActuatorState.OFF, 0),
        (ActuatorState.ON, 5),
    ]


def test_actuator_flips_even_when_idle(control, context, actuator) -> None:
    fill(context.history, [20, 20])

    control.tick()
    control.tick()

    assert actuator.calls == [(ActuatorState.ON, 0), (ActuatorState.OFF, 0)]


def test_end_to_end_below_threshold(context, actuator, control_settings) -> None:
    fill(context.history, [20, 22, 24, 26])
    context.update_signal(45)
    loop = ControlLoop(context, actuator, control_settings, weighting="inverse")

    period = loop.tick()

    assert context.history.mean() == 23
    assert loop.state.delta <= 0
    assert loop.state.intensity == 0
    assert period == pytest.approx(control_settings.base_period_s / control_settings.idle_frequency_hz)


def test_period_follows_deviation(control, context) -> None:
    fill(context.history, [27, 27])
    fast = control.tick()

    context.history.clear()
    fill(context.history, [35, 35])
    faster = control.tick()

    assert fast == pytest.approx(0.5)
    assert faster == pytest.approx(0.1)


def test_threshold_change_takes_effect_next_tick(control, context) -> None:
    fill(context.history, [30])
    control.tick()
    assert control.state.intensity == 5

    context.threshold.set("29")
    control.tick()
    control.tick()
    assert control.state.intensity == 1
    assert control.state.threshold == 29


def test_injected_weighting_callable(context, actuator, control_settings) -> None:
    fill(context.history, [26])
    context.update_signal(10)
    loop = ControlLoop(context, actuator, control_settings, weighting=lambda signal: signal / 2)

    loop.tick()

    assert loop.state.weight == 5.0
    assert loop.state.intensity == 5


def test_missing_signal_uses_unit_weight(context, actuator, control_settings) -> None:
    fill(context.history, [28])
    loop = ControlLoop(context, actuator, control_settings, weighting="inverse")

    loop.tick()

    assert loop.state.signal is None
    assert loop.state.intensity == 3
