"""
Fan Control Loop

One tick:
1. Mean of the temperature history (skip the tick when empty)
2. Threshold and last known signal sample
3. Control law -> intensity and next period
4. Flip the actuator; intensity is only applied when switching on
5. Return the next period for the scheduler
"""

import time
from datetime import datetime, timezone

from activator.common.config import ControlSettings
from activator.common.exceptions import NoDataError
from activator.common.logging_setup import get_service_logger, log_control_tick
from activator.services.device.actuator import Actuator, ActuatorState

from .algorithm import WeightFunction, calculate, get_weighting, unity_weight
from .state import ActivatorContext, ControlState

logger = get_service_logger("control")


class ControlLoop:
    """
    Adaptive-rate fan controller.

    The actuator toggles on every tick that has data; the deviation from the
    threshold only sets how bright the "on" half is and how fast the next
    tick comes.
    """

    def __init__(
        self,
        context: ActivatorContext,
        actuator: Actuator,
        settings: ControlSettings | None = None,
        weighting: str | WeightFunction | None = None,
    ):
        self.context = context
        self.actuator = actuator
        self.settings = settings or ControlSettings()

        weighting = weighting or self.settings.weighting
        if callable(weighting):
            self.weighting = weighting
        else:
            self.weighting = get_weighting(weighting)

        self.actuator_state = ActuatorState.OFF
        self._state = ControlState(
            threshold=context.threshold.get(),
            frequency_hz=self.settings.idle_frequency_hz,
            period_s=self.settings.base_period_s / self.settings.idle_frequency_hz,
        )

    @property
    def period(self) -> float:
        """Delay until the next tick in seconds"""
        return self._state.period_s

    @property
    def state(self) -> ControlState:
        return self._state

    def tick(self) -> float:
        """Run one control iteration and return the next period"""
        start = time.monotonic()
        state = self._state
        state.timestamp = datetime.now(timezone.utc)

        try:
            mean = self.context.history.mean()
        except NoDataError as e:
            state.skipped_ticks += 1
            state.last_skip_reason = e.message
            logger.debug(f"Skipping tick: {e.message}")
            return state.period_s

        threshold = self.context.threshold.get()
        signal = self.context.signal
        weight = unity_weight(0) if signal is None else self.weighting(signal)

        output = calculate(mean, threshold, weight, self.settings)

        self.actuator_state = self.actuator_state.flipped()
        if self.actuator_state is ActuatorState.ON:
            self.actuator.set_state(ActuatorState.ON, output.intensity)
        else:
            self.actuator.set_state(ActuatorState.OFF, 0)

        state.mean = mean
        state.threshold = threshold
        state.signal = signal
        state.weight = round(weight, 4)
        state.delta = output.delta
        state.intensity = output.intensity
        state.frequency_hz = output.frequency_hz
        state.period_s = output.period_s
        state.actuator_state = self.actuator_state.value
        state.tick_count += 1
        state.last_skip_reason = None
        state.execution_time_ms = (time.monotonic() - start) * 1000

        log_control_tick(
            logger,
            frequency_hz=output.frequency_hz,
            intensity=output.intensity,
            threshold=threshold,
            mean=mean,
            signal=signal,
            actuator_state=self.actuator_state.value,
        )

        return output.period_s
