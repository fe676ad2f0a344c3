"""
Control Law - Pluggable Signal Weighting

delta     = trunc((mean - threshold) * weight(signal))
intensity = clamp(delta, 0, max_intensity)
frequency = min(delta, max_frequency)  if delta > 0
            idle_frequency             otherwise (intensity forced to 0)
period    = base_period / frequency

The weighting turns link quality into a gain. New weightings can be added
by writing a function `(signal: int) -> float` and registering it in
WEIGHTING_FUNCTIONS.
"""

import math
from typing import Callable

from activator.common.config import ControlSettings
from activator.common.logging_setup import get_service_logger

from .state import ControlOutput

logger = get_service_logger("control.algorithm")

WeightFunction = Callable[[int], float]

DEFAULT_WEIGHTING = "inverse"


def inverse_weight(signal: int) -> float:
    """1 + 100/signal; a zero signal carries no extra gain"""
    if signal == 0:
        return 1.0
    return 1.0 + 100.0 / signal


def linear_weight(signal: int) -> float:
    """2 - signal/100"""
    return 2.0 - signal / 100.0


def unity_weight(signal: int) -> float:
    return 1.0


# Weighting registry - add new weightings here
WEIGHTING_FUNCTIONS: dict[str, WeightFunction] = {
    "inverse": inverse_weight,
    "linear": linear_weight,
    "unity": unity_weight,
}


def get_weighting(name: str) -> WeightFunction:
    """Get weighting function by name"""
    if name not in WEIGHTING_FUNCTIONS:
        logger.warning(f"Unknown weighting: {name}, using {DEFAULT_WEIGHTING}")
        return WEIGHTING_FUNCTIONS[DEFAULT_WEIGHTING]
    return WEIGHTING_FUNCTIONS[name]


def calculate(
    mean: int,
    threshold: int,
    weight: float,
    settings: ControlSettings,
) -> ControlOutput:
    """Apply the control law to one set of inputs"""
    raw = (mean - threshold) * weight
    if math.isnan(raw) or math.isinf(raw):
        logger.warning(f"Non-finite delta (weight={weight}), treating as 0")
        raw = 0.0
    delta = int(raw)  # truncates toward zero

    if delta > 0:
        intensity = min(delta, settings.max_intensity)
        frequency_hz = min(float(delta), settings.max_frequency_hz)
    else:
        intensity = 0
        frequency_hz = settings.idle_frequency_hz

    return ControlOutput(
        delta=delta,
        intensity=intensity,
        frequency_hz=frequency_hz,
        period_s=settings.base_period_s / frequency_hz,
    )
