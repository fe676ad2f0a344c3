"""
Signal Strength Sources

The radio reports the RSSI of the last received frame. The activator reads
that raw value and applies its own calibration offset.
"""

import random
from abc import ABC, abstractmethod


class SignalSource(ABC):
    """Base class for signal strength readers"""

    @abstractmethod
    def last_value(self) -> int:
        """Raw RSSI of the last received frame"""


class StaticSignal(SignalSource):
    """Always reports the same raw value"""

    def __init__(self, value: int = -45):
        self.value = value

    def last_value(self) -> int:
        return self.value


class SimulatedRadioSignal(SignalSource):
    """
    Bounded random walk of raw RSSI.

    Each read moves the value by at most `step` and keeps it within
    [floor, ceiling].
    """

    def __init__(
        self,
        start: int = -45,
        floor: int = -90,
        ceiling: int = -20,
        step: int = 3,
        seed: int | None = None,
    ):
        if not floor <= start <= ceiling:
            raise ValueError("start must lie between floor and ceiling")

        self.floor = floor
        self.ceiling = ceiling
        self.step = step
        self._value = start
        self._random = random.Random(seed)

    def last_value(self) -> int:
        self._value += self._random.randint(-self.step, self.step)
        self._value = max(self.floor, min(self.ceiling, self._value))
        return self._value
