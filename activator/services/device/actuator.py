"""
Fan Actuator

The fan is rendered on the node's LEDs: every control tick switches the
bank on or off, and when switching on, the 3-bit intensity selects which
LEDs light up (green=1, blue=2, red=4).
"""

from abc import ABC, abstractmethod
from collections import deque
from datetime import datetime, timezone
from enum import Enum

from activator.common.logging_setup import get_service_logger

logger = get_service_logger("device.actuator")

LED_MASKS = (
    (1, "green"),
    (2, "blue"),
    (4, "red"),
)
MAX_INTENSITY = 7


class ActuatorState(str, Enum):
    ON = "on"
    OFF = "off"

    def flipped(self) -> "ActuatorState":
        return ActuatorState.OFF if self is ActuatorState.ON else ActuatorState.ON


class Actuator(ABC):
    """Base class for actuators"""

    @abstractmethod
    def set_state(self, state: ActuatorState, intensity: int = 0) -> None:
        """Switch on with the given intensity (0-7), or off"""


class LedActuator(Actuator):
    """Simulated LED bank"""

    def __init__(self, history_size: int = 32):
        self.state = ActuatorState.OFF
        self.intensity = 0
        self.lit: tuple[str, ...] = ()
        self.history: deque[tuple[datetime, ActuatorState, int]] = deque(maxlen=history_size)

    def set_state(self, state: ActuatorState, intensity: int = 0) -> None:
        if not 0 <= intensity <= MAX_INTENSITY:
            raise ValueError(f"intensity out of range: {intensity}")

        self.state = state
        self.intensity = intensity if state is ActuatorState.ON else 0
        self.lit = tuple(name for mask, name in LED_MASKS if self.intensity & mask)
        self.history.append((datetime.now(timezone.utc), state, self.intensity))

        logger.debug(
            f"LEDs {state.value} ({', '.join(self.lit) or 'none'})",
            extra={"actuator_state": state.value, "intensity": self.intensity},
        )

    def to_dict(self) -> dict:
        return {
            "state": self.state.value,
            "intensity": self.intensity,
            "lit": list(self.lit),
        }
