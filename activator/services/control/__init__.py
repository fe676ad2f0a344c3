"""
Control Service - Fan Control Law

Responsibilities:
- Hold the temperature threshold (remotely writable)
- Execute the control loop at an adaptive rate
- Weight the deviation by link quality
- Toggle the fan actuator
"""

from .algorithm import WEIGHTING_FUNCTIONS, calculate, get_weighting
from .loop import ControlLoop
from .state import ActivatorContext, ControlOutput, ControlState
from .threshold import ThresholdStore

__all__ = [
    "WEIGHTING_FUNCTIONS",
    "calculate",
    "get_weighting",
    "ControlLoop",
    "ActivatorContext",
    "ControlOutput",
    "ControlState",
    "ThresholdStore",
]
