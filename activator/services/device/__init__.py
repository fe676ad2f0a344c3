"""
Device Service - Local Hardware Collaborators

Responsibilities:
- Drive the fan actuator (rendered on the LEDs)
- Read the radio's signal strength
"""

from .actuator import Actuator, ActuatorState, LedActuator
from .signal import SignalSource, SimulatedRadioSignal, StaticSignal

__all__ = [
    "Actuator",
    "ActuatorState",
    "LedActuator",
    "SignalSource",
    "SimulatedRadioSignal",
    "StaticSignal",
]
