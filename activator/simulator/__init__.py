"""
Simulator - Virtual peer node for running the activator without hardware.
"""

from .peer import TemperaturePeer, ThermometerState, VirtualThermometer

__all__ = ["TemperaturePeer", "ThermometerState", "VirtualThermometer"]
