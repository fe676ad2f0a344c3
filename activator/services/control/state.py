"""
Control State Dataclasses

Data structures shared by the observation session and the control loop.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from activator.services.observe.history import HistoryBuffer

from .threshold import ThresholdStore


@dataclass
class ActivatorContext:
    """Everything the notification path writes and the control loop reads"""
    history: HistoryBuffer = field(default_factory=HistoryBuffer)
    threshold: ThresholdStore = field(default_factory=ThresholdStore)
    signal: int | None = None  # calibrated RSSI, stale between notifications
    signal_updated_at: datetime | None = None

    def update_signal(self, value: int) -> None:
        self.signal = value
        self.signal_updated_at = datetime.now(timezone.utc)

    def to_dict(self) -> dict[str, Any]:
        return {
            "history": self.history.to_dict(),
            "threshold": self.threshold.get(),
            "signal": self.signal,
            "signal_updated_at": (
                self.signal_updated_at.isoformat() if self.signal_updated_at else None
            ),
        }


@dataclass
class ControlOutput:
    """Output from the control law"""
    delta: int = 0  # unclamped weighted deviation
    intensity: int = 0  # 0..max_intensity
    frequency_hz: float = 5.0
    period_s: float = 0.2


@dataclass
class ControlState:
    """Control loop state after the latest tick"""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # Inputs
    mean: int | None = None
    threshold: int = 0
    signal: int | None = None
    weight: float | None = None

    # Output
    delta: int = 0
    intensity: int = 0
    frequency_hz: float = 5.0
    period_s: float = 0.2
    actuator_state: str = "off"

    # Status
    tick_count: int = 0
    skipped_ticks: int = 0
    last_skip_reason: str | None = None
    execution_time_ms: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging"""
        return {
            "timestamp": self.timestamp.isoformat(),
            "mean": self.mean,
            "threshold": self.threshold,
            "signal": self.signal,
            "weight": self.weight,
            "delta": self.delta,
            "intensity": self.intensity,
            "frequency_hz": self.frequency_hz,
            "period_s": self.period_s,
            "actuator_state": self.actuator_state,
            "tick_count": self.tick_count,
            "skipped_ticks": self.skipped_ticks,
            "last_skip_reason": self.last_skip_reason,
            "execution_time_ms": self.execution_time_ms,
        }
