"""
Observe Service - Remote Temperature Feed

Responsibilities:
- Subscribe to the peer's temperature resource
- Classify inbound notifications
- Parse readings into the rolling history
- Refresh the signal strength sample
"""

from .history import HistoryBuffer
from .parser import TemperatureRecord, format_reading, parse_reading
from .session import ObservationSession, SessionState
from .transport import (
    HttpObserveTransport,
    LoopbackTransport,
    Notification,
    NotificationKind,
    NotificationTransport,
    SubscriptionHandle,
)

__all__ = [
    "HistoryBuffer",
    "TemperatureRecord",
    "format_reading",
    "parse_reading",
    "ObservationSession",
    "SessionState",
    "HttpObserveTransport",
    "LoopbackTransport",
    "Notification",
    "NotificationKind",
    "NotificationTransport",
    "SubscriptionHandle",
]
