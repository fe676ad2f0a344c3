"""
Observation Session

Owns the subscription to the peer's temperature resource and routes every
notification it receives:

    DATA      -> parse -> history buffer -> refresh signal sample
    ACCEPTED  -> nothing to store
    REJECTED  \\
    ERROR      > drop the handle, back to UNSUBSCRIBED (no automatic retry)
    TIMEOUT   /
"""

from enum import Enum
from typing import TYPE_CHECKING, Callable

from activator.common.exceptions import MalformedPayload, SubscriptionTerminal
from activator.common.logging_setup import get_service_logger, log_notification

from .parser import TemperatureRecord, parse_reading
from .transport import (
    Notification,
    NotificationKind,
    NotificationTransport,
    SubscriptionHandle,
)

if TYPE_CHECKING:
    from activator.services.control.state import ActivatorContext
    from activator.services.device.signal import SignalSource

logger = get_service_logger("observe")


class SessionState(str, Enum):
    UNSUBSCRIBED = "unsubscribed"
    SUBSCRIBED = "subscribed"


class ObservationSession:
    """
    Subscribe/unsubscribe lifecycle for one remote resource.

    The session is the only owner of its SubscriptionHandle: unsubscribe()
    and terminal notifications both consume it, and notifications for a
    handle that is no longer current are ignored.

    By default notifications are handled as soon as the transport delivers
    them. Pass `deliver` to route them elsewhere first (e.g. onto the
    service's event queue); whatever receives them must eventually call
    handle_notification().
    """

    def __init__(
        self,
        transport: NotificationTransport,
        context: "ActivatorContext",
        signal_source: "SignalSource",
        calibration_offset: int = 55,
        deliver: Callable[[SubscriptionHandle, Notification], None] | None = None,
    ):
        self.transport = transport
        self.context = context
        self.signal_source = signal_source
        self.calibration_offset = calibration_offset

        self._deliver = deliver or self.handle_notification
        self._handle: SubscriptionHandle | None = None

        # Diagnostics
        self.accepted = False
        self.last_failure: SubscriptionTerminal | None = None
        self.notification_count = 0
        self.malformed_count = 0

    @property
    def state(self) -> SessionState:
        return SessionState.SUBSCRIBED if self._handle else SessionState.UNSUBSCRIBED

    @property
    def handle(self) -> SubscriptionHandle | None:
        return self._handle

    def subscribe(self, address: str, port: int, path: str) -> bool:
        """
        Start observing address:port/path.

        Returns False (and does nothing) when already subscribed.
        """
        if self._handle is not None:
            logger.info(f"Already observing {self._handle.url}, subscribe ignored")
            return False

        logger.info(f"Starting observation of {address}:{port}/{path}")
        self.accepted = False
        self._handle = self.transport.subscribe(address, port, path, self._deliver)
        return True

    def unsubscribe(self) -> bool:
        """
        Stop observing. Returns False when there was nothing to stop.
        """
        handle, self._handle = self._handle, None
        if handle is None:
            return False

        logger.info(f"Stopping observation of {handle.url}")
        self.accepted = False
        self.transport.unsubscribe(handle)
        return True

    def toggle(self, address: str, port: int, path: str) -> SessionState:
        """Unsubscribe when subscribed, subscribe otherwise"""
        if self._handle is not None:
            self.unsubscribe()
        else:
            self.subscribe(address, port, path)
        return self.state

    def handle_notification(self, handle: SubscriptionHandle, notification: Notification) -> None:
        if handle is not self._handle:
            logger.debug(
                f"Dropping {notification.kind.value} for stale registration {handle.token}"
            )
            return

        self.notification_count += 1
        log_notification(logger, notification.kind.value, handle.url, notification.payload)

        if notification.kind is NotificationKind.DATA:
            self._store(notification.payload)
        elif notification.kind is NotificationKind.ACCEPTED:
            self.accepted = True
        elif notification.kind.terminal:
            self._handle = None
            self.accepted = False
            handle.active = False
            self.last_failure = SubscriptionTerminal(
                notification.kind.value,
                handle.url,
                notification.payload.decode("ascii", errors="replace"),
            )
            logger.warning(
                f"{self.last_failure.message}; waiting for an explicit re-subscribe",
                extra={"kind": notification.kind.value, "token": handle.token},
            )

    def _store(self, payload: bytes) -> TemperatureRecord | None:
        try:
            record = parse_reading(payload)
        except MalformedPayload as e:
            self.malformed_count += 1
            logger.warning(f"Dropping notification: {e.message}", extra={"payload": e.raw})
            return None

        self.context.history.push(record)
        self.context.update_signal(self.signal_source.last_value() + self.calibration_offset)

        logger.debug(
            f"Read temp={record.temperature}, time={record.timestamp}, rssi={self.context.signal}",
            extra={"temperature": record.temperature, "time": record.timestamp},
        )
        return record

    def to_dict(self) -> dict:
        return {
            "state": self.state.value,
            "handle": self._handle.to_dict() if self._handle else None,
            "accepted": self.accepted,
            "notification_count": self.notification_count,
            "malformed_count": self.malformed_count,
            "last_failure": self.last_failure.message if self.last_failure else None,
        }
