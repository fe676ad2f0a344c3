"""
Custom Exception Classes for the Fan Activator

Hierarchical exception structure for error handling across services.
Nothing here is fatal to the process: every error degrades to
"skip this cycle" or "stay in the previous state".
"""


class ActivatorError(Exception):
    """Base exception for all fan activator errors"""

    def __init__(self, message: str, recoverable: bool = True):
        self.message = message
        self.recoverable = recoverable
        super().__init__(message)


class ConfigError(ActivatorError):
    """Configuration-related errors"""

    def __init__(self, message: str, recoverable: bool = False):
        super().__init__(f"Config Error: {message}", recoverable)


class ParseError(ActivatorError):
    """Text input could not be decoded"""

    def __init__(self, message: str, raw: str | bytes | None = None):
        self.raw = raw
        super().__init__(message, recoverable=True)


class MalformedPayload(ParseError):
    """Notification payload does not match the temperature reading shape"""

    def __init__(self, reason: str, raw: str | bytes | None = None):
        self.reason = reason
        super().__init__(f"Malformed payload: {reason}", raw)


class InvalidThresholdInput(ParseError):
    """Threshold write carried something other than a decimal integer"""

    def __init__(self, raw: str | bytes | None):
        super().__init__(f"Invalid threshold input: {raw!r}", raw)


class NoDataError(ActivatorError):
    """Mean requested before any reading arrived"""

    def __init__(self, message: str = "No readings in history"):
        super().__init__(message, recoverable=True)


class SubscriptionTerminal(ActivatorError):
    """Subscription ended by the peer or the transport"""

    def __init__(self, kind: str, url: str | None = None, detail: str = ""):
        self.kind = kind
        self.url = url
        self.detail = detail
        message = f"Subscription {kind}"
        if url:
            message += f" ({url})"
        if detail:
            message += f": {detail}"
        super().__init__(message, recoverable=True)


class TransportError(ActivatorError):
    """Notification transport errors"""

    def __init__(
        self,
        message: str,
        host: str | None = None,
        port: int | None = None,
    ):
        self.host = host
        self.port = port
        super().__init__(f"Transport Error: {message}", recoverable=True)


class ServiceError(ActivatorError):
    """Service lifecycle errors"""

    def __init__(self, message: str, service_name: str, recoverable: bool = True):
        self.service_name = service_name
        super().__init__(f"Service [{service_name}]: {message}", recoverable)
