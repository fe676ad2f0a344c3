"""
Common Utilities

Shared modules used across all services:
- config.py - Configuration dataclasses and YAML loading
- exceptions.py - Custom exception classes
- logging_setup.py - Structured logging setup
- scheduler.py - Adaptive interval timer
"""

from .config import (
    ActivatorConfig,
    ObserveSettings,
    HistorySettings,
    ControlSettings,
    SignalSettings,
    SignalSourceType,
    CommandSettings,
    load_activator_config,
    load_config_file,
    validate_config,
)
from .exceptions import (
    ActivatorError,
    ConfigError,
    ParseError,
    MalformedPayload,
    InvalidThresholdInput,
    NoDataError,
    SubscriptionTerminal,
    TransportError,
    ServiceError,
)
from .logging_setup import (
    setup_logging,
    get_service_logger,
    log_notification,
    log_control_tick,
)
from .scheduler import AdaptiveLoop

__all__ = [
    # Config
    "ActivatorConfig",
    "ObserveSettings",
    "HistorySettings",
    "ControlSettings",
    "SignalSettings",
    "SignalSourceType",
    "CommandSettings",
    "load_activator_config",
    "load_config_file",
    "validate_config",
    # Exceptions
    "ActivatorError",
    "ConfigError",
    "ParseError",
    "MalformedPayload",
    "InvalidThresholdInput",
    "NoDataError",
    "SubscriptionTerminal",
    "TransportError",
    "ServiceError",
    # Logging
    "setup_logging",
    "get_service_logger",
    "log_notification",
    "log_control_tick",
    # Scheduling
    "AdaptiveLoop",
]
