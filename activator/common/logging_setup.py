"""
Structured Logging Setup

Consistent logging configuration across all services.
Uses JSON format for structured logs on the node, plain text for development.
"""

import logging
import sys
import os
from datetime import datetime, timezone
from typing import Any
import json

# LogRecord attributes that are not user-supplied "extra" fields
_RESERVED_ATTRS = frozenset((
    "name", "msg", "args", "levelname", "levelno", "pathname",
    "filename", "module", "exc_info", "exc_text", "stack_info",
    "lineno", "funcName", "created", "msecs", "relativeCreated",
    "thread", "threadName", "processName", "process", "service",
    "message", "taskName",
))


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "service": getattr(record, "service", "unknown"),
            "message": record.getMessage(),
            "logger": record.name,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


class ServiceLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds service name to all logs"""

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        kwargs.setdefault("extra", {})
        kwargs["extra"]["service"] = self.extra.get("service", "unknown")
        return msg, kwargs


def setup_logging(
    service_name: str,
    log_level: str = "INFO",
    json_format: bool = True,
) -> logging.Logger:
    """
    Set up structured logging for a service.

    Args:
        service_name: Name of the service (e.g., "observe", "control")
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON format (True on the node, False for dev)

    Returns:
        Configured logger instance
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(f"activator.{service_name}")
    logger.setLevel(numeric_level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)

    if json_format:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # Don't propagate to root logger
    logger.propagate = False

    return logger


def get_service_logger(service_name: str) -> ServiceLoggerAdapter:
    """
    Get a logger adapter with service context.

    Level and format come from ACTIVATOR_LOG_LEVEL / ACTIVATOR_LOG_FORMAT.
    """
    log_level = os.environ.get("ACTIVATOR_LOG_LEVEL", "INFO")
    json_format = os.environ.get("ACTIVATOR_LOG_FORMAT", "json").lower() == "json"

    logger = setup_logging(service_name, log_level, json_format)
    return ServiceLoggerAdapter(logger, {"service": service_name})


def reconfigure_service_loggers(log_level: str, json_format: bool) -> None:
    """Apply a new level/format to every service logger created so far"""
    for name in list(logging.Logger.manager.loggerDict):
        if name.startswith("activator."):
            setup_logging(name[len("activator."):], log_level, json_format)


def log_notification(
    logger: logging.Logger,
    kind: str,
    url: str,
    payload: bytes | str | None = None,
) -> None:
    """Log an inbound notification"""
    if isinstance(payload, bytes):
        payload = payload.decode("ascii", errors="replace")

    if kind in ("data", "accepted"):
        logger.info(
            f"Notification {kind.upper()} from {url}: {payload or ''}",
            extra={"kind": kind, "url": url, "payload": payload},
        )
    else:
        logger.warning(
            f"Notification {kind.upper()} from {url}: {payload or ''}",
            extra={"kind": kind, "url": url, "payload": payload},
        )


def log_control_tick(
    logger: logging.Logger,
    frequency_hz: float,
    intensity: int,
    threshold: int,
    mean: int,
    signal: int | None,
    actuator_state: str,
) -> None:
    """Log control loop execution"""
    logger.debug(
        f"Fan frq={frequency_hz:g}Hz, intensity={intensity}, threshold={threshold}, "
        f"mean={mean}, rssi={signal}, actuator={actuator_state}",
        extra={
            "frequency_hz": frequency_hz,
            "intensity": intensity,
            "threshold": threshold,
            "mean": mean,
            "signal": signal,
            "actuator_state": actuator_state,
        },
    )
