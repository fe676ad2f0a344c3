"""
Threshold Store

Holds the control setpoint. Remote writes arrive as text.
"""

import re

from activator.common.exceptions import InvalidThresholdInput
from activator.common.logging_setup import get_service_logger

logger = get_service_logger("control.threshold")

_DECIMAL = re.compile(r"[+-]?[0-9]+")


class ThresholdStore:
    """Current setpoint in degrees C"""

    def __init__(self, default: int = 25):
        self._value = int(default)
        self.write_count = 0

    def get(self) -> int:
        return self._value

    def set(self, raw: str | bytes | None) -> int:
        """
        Parse a decimal integer and store it.

        Raises:
            InvalidThresholdInput: empty or non-numeric input; the stored
                value is left unchanged
        """
        text = raw
        if isinstance(text, (bytes, bytearray)):
            try:
                text = bytes(text).decode("ascii")
            except UnicodeDecodeError:
                raise InvalidThresholdInput(raw)

        if text is None or not _DECIMAL.fullmatch(text.strip()):
            logger.warning(f"Rejected threshold write {raw!r}, keeping {self._value}")
            raise InvalidThresholdInput(raw)

        previous, self._value = self._value, int(text.strip())
        self.write_count += 1
        logger.info(
            f"Threshold changed {previous} -> {self._value}",
            extra={"previous": previous, "threshold": self._value},
        )
        return self._value
