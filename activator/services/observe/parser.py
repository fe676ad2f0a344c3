"""
Temperature Reading Parser

Decodes the peer's notification payload:

    { "temperature":21, "time":2412 }

This is not a JSON parser. It walks the delimiters of that one shape:
temperature runs from the first ':' to the next ',', time runs from the
following ':' to the next space or '}'. Callers get a complete record or a
MalformedPayload, never a half-filled one.
"""

import re
from dataclasses import dataclass

from activator.common.exceptions import MalformedPayload

_SIGNED_INT = re.compile(r"[+-]?[0-9]+")
_UNSIGNED_INT = re.compile(r"\+?[0-9]+")
_TIME_TERMINATORS = (" ", "}")


@dataclass(frozen=True)
class TemperatureRecord:
    """One reading from the peer"""
    temperature: int  # degrees C, truncated
    timestamp: int  # peer uptime in seconds

    def to_dict(self) -> dict:
        return {"temperature": self.temperature, "time": self.timestamp}


def _field(text: str, pattern: re.Pattern, name: str, raw: str) -> int:
    value = text.strip(" ")
    if not pattern.fullmatch(value):
        raise MalformedPayload(f"{name} is not an integer: {value!r}", raw)
    return int(value)


def parse_reading(payload: str | bytes) -> TemperatureRecord:
    """
    Parse a notification payload into a TemperatureRecord.

    Raises:
        MalformedPayload: a delimiter is missing or a field is not an integer
    """
    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = bytes(payload).decode("ascii")
        except UnicodeDecodeError:
            raise MalformedPayload("payload is not ASCII", bytes(payload))

    colon = payload.find(":")
    if colon < 0:
        raise MalformedPayload("no ':' before temperature", payload)

    comma = payload.find(",", colon + 1)
    if comma < 0:
        raise MalformedPayload("no ',' after temperature", payload)

    temperature = _field(payload[colon + 1:comma], _SIGNED_INT, "temperature", payload)

    colon = payload.find(":", comma + 1)
    if colon < 0:
        raise MalformedPayload("no ':' before time", payload)

    start = colon + 1
    # Leading spaces belong to the value, so look for the terminator after them
    while start < len(payload) and payload[start] == " ":
        start += 1
    ends = [i for i in (payload.find(t, start) for t in _TIME_TERMINATORS) if i >= 0]
    if not ends:
        raise MalformedPayload("no separator after time", payload)

    timestamp = _field(payload[start:min(ends)], _UNSIGNED_INT, "time", payload)

    return TemperatureRecord(temperature=temperature, timestamp=timestamp)


def format_reading(temperature: int, timestamp: int) -> str:
    """Render a reading in the peer's wire format"""
    return f'{{ "temperature":{temperature}, "time":{timestamp} }}'
