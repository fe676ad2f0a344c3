from __future__ import annotations

import pytest

from activator.common.exceptions import MalformedPayload, ParseError
from activator.services.observe.parser import TemperatureRecord, format_reading, parse_reading


@pytest.mark.parametrize(
    ("temperature", "timestamp"),
    [(21, 2412), (0, 0), (-7, 15), (127, 4294967295)],
)
def test_parse_recovers_wire_values(temperature: int, timestamp: int) -> None:
    record = parse_reading(format_reading(temperature, timestamp))
    assert record == TemperatureRecord(temperature=temperature, timestamp=timestamp)


def test_parse_accepts_bytes() -> None:
    assert parse_reading(b'{ "temperature":21, "time":2412 }') == TemperatureRecord(21, 2412)


def test_parse_time_terminated_by_closing_brace() -> None:
    assert parse_reading('{ "temperature":30, "time":9}') == TemperatureRecord(30, 9)


@pytest.mark.parametrize(
    "payload",
    [
        "",
        '{ "temperature" 21, "time" 2412 }',  # no ':'
        '{ "temperature":21 "time":2412 }',  # no ','
        '{ "temperature":21, "time" 2412 }',  # no second ':'
        '{ "temperature":21, "time":2412',  # nothing after time
        '{ "temperature":warm, "time":2412 }',
        '{ "temperature":21, "time":-5 }',
        '{ "temperature":, "time":1 }',
        '{ "temperature":\u0662\u0661, "time":5 }',  # Arabic-Indic digits
        '{ "temperature":21, "time":\uff15 }',  # fullwidth digit
    ],
)
def test_parse_rejects_malformed(payload: str) -> None:
    with pytest.raises(MalformedPayload):
        parse_reading(payload)


def test_parse_rejects_non_ascii() -> None:
    with pytest.raises(ParseError):
        parse_reading('{ "temperature":2°1, "time":1 }'.encode("utf-8"))


def test_malformed_payload_carries_raw_text() -> None:
    with pytest.raises(MalformedPayload) as excinfo:
        parse_reading("garbage")
    assert excinfo.value.raw == "garbage"
    assert excinfo.value.recoverable is True
