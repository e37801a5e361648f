"""
Turns raw value runs into a typed :class:`MeterReading`.
"""

from __future__ import annotations

import math
import re
from typing import Dict

from tinymonitor.errors import NormalizeError

from .models import REQUIRED_FIELDS, ExtractedFieldSet, MeterReading

# ASCII whitespace plus NBSP, which the device uses as cell padding
PADDING = " \t\n\r\x0b\x0c\u00a0"

UNKNOWN_STATE = "UNKNOWN"

_LEADING_NUMBER = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


def trim(value: str) -> str:
    return value.strip(PADDING)


def parse_leading_float(value: str) -> float:
    """Parse the longest decimal prefix of ``value``.

    Trailing text such as a unit is ignored, but at least one digit must be
    consumed. Raises ``ValueError`` otherwise or when the result is not finite.
    """
    match = _LEADING_NUMBER.match(value)
    if match is None:
        raise ValueError(f"no leading number in {value!r}")
    number = float(match.group(0))
    if not math.isfinite(number):
        raise ValueError(f"{value!r} is out of range")
    return number


def normalize(fields: ExtractedFieldSet, *, unknown_state: str = UNKNOWN_STATE) -> MeterReading:
    """Trim and parse every field; any failure aborts the whole record."""
    numbers: Dict[str, float] = {}
    for field_spec in REQUIRED_FIELDS:
        raw = trim(getattr(fields, field_spec.key))
        try:
            numbers[field_spec.key] = parse_leading_float(raw)
        except ValueError as e:
            raise NormalizeError(str(e), field=field_spec.key, value=raw) from e

    state = trim(fields.state) if fields.state else ""
    return MeterReading(**numbers, state=state or unknown_state)
