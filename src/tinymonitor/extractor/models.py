"""
Data models for extraction results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(slots=True, frozen=True)
class FieldSpec:
    """A required measurement: its record key, page label and JSON key."""

    key: str
    label: str
    output_key: str


REQUIRED_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec("voltage", "Voltage", "voltage"),
    FieldSpec("current", "Current", "current"),
    FieldSpec("active_power", "Active Power", "active_power"),
    FieldSpec("apparent_power", "Apparent Power", "apparent_power"),
    FieldSpec("reactive_power", "Reactive Power", "reactive_power"),
    FieldSpec("power_factor", "Power Factor", "power_factor"),
    FieldSpec("energy_today", "Energy Today", "energy_today_kwh"),
    FieldSpec("energy_yesterday", "Energy Yesterday", "energy_yesterday_kwh"),
    FieldSpec("energy_total", "Energy Total", "energy_total_kwh"),
)


@dataclass(slots=True, frozen=True)
class ExtractedFieldSet:
    """Raw value runs cut out of the status page, one per required field."""

    voltage: str
    current: str
    active_power: str
    apparent_power: str
    reactive_power: str
    power_factor: str
    energy_today: str
    energy_yesterday: str
    energy_total: str
    state: Optional[str] = None

    def __post_init__(self) -> None:
        for field_spec in REQUIRED_FIELDS:
            if not getattr(self, field_spec.key):
                raise ValueError(f"required field {field_spec.key!r} is empty")


@dataclass(slots=True, frozen=True)
class MeterReading:
    """Normalized measurement record."""

    voltage: float
    current: float
    active_power: float
    apparent_power: float
    reactive_power: float
    power_factor: float
    energy_today: float
    energy_yesterday: float
    energy_total: float
    state: str
