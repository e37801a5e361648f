"""
Serializes readings and errors into the gateway's JSON bodies.

Numbers are written with exactly three decimals (``233`` becomes
``233.000``), which ``json.dumps`` cannot do, so the reading object is
assembled field by field. Strings still go through ``json.dumps``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import List

from tinymonitor.errors import GatewayError, SerializationError
from tinymonitor.extractor.models import REQUIRED_FIELDS, MeterReading

JSON_MEDIA_TYPE = "application/json"
DEFAULT_MAX_BODY_BYTES = 1024


@dataclass(slots=True, frozen=True)
class GatewayReply:
    status_code: int
    body: str
    media_type: str = JSON_MEDIA_TYPE


def render_number(value: float) -> str:
    return f"{value:.3f}"


def render_string(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def render_reading(reading: MeterReading, *, name: str, source: str) -> str:
    members: List[str] = [f'"name":{render_string(name)}']
    for field_spec in REQUIRED_FIELDS:
        members.append(f'"{field_spec.output_key}":{render_number(getattr(reading, field_spec.key))}')
    members.append(f'"state":{render_string(reading.state)}')
    members.append(f'"source":{render_string(source)}')
    return "{" + ",".join(members) + "}"


def compose_reading(
    reading: MeterReading,
    *,
    name: str,
    source: str,
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES,
) -> GatewayReply:
    """Build the 200 reply.

    Raises:
        SerializationError: unless the encoded body is strictly shorter
            than ``max_body_bytes``.
    """
    body = render_reading(reading, name=name, source=source)
    size = len(body.encode("utf-8"))
    if size >= max_body_bytes:
        raise SerializationError(f"body of {size} bytes exceeds {max_body_bytes}", size=size, limit=max_body_bytes)
    return GatewayReply(200, body)


def compose_error(error: GatewayError) -> GatewayReply:
    return GatewayReply(error.status_code, json.dumps(error.payload, separators=(",", ":")))
