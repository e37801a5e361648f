"""
Field extraction for the Tasmota status page (``/?m=1``).
"""

from __future__ import annotations

from typing import Dict, Optional, Union

import structlog

from tinymonitor.config.config import ExtractionConfig
from tinymonitor.errors import ExtractError

from .models import REQUIRED_FIELDS, ExtractedFieldSet
from .scanner import scan_value

logger = structlog.get_logger(__name__)


def decode_page(html: Union[bytes, str]) -> str:
    """Decode the upstream body; invalid UTF-8 never aborts the scan."""
    if isinstance(html, bytes):
        return html.decode("utf-8", errors="replace")
    return html


class LabelAnchoredExtractor:
    """Extracts the nine measurements and the ON/OFF state from a status page."""

    name = "label_anchored"

    def __init__(self, config: Optional[ExtractionConfig] = None):
        self.config = config or ExtractionConfig()

    def extract(self, html: Union[bytes, str]) -> ExtractedFieldSet:
        """
        Scan ``html`` for every required field.

        Raises:
            ExtractError: on the first required field that is missing. No
                partial field set is ever returned.
        """
        page = decode_page(html)
        values: Dict[str, str] = {}

        for field_spec in REQUIRED_FIELDS:
            result = scan_value(
                page,
                self.config.value_marker,
                label=field_spec.label,
                capacity=self.config.field_capacity,
            )
            if not result.found:
                stage = result.failed_at.value if result.failed_at else None
                logger.warning("Required field missing", field=field_spec.key, label=field_spec.label, stage=stage)
                raise ExtractError(f"{field_spec.label!r} not found ({stage})", field=field_spec.key, stage=stage)
            if result.truncated:
                logger.debug("Field value truncated", field=field_spec.key, capacity=self.config.field_capacity)
            values[field_spec.key] = result.value  # type: ignore[assignment]

        state = scan_value(page, self.config.state_marker, capacity=self.config.state_capacity)
        return ExtractedFieldSet(**values, state=state.value)


_default_extractor = LabelAnchoredExtractor()


def extract(html: Union[bytes, str]) -> ExtractedFieldSet:
    """Extract with the default markers."""
    return _default_extractor.extract(html)
