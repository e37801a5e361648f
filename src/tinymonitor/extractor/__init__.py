"""
Tiny-Monitor field extraction.

The status page is scanned label by label (label, value marker, ``<``
terminator), then every run is trimmed and parsed into a float. Extraction
and normalization are both fail-fast: one missing or non-numeric required
field rejects the whole page.
"""

from .extractor import LabelAnchoredExtractor, decode_page, extract
from .models import REQUIRED_FIELDS, ExtractedFieldSet, FieldSpec, MeterReading
from .normalizer import UNKNOWN_STATE, normalize, parse_leading_float, trim
from .scanner import ScanResult, ScanState, scan_value

__all__ = [
    "LabelAnchoredExtractor",
    "decode_page",
    "extract",
    "REQUIRED_FIELDS",
    "ExtractedFieldSet",
    "FieldSpec",
    "MeterReading",
    "UNKNOWN_STATE",
    "normalize",
    "parse_leading_float",
    "trim",
    "ScanResult",
    "ScanState",
    "scan_value",
]
