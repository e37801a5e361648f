"""
Label-anchored substring scanner.

A value is located in three steps: find the label, find the value marker
after it, then read up to the next ``<``. Each step is a state of a small
machine so that a miss reports exactly where the scan stopped.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

TERMINATOR = "<"


class ScanState(Enum):
    SEEK_LABEL = "seek_label"
    SEEK_MARKER = "seek_marker"
    READ_VALUE = "read_value"
    FOUND = "found"
    MISSING = "missing"


@dataclass(slots=True, frozen=True)
class ScanResult:
    """Outcome of one scan; ``failed_at`` names the state that missed."""

    value: Optional[str]
    state: ScanState
    failed_at: Optional[ScanState] = None
    truncated: bool = False

    @property
    def found(self) -> bool:
        return self.state is ScanState.FOUND


def scan_value(html: str, marker: str, *, label: Optional[str] = None, capacity: int = 63) -> ScanResult:
    """Return the run between ``marker`` and the next ``<``.

    When ``label`` is given the marker is searched from the label's first
    occurrence onwards, otherwise from the start of the page. An empty run
    counts as missing. Runs longer than ``capacity`` UTF-8 bytes are cut at
    that byte count, dropping any character split by the cut.
    """
    state = ScanState.SEEK_LABEL if label is not None else ScanState.SEEK_MARKER
    position = 0

    while True:
        if state is ScanState.SEEK_LABEL:
            assert label is not None
            position = html.find(label)
            if position < 0:
                return ScanResult(None, ScanState.MISSING, failed_at=state)
            state = ScanState.SEEK_MARKER

        elif state is ScanState.SEEK_MARKER:
            marker_at = html.find(marker, position)
            if marker_at < 0:
                return ScanResult(None, ScanState.MISSING, failed_at=state)
            position = marker_at + len(marker)
            state = ScanState.READ_VALUE

        elif state is ScanState.READ_VALUE:
            end = html.find(TERMINATOR, position)
            if end <= position:
                # no terminator at all, or an empty run
                return ScanResult(None, ScanState.MISSING, failed_at=state)
            run = html[position:end]
            encoded = run.encode("utf-8")
            if len(encoded) > capacity:
                kept = encoded[:capacity].decode("utf-8", errors="ignore")
                return ScanResult(kept, ScanState.FOUND, truncated=True)
            return ScanResult(run, ScanState.FOUND)

        else:  # pragma: no cover
            raise RuntimeError(f"unexpected scan state {state}")
