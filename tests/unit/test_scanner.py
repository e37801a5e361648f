"""
Unit tests for the label-anchored scan state machine.
"""

import pytest

from tinymonitor.extractor.scanner import ScanState, scan_value

MARKER = "style='text-align:left'>"


@pytest.mark.unit
class TestScanValue:
    def test_reads_run_up_to_terminator(self):
        html = "<th>Voltage</th><td style='text-align:left'>233.4</td>"
        result = scan_value(html, MARKER, label="Voltage")

        assert result.found
        assert result.value == "233.4"
        assert result.state is ScanState.FOUND
        assert result.failed_at is None
        assert not result.truncated

    def test_missing_label(self):
        result = scan_value("<td style='text-align:left'>1</td>", MARKER, label="Voltage")

        assert not result.found
        assert result.value is None
        assert result.state is ScanState.MISSING
        assert result.failed_at is ScanState.SEEK_LABEL

    def test_marker_must_follow_label(self):
        html = "<td style='text-align:left'>1</td><th>Voltage</th><td>2</td>"
        result = scan_value(html, MARKER, label="Voltage")

        assert result.failed_at is ScanState.SEEK_MARKER

    def test_missing_terminator(self):
        result = scan_value("Voltage style='text-align:left'>233", MARKER, label="Voltage")

        assert result.failed_at is ScanState.READ_VALUE

    def test_empty_run_is_missing(self):
        result = scan_value("Voltage style='text-align:left'></td>", MARKER, label="Voltage")

        assert not result.found
        assert result.failed_at is ScanState.READ_VALUE

    def test_uses_first_marker_after_label(self):
        html = (
            "<td style='text-align:left'>skip</td>"
            "<th>Current</th><td style='text-align:left'>0.170</td>"
            "<td style='text-align:left'>later</td>"
        )
        assert scan_value(html, MARKER, label="Current").value == "0.170"

    def test_first_label_occurrence_wins(self):
        html = (
            "Current<td style='text-align:left'>1</td>"
            "Current<td style='text-align:left'>2</td>"
        )
        assert scan_value(html, MARKER, label="Current").value == "1"

    def test_long_run_is_truncated(self):
        html = "Voltage style='text-align:left'>" + "9" * 100 + "</td>"
        result = scan_value(html, MARKER, label="Voltage", capacity=63)

        assert result.found
        assert result.truncated
        assert result.value == "9" * 63

    def test_run_at_capacity_is_kept_whole(self):
        html = "Voltage style='text-align:left'>" + "1" * 63 + "<"
        result = scan_value(html, MARKER, label="Voltage", capacity=63)

        assert not result.truncated
        assert len(result.value) == 63

    def test_capacity_counts_utf8_bytes(self):
        html = "Voltage style='text-align:left'>" + "é" * 40 + "<"
        result = scan_value(html, MARKER, label="Voltage", capacity=63)

        assert result.truncated
        assert result.value == "é" * 31
        assert len(result.value.encode("utf-8")) == 62

    def test_multibyte_run_within_capacity_kept_whole(self):
        html = "Voltage style='text-align:left'>" + "é" * 31 + "<"
        result = scan_value(html, MARKER, label="Voltage", capacity=63)

        assert not result.truncated
        assert result.value == "é" * 31

    def test_without_label_scans_from_start(self):
        html = "<td style='font-size:62px'>OFF</td>"
        result = scan_value(html, "font-size:62px'>")

        assert result.value == "OFF"

    def test_without_label_missing_marker(self):
        result = scan_value("<td>ON</td>", "font-size:62px'>")

        assert result.failed_at is ScanState.SEEK_MARKER
