"""
Defines the Prometheus metrics exported by the gateway.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from prometheus_client import REGISTRY as _PROM_REGISTRY
from prometheus_client import Counter as _OrigCounter
from prometheus_client import Gauge as _OrigGauge
from prometheus_client import Histogram as _OrigHistogram
from prometheus_client import start_http_server

logger = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# Duplicate-safe Prometheus metric wrappers
# ---------------------------------------------------------------------------
# Importing this module twice (test reloads, app factories) must not raise a
# duplicate registration error.


def _duplicate_safe_factory(metric_cls):
    """Return a factory that reuses an existing collector if already present."""

    def _factory(name: str, documentation: str, *args, **kwargs):  # type: ignore[override]
        existing = _PROM_REGISTRY._names_to_collectors.get(name)
        if existing is not None:
            return existing  # type: ignore[return-value]

        try:
            return metric_cls(name, documentation, *args, **kwargs)  # type: ignore[call-arg]
        except ValueError:
            # Registration lost the race, fall back to the now-existing collector.
            return _PROM_REGISTRY._names_to_collectors[name]  # type: ignore[return-value]

    return _factory


Counter = _duplicate_safe_factory(_OrigCounter)  # type: ignore[assignment]
Gauge = _duplicate_safe_factory(_OrigGauge)  # type: ignore[assignment]
Histogram = _duplicate_safe_factory(_OrigHistogram)  # type: ignore[assignment]


def _create_metrics() -> Dict[str, Any]:
    return {
        "requests_total": Counter(
            "tinymonitor_requests_total",
            "Gateway requests by outcome",
            ["outcome"],
        ),
        "requests_in_flight": Gauge(
            "tinymonitor_requests_in_flight",
            "Requests currently being handled",
        ),
        "upstream_fetch_seconds": Histogram(
            "tinymonitor_upstream_fetch_seconds",
            "Latency of the upstream status page fetch",
            buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 3.0, 5.0),
        ),
        "parse_failures_total": Counter(
            "tinymonitor_parse_failures_total",
            "Extraction or normalization failures",
            ["stage"],
        ),
    }


METRICS: Dict[str, Any] = _create_metrics()

_exporter_port: Optional[int] = None


def start_metrics_server(port: Optional[int]) -> bool:
    """Start the Prometheus exporter on ``port`` once per process.

    Returns True when an exporter is running after the call.
    """
    global _exporter_port
    if port is None:
        return False
    if _exporter_port is not None:
        return True
    start_http_server(port)
    _exporter_port = port
    logger.info("Prometheus exporter started", port=port)
    return True
