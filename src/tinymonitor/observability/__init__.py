"""Structured logging and Prometheus metrics for the gateway."""

from __future__ import annotations

from typing import Any, Dict, Optional

from .logging import configure_logging
from .metrics import METRICS, start_metrics_server

__all__ = ["configure_logging", "METRICS", "start_metrics_server", "increment", "histogram"]


def _series(name: str, labels: Optional[Dict[str, Any]]) -> Any:
    """Resolve a metric by name, narrowed to one label set when given."""
    metric = METRICS.get(name)
    if metric is None or labels is None:
        return metric
    return metric.labels(**labels)


def increment(name: str, value: float = 1.0, labels: Optional[Dict[str, Any]] = None) -> None:
    """Increment a counter; unknown names are ignored."""
    series = _series(name, labels)
    if series is not None:
        series.inc(value)


def histogram(name: str, value: float, labels: Optional[Dict[str, Any]] = None) -> None:
    """Record one observation, e.g. an upstream fetch duration."""
    series = _series(name, labels)
    if series is not None:
        series.observe(value)
