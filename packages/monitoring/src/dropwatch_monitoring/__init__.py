"""Monitoring helpers."""

from dropwatch_monitoring.metrics import PrometheusMetrics

__all__ = ["PrometheusMetrics"]
