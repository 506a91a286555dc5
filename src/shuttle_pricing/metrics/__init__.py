"""Provider call metrics collection module."""

from .collector import MetricsCollector, MetricsSnapshot, get_metrics_collector

__all__ = ["MetricsCollector", "MetricsSnapshot", "get_metrics_collector"]
