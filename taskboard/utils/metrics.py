"""
Metrics Collection for recurring instance generation.

Thread-safe in-process counters and timers, read by the health endpoint.
"""

import threading
import time
from collections import defaultdict
from contextlib import contextmanager
from typing import Any, Dict

from taskboard.config import utc_now


class MetricsCollector:
    """Collects and manages metrics for the recurrence generator."""

    def __init__(self):
        """Initialize metrics collector."""
        self.metrics = defaultdict(int)
        self.timers = defaultdict(float)
        self.lock = threading.Lock()
        self.reset()

    def reset(self):
        """Zero every counter and timer."""
        with self.lock:
            self.metrics.clear()
            self.timers.clear()
            self.metrics["recurring_instances_created_total"] = 0
            self.metrics["recurring_series_skipped_total"] = 0
            self.metrics["recurring_series_failed_total"] = 0
            self.metrics["recurring_generation_runs_total"] = 0

    def increment_counter(self, metric_name: str, value: int = 1):
        """Increment a counter metric."""
        with self.lock:
            self.metrics[metric_name] += value

    def record_timer(self, metric_name: str, duration: float):
        """Record a timing metric."""
        with self.lock:
            self.timers[metric_name] += duration

    def get_metrics(self) -> Dict[str, Any]:
        """Get current metrics values."""
        with self.lock:
            return {
                "counters": dict(self.metrics),
                "timers": dict(self.timers),
                "timestamp": utc_now().isoformat(),
            }

    def record_run(self, created: int, skipped: int, failed: int):
        """Record the outcome counts of one generation run."""
        with self.lock:
            self.metrics["recurring_generation_runs_total"] += 1
            self.metrics["recurring_instances_created_total"] += created
            self.metrics["recurring_series_skipped_total"] += skipped
            self.metrics["recurring_series_failed_total"] += failed

    @contextmanager
    def time_operation(self, metric_name: str):
        """Context manager to time an operation."""
        start_time = time.monotonic()
        try:
            yield
        finally:
            self.record_timer(metric_name, time.monotonic() - start_time)


# Global metrics instance
metrics_collector = MetricsCollector()
