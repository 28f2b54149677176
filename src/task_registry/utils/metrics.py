"""
Metrics collection for the task registry.
"""

import time
from typing import Dict, Any, Optional
from datetime import datetime, timezone
import statistics
from collections import defaultdict, deque
import threading

from .logging import get_logger

logger = get_logger("task-registry.utils.metrics")


class MetricsCollector:
    """Thread-safe metrics collector."""

    def __init__(self, max_samples: int = 1000):
        self._lock = threading.Lock()
        self._counters: Dict[str, float] = defaultdict(float)
        self._gauges: Dict[str, float] = {}
        self._timers: Dict[str, deque] = defaultdict(lambda: deque(maxlen=max_samples))
        self._tags: Dict[str, Dict[str, str]] = {}

    def counter(self, name: str, value: float = 1, tags: Optional[Dict[str, str]] = None) -> None:
        """Increment a counter metric."""
        with self._lock:
            key = self._make_key(name, tags)
            self._counters[key] += value
            if tags:
                self._tags[key] = tags.copy()

    def gauge(self, name: str, value: float, tags: Optional[Dict[str, str]] = None) -> None:
        """Set a gauge metric."""
        with self._lock:
            key = self._make_key(name, tags)
            self._gauges[key] = value
            if tags:
                self._tags[key] = tags.copy()

    def timer(self, name: str, duration: float, tags: Optional[Dict[str, str]] = None) -> None:
        """Record a timer value."""
        with self._lock:
            key = self._make_key(name, tags)
            self._timers[key].append(duration)
            if tags:
                self._tags[key] = tags.copy()

    def timing(self, name: str, tags: Optional[Dict[str, str]] = None) -> 'TimingContext':
        """Context manager for timing operations."""
        return TimingContext(self, name, tags)

    def get_metrics(self) -> Dict[str, Any]:
        """Get all current metrics."""
        with self._lock:
            metrics = {
                "counters": dict(self._counters),
                "gauges": dict(self._gauges),
                "timers": {},
                "tags": dict(self._tags),
                "timestamp": datetime.now(timezone.utc).isoformat()
            }

            for key, durations in self._timers.items():
                if durations:
                    metrics["timers"][key] = {
                        "count": len(durations),
                        "min": min(durations),
                        "max": max(durations),
                        "mean": statistics.mean(durations),
                        "median": statistics.median(durations),
                        "p95": self._percentile(durations, 0.95),
                    }

            return metrics

    def reset(self) -> None:
        """Reset all metrics."""
        with self._lock:
            cleared = len(self._counters) + len(self._gauges) + len(self._timers)
            self._counters.clear()
            self._gauges.clear()
            self._timers.clear()
            self._tags.clear()
        logger.debug("metrics_reset", cleared=cleared)

    def get_counter(self, name: str, tags: Optional[Dict[str, str]] = None) -> float:
        """Get counter value."""
        with self._lock:
            key = self._make_key(name, tags)
            return self._counters.get(key, 0)

    def get_gauge(self, name: str, tags: Optional[Dict[str, str]] = None) -> Optional[float]:
        """Get gauge value."""
        with self._lock:
            key = self._make_key(name, tags)
            return self._gauges.get(key)

    def _make_key(self, name: str, tags: Optional[Dict[str, str]]) -> str:
        """Create metric key with tags."""
        if not tags:
            return name

        tag_str = ",".join(f"{k}={v}" for k, v in sorted(tags.items()))
        return f"{name}[{tag_str}]"

    def _percentile(self, values: deque, percentile: float) -> float:
        """Calculate percentile of values."""
        sorted_values = sorted(values)
        k = (len(sorted_values) - 1) * percentile
        f = int(k)
        c = k - f

        if f == len(sorted_values) - 1:
            return sorted_values[f]
        return sorted_values[f] * (1 - c) + sorted_values[f + 1] * c


class TimingContext:
    """Context manager for timing operations."""

    def __init__(self, collector: MetricsCollector, name: str, tags: Optional[Dict[str, str]] = None):
        self.collector = collector
        self.name = name
        self.tags = tags
        self.start_time: Optional[float] = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.start_time is not None:
            duration = time.perf_counter() - self.start_time
            self.collector.timer(self.name, duration, self.tags)


__all__ = [
    'MetricsCollector',
    'TimingContext',
]
