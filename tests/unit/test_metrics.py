"""
Unit tests for the metrics collector.
"""

import threading
from unittest.mock import patch

from task_registry.utils.metrics import MetricsCollector


class TestMetricsCollector:
    """Test MetricsCollector."""

    def test_counter_with_tags(self):
        """Test counters are keyed by tags."""
        metrics = MetricsCollector()
        metrics.counter("registry.admitted", tags={"registry": "a"})
        metrics.counter("registry.admitted", tags={"registry": "a"})
        metrics.counter("registry.admitted", tags={"registry": "b"})

        assert metrics.get_counter("registry.admitted", {"registry": "a"}) == 2
        assert metrics.get_counter("registry.admitted", {"registry": "b"}) == 1
        assert metrics.get_counter("registry.admitted") == 0

    def test_gauge(self):
        """Test gauges keep the last value."""
        metrics = MetricsCollector()
        metrics.gauge("registry.size", 1)
        metrics.gauge("registry.size", 3)

        assert metrics.get_gauge("registry.size") == 3
        assert metrics.get_gauge("registry.missing") is None

    def test_timing_records_duration(self):
        """Test the timing context records one sample."""
        metrics = MetricsCollector()
        with metrics.timing("registry.admit"):
            pass

        timers = metrics.get_metrics()["timers"]
        assert timers["registry.admit"]["count"] == 1
        assert timers["registry.admit"]["min"] >= 0

    def test_reset(self):
        """Test reset clears everything."""
        metrics = MetricsCollector()
        metrics.counter("c")
        metrics.gauge("g", 1)
        metrics.reset()

        snapshot = metrics.get_metrics()
        assert snapshot["counters"] == {}
        assert snapshot["gauges"] == {}

    def test_reset_is_logged(self):
        """Test reset logs how many series were cleared."""
        metrics = MetricsCollector()
        metrics.counter("c")
        metrics.gauge("g", 1)

        with patch("task_registry.utils.metrics.logger") as mock_logger:
            metrics.reset()

        mock_logger.debug.assert_called_once_with("metrics_reset", cleared=2)

    def test_thread_safe_counter(self):
        """Test concurrent increments are not lost."""
        metrics = MetricsCollector()

        def work():
            for _ in range(1000):
                metrics.counter("c")

        threads = [threading.Thread(target=work) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert metrics.get_counter("c") == 8000
