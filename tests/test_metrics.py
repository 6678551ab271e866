"""Tests for metrics collection."""

import json

from helphive.metrics import MetricsCollector


class TestMetricsCollector:
    """Test counters, histograms and event export."""

    def test_record_upstream(self):
        metrics = MetricsCollector(enable_logging=False)
        metrics.record_upstream("normalize", latency_ms=120, parse_status="well_formed")
        metrics.record_upstream("prioritize", latency_ms=80, parse_status="well_formed")

        stats = metrics.get_stats()
        assert stats["counters"]["upstream_calls_total"] == 2
        assert stats["counters"]["upstream_calls_normalize"] == 1
        assert stats["counters"]["parse_well_formed"] == 2
        assert stats["latency"]["avg_ms"] == 100
        assert stats["latency"]["max_ms"] == 120

    def test_cache_hit_rate(self):
        metrics = MetricsCollector(enable_logging=False)
        metrics.record_upstream("normalize", latency_ms=10, parse_status="well_formed")
        metrics.record_cache_hit("normalize")
        metrics.record_cache_hit("normalize")
        metrics.record_fallback("normalize", "quota_exceeded")

        stats = metrics.get_stats()
        assert stats["cache_hit_rate"] == 0.5
        assert stats["counters"]["fallbacks_quota_exceeded"] == 1
        assert stats["total_events"] == 4

    def test_empty_stats(self):
        stats = MetricsCollector(enable_logging=False).get_stats()
        assert stats["cache_hit_rate"] == 0.0
        assert stats["latency"]["avg_ms"] == 0
        assert stats["total_events"] == 0

    def test_record_error(self):
        metrics = MetricsCollector(enable_logging=False)
        metrics.record_error("prioritize", "RateLimitError: slow down", http_status=429)

        (event,) = metrics.events
        assert event.event_type == "error"
        assert event.data["http_status"] == 429
        assert metrics.get_stats()["counters"]["errors_total"] == 1

    def test_metrics_file(self, tmp_path):
        """Events are appended to the metrics file as JSON lines."""
        path = tmp_path / "metrics.jsonl"
        metrics = MetricsCollector(metrics_file=path, enable_logging=False)
        metrics.record_fallback("normalize", "no_credential")
        metrics.record_cache_hit("prioritize", count=3)

        lines = path.read_text().splitlines()
        assert len(lines) == 2
        first = json.loads(lines[0])
        assert first["event_type"] == "fallback"
        assert first["data"]["reason"] == "no_credential"
        assert json.loads(lines[1])["data"]["count"] == 3

    def test_reset(self):
        metrics = MetricsCollector(enable_logging=False)
        metrics.record_cache_hit("normalize")
        metrics.reset()
        assert metrics.events == []
        assert metrics.get_stats()["counters"] == {}
