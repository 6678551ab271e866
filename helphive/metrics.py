"""
Metrics and observability for HelpHive.

Records how each pipeline call was served (upstream, cache, or local
fallback) with structured logging and in-memory counters.
"""

import json
import logging
import statistics as stats
from collections import defaultdict
from dataclasses import dataclass, asdict
from datetime import datetime, UTC
from typing import Optional, Any
from pathlib import Path


@dataclass
class MetricEvent:
    """A single metric event."""
    timestamp: str
    event_type: str  # upstream, cache_hit, fallback, error
    operation: str  # normalize, prioritize
    data: dict[str, Any]


class MetricsCollector:
    """
    Collects and aggregates metrics from pipeline operations.
    """

    def __init__(
        self,
        metrics_file: Optional[Path] = None,
        enable_logging: bool = True,
    ):
        """
        Initialize metrics collector.

        Args:
            metrics_file: Optional file to write metrics to (JSONL format)
            enable_logging: Whether to enable structured logging
        """
        self.metrics_file = metrics_file
        self.enable_logging = enable_logging

        self.logger = logging.getLogger("helphive.metrics")
        if enable_logging and not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
                )
            )
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.INFO)

        self._events: list[MetricEvent] = []
        self._counters: dict[str, int] = defaultdict(int)
        self._histograms: dict[str, list[float]] = defaultdict(list)

    def record_upstream(
        self,
        operation: str,
        latency_ms: int,
        parse_status: str,
        **extra: Any,
    ) -> None:
        """Record a successful upstream round trip."""
        self._record_event(
            event_type="upstream",
            operation=operation,
            data={"latency_ms": latency_ms, "parse_status": parse_status, **extra},
        )
        self._counters["upstream_calls_total"] += 1
        self._counters[f"upstream_calls_{operation}"] += 1
        self._counters[f"parse_{parse_status}"] += 1
        self._histograms["upstream_latency_ms"].append(latency_ms)

    def record_cache_hit(self, operation: str, **extra: Any) -> None:
        """Record a result served from the response cache."""
        self._record_event(event_type="cache_hit", operation=operation, data=extra)
        self._counters["cache_hits_total"] += 1
        self._counters[f"cache_hits_{operation}"] += 1

    def record_fallback(self, operation: str, reason: str, **extra: Any) -> None:
        """
        Record a call served without the upstream.

        Args:
            operation: normalize or prioritize
            reason: no_credential, quota_exceeded, upstream_error or unparseable
        """
        self._record_event(
            event_type="fallback",
            operation=operation,
            data={"reason": reason, **extra},
        )
        self._counters["fallbacks_total"] += 1
        self._counters[f"fallbacks_{reason}"] += 1

    def record_error(
        self,
        operation: str,
        error_message: str,
        http_status: Optional[int] = None,
        **extra: Any,
    ) -> None:
        """Record an upstream failure."""
        self._record_event(
            event_type="error",
            operation=operation,
            data={"error_message": error_message, "http_status": http_status, **extra},
        )
        self._counters["errors_total"] += 1

        if self.enable_logging:
            self.logger.error(
                f"Upstream error during {operation}: {error_message} (status={http_status})"
            )

    def _record_event(
        self,
        event_type: str,
        operation: str,
        data: dict,
    ) -> None:
        """Record a metric event."""
        event = MetricEvent(
            timestamp=datetime.now(UTC).isoformat(),
            event_type=event_type,
            operation=operation,
            data=data,
        )

        self._events.append(event)

        if self.metrics_file:
            with open(self.metrics_file, "a") as f:
                f.write(json.dumps(asdict(event), default=str) + "\n")

        if self.enable_logging:
            self.logger.info(
                f"{event_type.upper()}: operation={operation}, data={data}"
            )

    @property
    def events(self) -> list[MetricEvent]:
        return list(self._events)

    def get_stats(self) -> dict:
        """
        Get aggregated statistics.

        Returns:
            Dictionary with metrics summary
        """
        latency_values = self._histograms.get("upstream_latency_ms", [])
        cache_hits = self._counters.get("cache_hits_total", 0)
        served = (
            self._counters.get("upstream_calls_total", 0)
            + cache_hits
            + self._counters.get("fallbacks_total", 0)
        )

        return {
            "counters": dict(self._counters),
            "cache_hit_rate": (
                cache_hits / served if served else 0.0
            ),
            "latency": {
                "avg_ms": stats.mean(latency_values) if latency_values else 0,
                "p50_ms": stats.median(latency_values) if latency_values else 0,
                "max_ms": max(latency_values) if latency_values else 0,
            },
            "total_events": len(self._events),
        }

    def reset(self) -> None:
        """Reset all metrics."""
        self._events.clear()
        self._counters.clear()
        self._histograms.clear()
