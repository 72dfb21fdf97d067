"""In-process service counters for GET /api/v1/suggestions/metrics.

Pass-through aggregation only: counts plus a couple of ratios.  One
``ServiceMetrics`` instance is owned by the application (``app.state.metrics``).
"""

from __future__ import annotations

import threading
import time
from collections import Counter

from app.models.enums import FailureKind
from app.models.health import MetricsSnapshot

TOP_INDUSTRY_LIMIT = 5


class ServiceMetrics:
    """Thread-safe counters for suggestion requests."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._started_at = time.monotonic()
        self._successes = 0
        self._failures = 0
        self._suggestions = 0
        self._latency_total_ms = 0.0
        self._latency_samples = 0
        self._industries: Counter[str] = Counter()
        self._errors: Counter[str] = Counter()

    def record_success(self, industry: str, suggestion_count: int, latency_ms: float) -> None:
        with self._lock:
            self._successes += 1
            self._suggestions += suggestion_count
            self._industries[industry.strip().lower()] += 1
            self._latency_total_ms += latency_ms
            self._latency_samples += 1

    def record_failure(self, kind: FailureKind, latency_ms: float | None = None) -> None:
        with self._lock:
            self._failures += 1
            self._errors[kind.value] += 1
            if latency_ms is not None:
                self._latency_total_ms += latency_ms
                self._latency_samples += 1

    @property
    def uptime_seconds(self) -> float:
        return round(time.monotonic() - self._started_at, 3)

    def snapshot(self) -> MetricsSnapshot:
        with self._lock:
            total = self._successes + self._failures
            success_rate = 100.0 if total == 0 else round(self._successes / total * 100, 2)
            average_latency = (
                round(self._latency_total_ms / self._latency_samples, 2)
                if self._latency_samples
                else 0.0
            )
            return MetricsSnapshot(
                total_requests=total,
                successful_requests=self._successes,
                failed_requests=self._failures,
                success_rate=success_rate,
                total_suggestions=self._suggestions,
                average_latency_ms=average_latency,
                top_industries=[name for name, _ in self._industries.most_common(TOP_INDUSTRY_LIMIT)],
                error_breakdown=dict(self._errors),
            )
