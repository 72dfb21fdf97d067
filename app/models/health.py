"""Response models for the health and metrics endpoints."""

from datetime import datetime

from pydantic import BaseModel

from app.models.enums import HealthStatus
from app.models.suggestion import CamelModel


class CheckResult(CamelModel):
    """Outcome of one independent sub-check."""
    status: HealthStatus
    latency_ms: float
    detail: str | None = None


class HealthChecks(BaseModel):
    ai: CheckResult
    database: CheckResult


class HealthReport(CamelModel):
    """Full response for GET /api/v1/suggestions/health."""
    status: HealthStatus
    timestamp: datetime
    response_time_ms: float
    model: str
    checks: HealthChecks


class MetricsSnapshot(CamelModel):
    """Counters accumulated since process start."""
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    success_rate: float = 100.0
    total_suggestions: int = 0
    average_latency_ms: float = 0.0
    top_industries: list[str] = []
    error_breakdown: dict[str, int] = {}


class MetricsResponse(CamelModel):
    """Full response for GET /api/v1/suggestions/metrics."""
    timestamp: datetime
    service: str
    version: str
    uptime_seconds: float
    metrics: MetricsSnapshot
