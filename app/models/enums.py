"""Enum types shared by the suggestion pipeline and its endpoints."""

from enum import Enum


class Timeframe(str, Enum):
    """Cadence an objective is measured on."""
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"
    quarterly = "quarterly"


class HealthStatus(str, Enum):
    """Outcome of a health check."""
    healthy = "healthy"
    unhealthy = "unhealthy"


class FailureKind(str, Enum):
    """Failure categories tracked by the metrics endpoint."""
    validation = "validation"
    generation = "generation"
    unusable_output = "unusable_output"
    database = "database"
    rate_limited = "rate_limited"
    internal = "internal"


class ExtractionFailure(str, Enum):
    """Why a generation reply could not be turned into suggestions."""
    no_json_array = "no_json_array"
    invalid_json = "invalid_json"
