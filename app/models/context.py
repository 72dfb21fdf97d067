"""Pydantic models for the reference context gathered per request.

Each model maps a row of the table it is fetched from; the
``ReferenceContext`` bundles the four collections used to enrich the prompt
and to reconcile generated suggestions.
"""

from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class IndustryTemplate(BaseModel):
    """An ``okr_master`` template row."""
    model_config = ConfigDict(frozen=True)

    id: UUID
    industry: str
    category: str | None = None
    objective_title: str
    objective_description: str | None = None
    suggested_timeframe: str | None = None
    priority_level: int | None = None
    tags: list[Any] | None = None


class MetricType(BaseModel):
    """A ``dim_metric_type`` taxonomy row."""
    model_config = ConfigDict(frozen=True)

    id: UUID
    code: str
    description: str | None = None
    unit: str | None = None
    category: str | None = None


class Platform(BaseModel):
    """A ``dim_platform`` taxonomy row."""
    model_config = ConfigDict(frozen=True)

    id: UUID
    name: str
    display_name: str | None = None
    category: str | None = None


class ObjectivePerformance(BaseModel):
    """Historical completion of one tenant objective in the same industry."""
    model_config = ConfigDict(frozen=True)

    title: str
    category: str | None = None
    granularity: str | None = None
    target_value: float | None = None
    completion_rate: float = 0.0


class ReferenceContext(BaseModel):
    """Read-only snapshot assembled once per request, never cached."""
    model_config = ConfigDict(frozen=True)

    industry_templates: list[IndustryTemplate] = []
    metric_types: list[MetricType] = []
    platforms: list[Platform] = []
    objective_performance: list[ObjectivePerformance] = []
