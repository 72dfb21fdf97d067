"""Reference context gathering for OKR suggestions.

Issues four independent Supabase reads concurrently and bundles them into a
``ReferenceContext``.  The supabase-py client is synchronous, so each read
runs in a worker thread under its own deadline.  A read that fails or
times out degrades to an empty collection; the other three are unaffected
and nothing is retried.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from typing import Any, TypeVar
from uuid import UUID

from app.core.config import settings
from app.core.constants import PERFORMANCE_SAMPLE_LIMIT, TEMPLATE_LIMIT
from app.db.supabase import get_supabase
from app.models.context import (
    IndustryTemplate,
    MetricType,
    ObjectivePerformance,
    Platform,
    ReferenceContext,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def fetch_industry_templates(industry: str) -> list[IndustryTemplate]:
    """Active ``okr_master`` templates for the industry, by priority then category."""
    client = get_supabase()
    result = (
        client.table("okr_master")
        .select(
            "id, industry, category, objective_title, objective_description, "
            "suggested_timeframe, priority_level, tags"
        )
        .ilike("industry", f"%{industry}%")
        .eq("is_active", True)
        .order("priority_level")
        .order("category")
        .limit(TEMPLATE_LIMIT)
        .execute()
    )
    return [IndustryTemplate.model_validate(row) for row in (result.data or [])]


def fetch_metric_types() -> list[MetricType]:
    """The full metric-type taxonomy, by category then code."""
    client = get_supabase()
    result = (
        client.table("dim_metric_type")
        .select("id, code, description, unit, category")
        .order("category")
        .order("code")
        .execute()
    )
    return [MetricType.model_validate(row) for row in (result.data or [])]


def fetch_platforms() -> list[Platform]:
    """Active platforms, by category then display name."""
    client = get_supabase()
    result = (
        client.table("dim_platform")
        .select("id, name, display_name, category")
        .eq("is_active", True)
        .order("category")
        .order("display_name")
        .execute()
    )
    return [Platform.model_validate(row) for row in (result.data or [])]


def _completion_rate(row: dict[str, Any]) -> float:
    """Percentage of target reached, capped at 100; 0 without a positive target."""
    target = row.get("target_value") or 0
    current = row.get("current_value") or 0
    if target <= 0:
        return 0.0
    return round(min(100.0, float(current) / float(target) * 100), 2)


def fetch_objective_performance(industry: str, tenant_id: UUID) -> list[ObjectivePerformance]:
    """Most recent active objectives of the tenant within the industry."""
    client = get_supabase()
    result = (
        client.table("okr_objectives")
        .select(
            "title, category, granularity, target_value, current_value, "
            "brands!inner(industries!inner(slug))"
        )
        .ilike("brands.industries.slug", f"%{industry}%")
        .eq("tenant_id", str(tenant_id))
        .eq("is_active", True)
        .order("created_at", desc=True)
        .limit(PERFORMANCE_SAMPLE_LIMIT)
        .execute()
    )
    return [
        ObjectivePerformance(
            title=row["title"],
            category=row.get("category"),
            granularity=row.get("granularity"),
            target_value=row.get("target_value"),
            completion_rate=_completion_rate(row),
        )
        for row in (result.data or [])
    ]


async def _fetch_or_empty(
    collection: str,
    fetch: Callable[..., Sequence[T]],
    *args: Any,
) -> list[T]:
    """Run one blocking read with a deadline; any failure yields ``[]``."""
    try:
        rows = await asyncio.wait_for(
            asyncio.to_thread(fetch, *args),
            timeout=settings.CONTEXT_QUERY_TIMEOUT_SECONDS,
        )
    except Exception as exc:
        logger.warning(
            "context_query_failed",
            extra={
                "collection": collection,
                "error_type": type(exc).__name__,
                "error_message": str(exc),
            },
        )
        return []
    return list(rows)


async def gather_reference_context(industry: str, tenant_id: UUID) -> ReferenceContext:
    """Fetch the four reference collections concurrently.

    Waits for all four reads; individual failures never abort the gather.
    """
    templates, metric_types, platforms, performance = await asyncio.gather(
        _fetch_or_empty("industry_templates", fetch_industry_templates, industry),
        _fetch_or_empty("metric_types", fetch_metric_types),
        _fetch_or_empty("platforms", fetch_platforms),
        _fetch_or_empty(
            "objective_performance", fetch_objective_performance, industry, tenant_id
        ),
    )

    logger.info(
        "reference_context_gathered",
        extra={
            "industry": industry,
            "templates": len(templates),
            "metric_types": len(metric_types),
            "platforms": len(platforms),
            "performance_samples": len(performance),
        },
    )

    return ReferenceContext(
        industry_templates=templates,
        metric_types=metric_types,
        platforms=platforms,
        objective_performance=performance,
    )
