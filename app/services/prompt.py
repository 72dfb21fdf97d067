"""Prompt composition for OKR suggestions.

``build_suggestion_prompt`` is a pure function of the request and its
reference context: no clock, no randomness.  Identical inputs always render
byte-identical documents.  Any optional value or collection that is missing
renders as ``Not specified`` so the section layout never changes.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass

from app.core.constants import (
    DEFAULT_METRIC_UNIT,
    NOT_SPECIFIED,
    SUGGESTION_COUNT_RANGE,
    SUGGESTION_EXAMPLE,
    TOP_CATEGORY_LIMIT,
)
from app.models.context import ReferenceContext
from app.models.enums import Timeframe
from app.models.suggestion import SuggestionRequest

SUGGESTIONS_SYSTEM_PROMPT = (
    "You are an OKR strategist for marketing and growth teams. "
    "You answer only with the JSON array requested, never with prose."
)


@dataclass(frozen=True)
class IndustryInsights:
    average_completion: float
    top_categories: list[str]
    timeframes: list[str]
    template_count: int


def summarize_industry(context: ReferenceContext) -> IndustryInsights:
    """Aggregate historical performance into a short industry summary.

    Categories are ranked by occurrence count, highest first; ties keep the
    order the samples were fetched in.
    """
    samples = context.objective_performance

    average = 0.0
    if samples:
        average = sum(s.completion_rate for s in samples) / len(samples)

    counts: dict[str, int] = {}
    for sample in samples:
        if sample.category:
            counts[sample.category] = counts.get(sample.category, 0) + 1
    ranked = sorted(counts, key=lambda category: counts[category], reverse=True)

    timeframes: list[str] = []
    for sample in samples:
        if sample.granularity and sample.granularity not in timeframes:
            timeframes.append(sample.granularity)

    return IndustryInsights(
        average_completion=average,
        top_categories=ranked[:TOP_CATEGORY_LIMIT],
        timeframes=timeframes,
        template_count=len(context.industry_templates),
    )


def _value(value: str | None) -> str:
    if value is None or not value.strip():
        return NOT_SPECIFIED
    return value.strip()


def _joined(values: Iterable[str] | None) -> str:
    cleaned = [v.strip() for v in (values or []) if v and v.strip()]
    return ", ".join(cleaned) if cleaned else NOT_SPECIFIED


def _bullets(lines: list[str]) -> str:
    if not lines:
        return f"- {NOT_SPECIFIED}"
    return "\n".join(f"- {line}" for line in lines)


def render_industry_insights(insights: IndustryInsights) -> str:
    return _bullets([
        f"Average Historical Completion: {insights.average_completion:.1f}%",
        f"Top Categories: {_joined(insights.top_categories)}",
        f"Observed Timeframes: {_joined(insights.timeframes)}",
        f"Available Templates: {insights.template_count}",
    ])


def _brand_section(request: SuggestionRequest) -> str:
    return _bullets([
        f"Brand Name: {request.brand_name}",
        f"Industry: {request.industry}",
        f"Key Product: {_value(request.key_product)}",
        f"Product Category: {_value(request.product_category)}",
        f"Key Competition: {_joined(request.key_competition)}",
        f"Major Keywords: {_joined(request.major_keywords)}",
        f"Current Objective: {_value(request.objective)}",
        f"Previous Objectives: {_joined(request.historical_okrs)}",
    ])


def _metrics_section(context: ReferenceContext) -> str:
    return _bullets([
        f"{m.code}: {_value(m.description)} ({m.unit or DEFAULT_METRIC_UNIT})"
        for m in context.metric_types
    ])


def _platforms_section(context: ReferenceContext) -> str:
    return _bullets([
        f"{p.display_name or p.name} [{p.name}] ({_value(p.category)})"
        for p in context.platforms
    ])


def _history_section(context: ReferenceContext) -> str:
    return _bullets([
        f"{s.title}: achieved {s.completion_rate:.1f}% ({_value(s.granularity)})"
        for s in context.objective_performance
    ])


def _output_section(request: SuggestionRequest) -> str:
    low, high = SUGGESTION_COUNT_RANGE
    timeframes = ", ".join(t.value for t in Timeframe)
    example = json.dumps([SUGGESTION_EXAMPLE], indent=2, sort_keys=False)
    return (
        f"Return {low}-{high} suggestions for {request.brand_name} as a JSON array. "
        "Each object must contain:\n"
        "- title: action-oriented objective title\n"
        "- description: the business impact of the objective\n"
        "- category: e.g. Growth, Retention, Efficiency, Awareness\n"
        "- priority: 1 (high), 2 (medium) or 3 (low)\n"
        "- suggestedTargetValue: a number\n"
        f"- suggestedTimeframe: one of {timeframes}\n"
        "- metricTypeId: a code from AVAILABLE METRICS\n"
        "- applicablePlatforms: names from AVAILABLE PLATFORMS (may be empty)\n"
        "- confidenceScore: between 0.0 and 1.0\n"
        "- reasoning: one sentence\n"
        "Example:\n"
        f"{example}"
    )


def build_suggestion_prompt(request: SuggestionRequest, context: ReferenceContext) -> str:
    """Render the instruction document sent to the generation client."""
    sections = [
        (
            f"Suggest OKRs (Objectives and Key Results) for a brand in the "
            f"{request.industry} industry, grounded in the context below."
        ),
        f"BRAND CONTEXT:\n{_brand_section(request)}",
        f"INDUSTRY INSIGHTS:\n{render_industry_insights(summarize_industry(context))}",
        f"AVAILABLE METRICS:\n{_metrics_section(context)}",
        f"AVAILABLE PLATFORMS:\n{_platforms_section(context)}",
        f"HISTORICAL SUCCESS PATTERNS:\n{_history_section(context)}",
        f"OUTPUT FORMAT:\n{_output_section(request)}",
    ]
    return "\n\n".join(sections)
