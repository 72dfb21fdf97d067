"""Reconciliation of untrusted generated items against the reference taxonomy.

Every field coming back from the model is treated as untrusted: numbers are
clamped, free-text metric and platform hints are resolved against the
taxonomy fetched for the same request, and identifiers are always freshly
generated.  One bad item is dropped with a warning; the rest of the batch
still goes through.
"""

from __future__ import annotations

import logging
import math
from typing import Any
from uuid import UUID, uuid4

from app.core.constants import (
    CONFIDENCE_MAX,
    CONFIDENCE_MIN,
    DEFAULT_CATEGORY,
    DEFAULT_CONFIDENCE,
    DEFAULT_PRIORITY,
    PRIORITY_MAX,
    PRIORITY_MIN,
)
from app.models.context import MetricType, Platform, ReferenceContext
from app.models.suggestion import OKRSuggestion

logger = logging.getLogger(__name__)


def _text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _number(value: Any, field: str) -> float:
    # bool is an int subclass; "true" is not a score.
    if isinstance(value, bool):
        raise ValueError(f"{field} must be numeric, got a boolean")
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ValueError(f"{field} must be numeric, got {value!r}") from exc
    if math.isnan(number):
        raise ValueError(f"{field} must be numeric, got NaN")
    return number


def resolve_metric_type(
    metric_hint: Any,
    title: str,
    metric_types: list[MetricType],
) -> UUID | None:
    """Resolve a metric hint to a taxonomy id.

    Fallback order:
      1. exact code match, case-insensitive
      2. description contains the first word of the title
      3. first taxonomy entry
    Returns None only when the taxonomy is empty.
    """
    if not metric_types:
        return None

    hint = _text(metric_hint)
    if hint is not None:
        lowered = hint.lower()
        for metric in metric_types:
            if metric.code.lower() == lowered:
                return metric.id

    words = title.lower().split()
    if words:
        first_word = words[0]
        for metric in metric_types:
            if metric.description and first_word in metric.description.lower():
                return metric.id

    return metric_types[0].id


def resolve_platforms(hints: Any, platforms: list[Platform]) -> list[UUID]:
    """Resolve platform-name hints; unmatched hints are dropped."""
    if not isinstance(hints, list):
        return []

    resolved: list[UUID] = []
    for raw_hint in hints:
        hint = _text(raw_hint)
        if hint is None:
            continue
        lowered = hint.lower()
        for platform in platforms:
            names = (platform.name, platform.display_name or "")
            if any(lowered in name.lower() for name in names):
                if platform.id not in resolved:
                    resolved.append(platform.id)
                break
    return resolved


def clamp_priority(value: Any) -> int:
    if value is None:
        return DEFAULT_PRIORITY
    number = _number(value, "priority")
    return int(round(max(PRIORITY_MIN, min(PRIORITY_MAX, number))))


def clamp_confidence(value: Any) -> float:
    if value is None:
        return DEFAULT_CONFIDENCE
    number = _number(value, "confidenceScore")
    return max(CONFIDENCE_MIN, min(CONFIDENCE_MAX, number))


def _target_value(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def reconcile_suggestion(raw: Any, context: ReferenceContext) -> OKRSuggestion:
    """Turn one raw generated item into a validated suggestion.

    Raises ValueError when the item cannot be used (not an object or
    without a title) or carries unusable numbers.
    """
    if not isinstance(raw, dict):
        raise ValueError(f"suggestion must be a JSON object, got {type(raw).__name__}")

    title = _text(raw.get("title"))
    if title is None:
        raise ValueError("suggestion is missing a title")

    category = _text(raw.get("category")) or DEFAULT_CATEGORY
    reasoning = (
        _text(raw.get("reasoning"))
        or f"AI-generated suggestion for {category.lower()} objectives"
    )

    return OKRSuggestion(
        id=uuid4(),
        title=title,
        description=_text(raw.get("description")) or "",
        category=category,
        priority=clamp_priority(raw.get("priority")),
        suggested_target_value=_target_value(raw.get("suggestedTargetValue")),
        suggested_timeframe=_text(raw.get("suggestedTimeframe")),
        applicable_platforms=resolve_platforms(raw.get("applicablePlatforms"), context.platforms),
        metric_type_id=resolve_metric_type(raw.get("metricTypeId"), title, context.metric_types),
        confidence_score=clamp_confidence(raw.get("confidenceScore")),
        reasoning=reasoning,
    )


def reconcile_suggestions(raw_items: list[Any], context: ReferenceContext) -> list[OKRSuggestion]:
    """Reconcile a batch in model order, skipping items that fail."""
    suggestions: list[OKRSuggestion] = []

    for index, raw in enumerate(raw_items):
        try:
            suggestions.append(reconcile_suggestion(raw, context))
        except Exception as exc:
            logger.warning(
                "suggestion_skipped",
                extra={
                    "index": index,
                    "title": raw.get("title") if isinstance(raw, dict) else None,
                    "error_message": str(exc),
                },
            )

    if len(suggestions) < len(raw_items):
        logger.info(
            "suggestions_reconciled",
            extra={"received": len(raw_items), "kept": len(suggestions)},
        )
    return suggestions


def calculate_overall_confidence(suggestions: list[OKRSuggestion]) -> float:
    """Mean confidence rounded to 2 decimals; 0.0 for an empty batch."""
    if not suggestions:
        return 0.0
    average = sum(s.confidence_score for s in suggestions) / len(suggestions)
    return round(average, 2)
