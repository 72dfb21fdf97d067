"""Application constants.

Placeholders, clamping bounds, and the reference example used when
composing OKR suggestion prompts.
"""

from typing import Any

SERVICE_NAME: str = "okr-suggestions"
SERVICE_DISPLAY_NAME: str = "OKR AI Suggestions"

# ---------------------------------------------------------------------------
# Prompt rendering
# ---------------------------------------------------------------------------
NOT_SPECIFIED: str = "Not specified"
DEFAULT_METRIC_UNIT: str = "count"
TOP_CATEGORY_LIMIT: int = 3
SUGGESTION_COUNT_RANGE: tuple[int, int] = (5, 8)

# Shown to the model as the single concrete example of the expected shape.
SUGGESTION_EXAMPLE: dict[str, Any] = {
    "title": "Increase Monthly Active Users",
    "description": (
        "Grow engaged usage through onboarding improvements and "
        "targeted lifecycle campaigns"
    ),
    "category": "Growth",
    "priority": 1,
    "suggestedTargetValue": 25000,
    "suggestedTimeframe": "monthly",
    "metricTypeId": "metric_code_from_available_metrics",
    "applicablePlatforms": ["platform_name_from_available_platforms"],
    "confidenceScore": 0.85,
    "reasoning": "Active usage is the leading indicator of retained revenue",
}

# ---------------------------------------------------------------------------
# Reconciliation bounds
# ---------------------------------------------------------------------------
PRIORITY_MIN: int = 1
PRIORITY_MAX: int = 3
DEFAULT_PRIORITY: int = 2
CONFIDENCE_MIN: float = 0.0
CONFIDENCE_MAX: float = 1.0
DEFAULT_CONFIDENCE: float = 0.0
DEFAULT_CATEGORY: str = "General"

# ---------------------------------------------------------------------------
# Reference context queries
# ---------------------------------------------------------------------------
TEMPLATE_LIMIT: int = 20
PERFORMANCE_SAMPLE_LIMIT: int = 10

# ---------------------------------------------------------------------------
# Health checks
# ---------------------------------------------------------------------------
HEALTH_CHECK_PROMPT: str = 'Connection test. Reply with "OK".'
HEALTH_ACK_TOKEN: str = "ok"
HEALTH_CHECK_MAX_TOKENS: int = 5
