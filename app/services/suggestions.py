"""OKR suggestion service.

Runs the suggestion pipeline for one request:

1. gather the reference context (templates, metrics, platforms, history)
2. compose the prompt
3. call the generation client once
4. extract the JSON array from the reply
5. reconcile each item against the taxonomy

Nothing is persisted here; storing a suggestion as a reusable template is
the explicit, separate ``store_okr_template`` call.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import UUID

from app.core.errors import DatabaseError
from app.db.supabase import get_supabase
from app.models.suggestion import (
    OKRSuggestion,
    OKRTemplateCreate,
    SuggestionMetadata,
    SuggestionRequest,
    SuggestionsData,
)
from app.services.context import gather_reference_context
from app.services.extraction import parse_generation_output
from app.services.generation import generate_text
from app.services.prompt import build_suggestion_prompt
from app.services.reconciler import calculate_overall_confidence, reconcile_suggestions

logger = logging.getLogger(__name__)


def describe_brand(request: SuggestionRequest) -> str:
    context = f"{request.brand_name} - {request.industry}"
    if request.key_product:
        context += f" ({request.key_product})"
    return context


async def generate_okr_suggestions(request: SuggestionRequest) -> SuggestionsData:
    """Generate reconciled OKR suggestions for a brand.

    Raises
    ------
    GenerationError
        The text-generation call failed.
    UnusableGenerationError
        The reply held no parseable JSON array.
    """
    context = await gather_reference_context(request.industry, request.tenant_id)
    prompt = build_suggestion_prompt(request, context)

    raw_text = await generate_text(prompt)
    raw_items = parse_generation_output(raw_text)
    suggestions = reconcile_suggestions(raw_items, context)

    logger.info(
        "okr_suggestions_generated",
        extra={
            "industry": request.industry,
            "tenant_id": str(request.tenant_id),
            "raw_items": len(raw_items),
            "suggestions": len(suggestions),
        },
    )

    return SuggestionsData(
        suggestions=suggestions,
        metadata=SuggestionMetadata(
            industry=request.industry,
            brand_context=describe_brand(request),
            generated_at=datetime.now(timezone.utc),
            confidence=calculate_overall_confidence(suggestions),
        ),
    )


def store_okr_template(suggestion: OKRSuggestion, industry: str) -> UUID:
    """Insert a suggestion into ``okr_master`` and return the new template id."""
    template = OKRTemplateCreate(
        industry=industry,
        category=suggestion.category,
        objective_title=suggestion.title,
        objective_description=suggestion.description,
        suggested_timeframe=suggestion.suggested_timeframe,
        priority_level=suggestion.priority,
        tags=["ai-generated", f"confidence-{round(suggestion.confidence_score * 100)}"],
    )

    try:
        result = (
            get_supabase()
            .table("okr_master")
            .insert(template.model_dump(mode="json"))
            .execute()
        )
        template_id = UUID(str(result.data[0]["id"]))
    except Exception as exc:
        logger.error(
            "okr_template_persist_failed",
            extra={
                "title": suggestion.title,
                "industry": industry,
                "error_type": type(exc).__name__,
                "error_message": str(exc),
            },
        )
        raise DatabaseError(f"Failed to store OKR template: {exc}") from exc

    logger.info(
        "okr_template_stored",
        extra={"template_id": str(template_id), "industry": industry},
    )
    return template_id
