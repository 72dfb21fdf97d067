"""Pydantic models for OKR suggestions.

Covers the request body, the reconciled suggestion returned to callers,
the response envelope, and the ``okr_master`` insert payload.  Wire names
are camelCase; Python attributes stay snake_case.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialised with camelCase aliases."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SuggestionRequest(CamelModel):
    """Body of POST /api/v1/suggestions."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        str_strip_whitespace=True,
    )

    industry: str = Field(min_length=1)
    brand_name: str = Field(min_length=1)
    tenant_id: UUID
    key_product: str | None = None
    product_category: str | None = None
    key_competition: list[str] | None = None
    major_keywords: list[str] | None = None
    objective: str | None = None
    historical_okrs: list[str] | None = Field(default=None, alias="historicalOKRs")


class OKRSuggestion(CamelModel):
    """A reconciled suggestion; every reference points into the request's taxonomy."""
    id: UUID
    title: str
    description: str = ""
    category: str
    priority: int = Field(ge=1, le=3)
    suggested_target_value: float | None = None
    suggested_timeframe: str | None = None
    applicable_platforms: list[UUID] = []
    metric_type_id: UUID | None = None
    confidence_score: float = Field(ge=0.0, le=1.0)
    reasoning: str


class SuggestionMetadata(CamelModel):
    industry: str
    brand_context: str
    generated_at: datetime
    confidence: float


class SuggestionsData(CamelModel):
    suggestions: list[OKRSuggestion] = []
    metadata: SuggestionMetadata


class SuggestionsResponse(CamelModel):
    """Full response for POST /api/v1/suggestions."""
    success: bool = True
    data: SuggestionsData
    request_id: str | None = None
    timestamp: datetime


# --- Template persistence ---

class StoreTemplateRequest(CamelModel):
    """Body of POST /api/v1/suggestions/templates."""
    industry: str = Field(min_length=1)
    suggestion: OKRSuggestion


class OKRTemplateCreate(BaseModel):
    """Payload for inserting a suggestion into ``okr_master``."""
    industry: str
    category: str
    objective_title: str
    objective_description: str
    suggested_timeframe: str | None = None
    priority_level: int
    tags: list[str]


class StoredTemplate(CamelModel):
    id: UUID


class StoreTemplateResponse(CamelModel):
    success: bool = True
    data: StoredTemplate
    request_id: str | None = None
    timestamp: datetime


class ErrorResponse(CamelModel):
    """Failure envelope shared by every error handler."""
    success: bool = False
    error: str
    message: str | None = None
    details: list[dict[str, Any]] | None = None
    path: str | None = None
    method: str | None = None
    request_id: str | None = None
    timestamp: datetime
