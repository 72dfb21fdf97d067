"""OKR suggestion endpoints.

POST /api/v1/suggestions            generate reconciled suggestions
POST /api/v1/suggestions/templates  store one suggestion in ``okr_master``
GET  /api/v1/suggestions/health     generation + database checks
GET  /api/v1/suggestions/metrics    service counters
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Request
from starlette.responses import JSONResponse

from app.core.constants import SERVICE_NAME
from app.core.errors import InternalServiceError, SuggestionServiceError, get_request_id
from app.models.enums import FailureKind, HealthStatus
from app.models.health import MetricsResponse
from app.models.suggestion import (
    StoredTemplate,
    StoreTemplateRequest,
    StoreTemplateResponse,
    SuggestionRequest,
    SuggestionsResponse,
)
from app.services.health import run_health_checks
from app.services.metrics import ServiceMetrics
from app.services.suggestions import generate_okr_suggestions, store_okr_template

logger = logging.getLogger(__name__)

router = APIRouter()


def _metrics(request: Request) -> ServiceMetrics:
    return request.app.state.metrics


@router.post("/suggestions", response_model=SuggestionsResponse)
async def create_suggestions(
    body: SuggestionRequest, request: Request
) -> SuggestionsResponse:
    """Generate AI-powered OKR suggestions for a brand."""
    request_id = get_request_id(request)
    metrics = _metrics(request)
    start = time.perf_counter()

    logger.info(
        "create_suggestions_started",
        extra={
            "request_id": request_id,
            "brand_name": body.brand_name,
            "industry": body.industry,
        },
    )

    try:
        data = await generate_okr_suggestions(body)
    except SuggestionServiceError as exc:
        metrics.record_failure(exc.kind, (time.perf_counter() - start) * 1000)
        logger.error(
            "create_suggestions_failed",
            extra={
                "request_id": request_id,
                "error_kind": exc.kind.value,
                "error_message": str(exc),
            },
        )
        raise
    except Exception as exc:
        metrics.record_failure(FailureKind.internal, (time.perf_counter() - start) * 1000)
        logger.exception(
            "create_suggestions_crashed",
            extra={"request_id": request_id},
        )
        raise InternalServiceError(f"{type(exc).__name__}: {exc}") from exc

    metrics.record_success(
        body.industry, len(data.suggestions), (time.perf_counter() - start) * 1000
    )
    return SuggestionsResponse(
        data=data,
        request_id=request_id,
        timestamp=datetime.now(timezone.utc),
    )


@router.post("/suggestions/templates", response_model=StoreTemplateResponse, status_code=201)
async def create_template(
    body: StoreTemplateRequest, request: Request
) -> StoreTemplateResponse:
    """Persist a reconciled suggestion as a reusable industry template."""
    try:
        template_id = await asyncio.to_thread(store_okr_template, body.suggestion, body.industry)
    except SuggestionServiceError as exc:
        _metrics(request).record_failure(exc.kind)
        raise

    return StoreTemplateResponse(
        data=StoredTemplate(id=template_id),
        request_id=get_request_id(request),
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/suggestions/health")
async def suggestions_health() -> Any:
    """Return 200 when both the model and the database answer, else 503."""
    report = await run_health_checks()
    payload = report.model_dump(mode="json", by_alias=True)

    if report.status is not HealthStatus.healthy:
        logger.warning(
            "suggestions_health_degraded",
            extra={
                "ai": report.checks.ai.status.value,
                "database": report.checks.database.status.value,
            },
        )
        return JSONResponse(status_code=503, content=payload)

    return payload


@router.get("/suggestions/metrics", response_model=MetricsResponse)
async def suggestions_metrics(request: Request) -> MetricsResponse:
    metrics = _metrics(request)
    return MetricsResponse(
        timestamp=datetime.now(timezone.utc),
        service=SERVICE_NAME,
        version=request.app.version,
        uptime_seconds=metrics.uptime_seconds,
        metrics=metrics.snapshot(),
    )
