"""Service exceptions and their FastAPI handlers.

Every failure a caller can see is a ``SuggestionServiceError`` subclass
carrying its HTTP status and public message.  The handlers render them into
the shared ``ErrorResponse`` envelope and attach the request's correlation
id.  Detailed causes are only exposed outside production.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse, Response

from app.core.config import settings
from app.models.enums import ExtractionFailure, FailureKind
from app.models.suggestion import ErrorResponse

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class SuggestionServiceError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500
    public_message: str = "Internal server error"
    kind: FailureKind = FailureKind.internal


class GenerationError(SuggestionServiceError):
    """The remote text-generation call failed or timed out."""

    status_code = 502
    public_message = "AI generation failed"
    kind = FailureKind.generation


class UnusableGenerationError(SuggestionServiceError):
    """The model answered, but no usable JSON array could be extracted."""

    status_code = 502
    public_message = "AI generation returned unusable output"
    kind = FailureKind.unusable_output

    def __init__(self, reason: ExtractionFailure, message: str) -> None:
        self.reason = reason
        super().__init__(message)


class DatabaseError(SuggestionServiceError):
    status_code = 503
    public_message = "Database operation failed"
    kind = FailureKind.database


class InternalServiceError(SuggestionServiceError):
    """Wraps anything unclassified that reaches the route boundary."""


class RateLimitExceededError(SuggestionServiceError):
    status_code = 429
    public_message = "Rate limit exceeded"
    kind = FailureKind.rate_limited

    def __init__(self, retry_after: int) -> None:
        self.retry_after = retry_after
        super().__init__("Too many requests. Please try again later.")


def get_request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _error_payload(
    request: Request,
    error: str,
    message: str | None = None,
    details: list[dict[str, Any]] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    body = ErrorResponse(
        error=error,
        message=message,
        details=details,
        request_id=get_request_id(request),
        **extra,
        timestamp=datetime.now(timezone.utc),
    )
    return body.model_dump(mode="json", by_alias=True, exclude_none=True)


def _validation_details(exc: RequestValidationError) -> list[dict[str, Any]]:
    details: list[dict[str, Any]] = []
    for err in exc.errors():
        # Drop the leading "body"/"query" segment FastAPI adds to every loc.
        loc = [str(part) for part in err.get("loc", ())]
        details.append({
            "field": ".".join(loc[1:]) or (loc[0] if loc else "body"),
            "message": err.get("msg", ""),
            "code": err.get("type", ""),
        })
    return details


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = _validation_details(exc)
    logger.info(
        "request_validation_failed",
        extra={
            "request_id": get_request_id(request),
            "path": request.url.path,
            "fields": [d["field"] for d in details],
        },
    )
    metrics = getattr(request.app.state, "metrics", None)
    if metrics is not None:
        metrics.record_failure(FailureKind.validation)
    return JSONResponse(
        status_code=400,
        content=_error_payload(request, "Validation failed", details=details),
    )


async def service_exception_handler(
    request: Request, exc: SuggestionServiceError
) -> JSONResponse:
    message = None if settings.is_production else str(exc) or None
    content = _error_payload(request, exc.public_message, message=message)
    headers: dict[str, str] = {}

    if isinstance(exc, UnusableGenerationError):
        content["reason"] = exc.reason.value
    if isinstance(exc, RateLimitExceededError):
        # Rate-limit hints are safe to expose in every environment.
        content["message"] = str(exc)
        content["retryAfter"] = exc.retry_after
        headers["Retry-After"] = str(exc.retry_after)

    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Render framework HTTP errors (unknown route, wrong method) in the envelope."""
    if exc.status_code == 404:
        error = "Route not found"
    else:
        error = str(exc.detail)
    content = _error_payload(
        request, error, path=request.url.path, method=request.method
    )
    return JSONResponse(
        status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None)
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort boundary for anything no other handler claimed."""
    request_id = get_request_id(request)
    logger.exception(
        "unhandled_exception",
        extra={"request_id": request_id, "path": request.url.path},
    )
    metrics = getattr(request.app.state, "metrics", None)
    if metrics is not None:
        metrics.record_failure(FailureKind.internal)

    message = None if settings.is_production else str(exc) or None
    content = _error_payload(request, InternalServiceError.public_message, message=message)
    # Runs outside the request-id middleware, so the header is set here.
    headers = {REQUEST_ID_HEADER: request_id} if request_id else None
    return JSONResponse(status_code=500, content=content, headers=headers)


async def request_id_middleware(request: Request, call_next: Any) -> Response:
    """Assign a correlation id to every request and echo it back."""
    request.state.request_id = str(uuid4())
    response: Response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = request.state.request_id
    return response


def register_error_handling(app: FastAPI) -> None:
    app.middleware("http")(request_id_middleware)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SuggestionServiceError, service_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)
