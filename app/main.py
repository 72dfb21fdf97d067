"""FastAPI application entry point.

Configures CORS, structured logging, error handling, per-app state (rate
limiter, metrics, APScheduler sweep) and router registration.
"""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.errors import register_error_handling
from app.core.logging import setup_logging
from app.core.rate_limit import SlidingWindowRateLimiter, enforce_rate_limit
from app.routers import health, suggestions
from app.scheduler.jobs import shutdown_scheduler, start_scheduler
from app.services.metrics import ServiceMetrics

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: build per-app state, start and stop the sweep."""
    setup_logging()
    application.state.rate_limiter = SlidingWindowRateLimiter(
        max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
        window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
    )
    application.state.metrics = ServiceMetrics()
    scheduler = start_scheduler(application.state.rate_limiter)
    logger.info(
        "Application starting up",
        extra={
            "environment": settings.ENVIRONMENT,
            "llm_model": settings.LLM_MODEL,
            "llm_configured": bool(settings.LLM_API_KEY),
        },
    )
    yield
    shutdown_scheduler(scheduler)
    logger.info("Application shutting down")


app = FastAPI(
    title="OKR Suggestion Service",
    description="AI-generated OKR suggestions grounded in brand context and industry history",
    version="1.0.0",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# CORS Configuration
# ---------------------------------------------------------------------------
_raw_origins = settings.ALLOWED_ORIGINS.strip()
if _raw_origins == "*":
    _allowed_origins: list[str] = ["*"]
else:
    _allowed_origins = [o.strip() for o in _raw_origins.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "Retry-After"],
)

register_error_handling(app)

# ---------------------------------------------------------------------------
# Router Registration
# ---------------------------------------------------------------------------
app.include_router(health.router, tags=["Health"])
app.include_router(
    suggestions.router,
    prefix="/api/v1",
    tags=["Suggestions"],
    dependencies=[Depends(enforce_rate_limit)],
)
