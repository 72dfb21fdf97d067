"""Dependency health checks for the suggestion service.

The generation check and the database check run concurrently and share no
state; each measures its own latency.  The service is healthy only when
both are.
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from datetime import datetime, timezone

from app.core.config import settings
from app.core.constants import HEALTH_ACK_TOKEN, HEALTH_CHECK_MAX_TOKENS, HEALTH_CHECK_PROMPT
from app.db.supabase import get_supabase
from app.models.enums import HealthStatus
from app.models.health import CheckResult, HealthChecks, HealthReport
from app.services.generation import generate_text

logger = logging.getLogger(__name__)

# The reply must lead with the token as a whole word: "OK." passes, "not ok" does not.
_ACK_PATTERN = re.compile(rf"\W*{re.escape(HEALTH_ACK_TOKEN)}\b", re.IGNORECASE)


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


async def check_generation_health() -> CheckResult:
    """Ask the model for an acknowledgement token."""
    start = time.perf_counter()
    try:
        reply = await generate_text(
            HEALTH_CHECK_PROMPT,
            system_prompt="You are a connectivity probe.",
            max_tokens=HEALTH_CHECK_MAX_TOKENS,
            temperature=0.0,
        )
    except Exception as exc:
        logger.warning("health_generation_check_failed", exc_info=True)
        return CheckResult(
            status=HealthStatus.unhealthy,
            latency_ms=_elapsed_ms(start),
            detail=type(exc).__name__,
        )

    acknowledged = _ACK_PATTERN.match(reply.strip()) is not None
    return CheckResult(
        status=HealthStatus.healthy if acknowledged else HealthStatus.unhealthy,
        latency_ms=_elapsed_ms(start),
        detail=None if acknowledged else "unexpected reply",
    )


def _ping_database() -> None:
    get_supabase().table("dim_metric_type").select("id").limit(1).execute()


async def check_database_health() -> CheckResult:
    """Trivial round-trip query against the store."""
    start = time.perf_counter()
    try:
        await asyncio.wait_for(
            asyncio.to_thread(_ping_database),
            timeout=settings.CONTEXT_QUERY_TIMEOUT_SECONDS,
        )
    except Exception as exc:
        logger.warning("health_database_check_failed", exc_info=True)
        return CheckResult(
            status=HealthStatus.unhealthy,
            latency_ms=_elapsed_ms(start),
            detail=type(exc).__name__,
        )
    return CheckResult(status=HealthStatus.healthy, latency_ms=_elapsed_ms(start))


async def run_health_checks() -> HealthReport:
    start = time.perf_counter()
    ai, database = await asyncio.gather(check_generation_health(), check_database_health())

    healthy = ai.status is HealthStatus.healthy and database.status is HealthStatus.healthy
    return HealthReport(
        status=HealthStatus.healthy if healthy else HealthStatus.unhealthy,
        timestamp=datetime.now(timezone.utc),
        response_time_ms=_elapsed_ms(start),
        model=settings.LLM_MODEL,
        checks=HealthChecks(ai=ai, database=database),
    )
