"""Shared test fixtures.

Provides a ``test_client`` for FastAPI, a chainable mock Supabase table, a
reference context with a small taxonomy, and a helper building mocked
``httpx.AsyncClient`` instances.
"""

import os
from collections.abc import Generator
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import UUID

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-key")
os.environ.setdefault("LLM_API_KEY", "sk-test")

TENANT_ID = UUID("6f1c2b9e-3d4a-4e5f-8a7b-9c0d1e2f3a4b")
METRIC_FOLLOWERS = UUID("11111111-1111-4111-8111-111111111111")
METRIC_SIGNUPS = UUID("22222222-2222-4222-8222-222222222222")
PLATFORM_INSTAGRAM = UUID("33333333-3333-4333-8333-333333333333")
PLATFORM_TIKTOK = UUID("44444444-4444-4444-8444-444444444444")


def chainable_table_mock() -> MagicMock:
    """Return a mock that supports fluent chaining."""
    m = MagicMock()
    for method in ("select", "insert", "eq", "ilike", "limit", "order"):
        getattr(m, method).return_value = m
    return m


def make_table_dispatch(**tables: MagicMock) -> MagicMock:
    """Return a Supabase mock whose .table(name) dispatches to per-table mocks."""
    sb = MagicMock()

    def _table_side_effect(name: str) -> MagicMock:
        return tables.get(name, chainable_table_mock())

    sb.table.side_effect = _table_side_effect
    return sb


def table_returning(rows: list[dict]) -> MagicMock:
    table = chainable_table_mock()
    table.execute.return_value = MagicMock(data=rows)
    return table


def mock_async_client(response: MagicMock | None = None, error: Exception | None = None) -> AsyncMock:
    """Build an ``httpx.AsyncClient`` stand-in usable as an async context manager."""
    client = AsyncMock()
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    if error is not None:
        client.post = AsyncMock(side_effect=error)
    else:
        client.post = AsyncMock(return_value=response)
    return client


def chat_response(content: str | None) -> MagicMock:
    response = MagicMock()
    response.status_code = 200
    response.raise_for_status = MagicMock()
    response.json.return_value = {"choices": [{"message": {"content": content}}]}
    return response


METRIC_ROWS = [
    {
        "id": str(METRIC_FOLLOWERS),
        "code": "followers",
        "description": "Total followers across channels",
        "unit": "count",
        "category": "audience",
    },
    {
        "id": str(METRIC_SIGNUPS),
        "code": "signups",
        "description": "New account registrations",
        "unit": None,
        "category": "conversion",
    },
]

PLATFORM_ROWS = [
    {
        "id": str(PLATFORM_INSTAGRAM),
        "name": "instagram",
        "display_name": "Instagram",
        "category": "social",
    },
    {
        "id": str(PLATFORM_TIKTOK),
        "name": "tiktok",
        "display_name": "TikTok",
        "category": "social",
    },
]


@pytest.fixture()
def reference_context():
    """A ReferenceContext with two metrics, two platforms and some history."""
    from app.models.context import (
        IndustryTemplate,
        MetricType,
        ObjectivePerformance,
        Platform,
        ReferenceContext,
    )

    return ReferenceContext(
        industry_templates=[
            IndustryTemplate(
                id=UUID("55555555-5555-4555-8555-555555555555"),
                industry="fitness",
                category="Growth",
                objective_title="Grow membership base",
                priority_level=1,
            ),
        ],
        metric_types=[MetricType.model_validate(row) for row in METRIC_ROWS],
        platforms=[Platform.model_validate(row) for row in PLATFORM_ROWS],
        objective_performance=[
            ObjectivePerformance(
                title="Reach 10k followers", category="Awareness",
                granularity="monthly", target_value=10000, completion_rate=80.0,
            ),
            ObjectivePerformance(
                title="Lift trial conversion", category="Growth",
                granularity="quarterly", target_value=500, completion_rate=60.0,
            ),
            ObjectivePerformance(
                title="Double reel views", category="Growth",
                granularity="monthly", target_value=2000, completion_rate=100.0,
            ),
        ],
    )


@pytest.fixture()
def suggestion_request():
    from app.models.suggestion import SuggestionRequest

    return SuggestionRequest(industry="fitness", brand_name="Acme", tenant_id=TENANT_ID)


@pytest.fixture()
def test_client() -> Generator[TestClient, None, None]:
    """Provide a FastAPI TestClient with the lifespan (and fresh app state) running."""
    from app.main import app

    with patch("app.main.start_scheduler", return_value=MagicMock(running=False)):
        with TestClient(app) as client:
            yield client
