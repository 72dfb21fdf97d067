"""Text-generation client (OpenAI-compatible chat completions via httpx).

Exactly one attempt per call, bounded by ``LLM_TIMEOUT_SECONDS``.  Callers
that need retries or circuit breaking wrap this function themselves.  Every
transport, status, timeout or envelope problem is raised as
``GenerationError`` so it stays distinct from a reply whose content is
unusable.
"""

from __future__ import annotations

import logging

import httpx

from app.core.config import settings
from app.core.errors import GenerationError
from app.services.prompt import SUGGESTIONS_SYSTEM_PROMPT

logger = logging.getLogger(__name__)


def chat_completions_url() -> str:
    if settings.LLM_PROVIDER == "openai":
        return "https://api.openai.com/v1/chat/completions"
    # Allow custom base URL for non-OpenAI providers
    return f"https://api.{settings.LLM_PROVIDER}.com/v1/chat/completions"


async def generate_text(
    prompt: str,
    *,
    system_prompt: str = SUGGESTIONS_SYSTEM_PROMPT,
    max_tokens: int | None = None,
    temperature: float | None = None,
) -> str:
    """Send ``prompt`` to the model once and return the raw reply text."""
    try:
        async with httpx.AsyncClient(timeout=settings.LLM_TIMEOUT_SECONDS) as client:
            response = await client.post(
                chat_completions_url(),
                headers={
                    "Authorization": f"Bearer {settings.LLM_API_KEY}",
                    "Content-Type": "application/json",
                },
                json={
                    "model": settings.LLM_MODEL,
                    "messages": [
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": prompt},
                    ],
                    "temperature": (
                        settings.LLM_TEMPERATURE if temperature is None else temperature
                    ),
                    "max_tokens": settings.LLM_MAX_TOKENS if max_tokens is None else max_tokens,
                },
            )
            response.raise_for_status()
            data = response.json()
            content = data["choices"][0]["message"]["content"]
    except (httpx.HTTPError, KeyError, IndexError, TypeError, ValueError) as exc:
        logger.error(
            "generation_call_failed",
            extra={
                "model": settings.LLM_MODEL,
                "error_type": type(exc).__name__,
                "error_message": str(exc),
            },
        )
        raise GenerationError(
            f"AI generation failed ({type(exc).__name__}): {exc}"
        ) from exc

    if not isinstance(content, str):
        logger.error(
            "generation_call_failed",
            extra={"model": settings.LLM_MODEL, "error_type": "EmptyContent"},
        )
        raise GenerationError("AI generation failed: reply carried no text content")

    return content
