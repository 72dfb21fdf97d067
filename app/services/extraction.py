"""Best-effort extraction of a JSON array from free model text.

Scraping JSON out of prose is fragile, so it sits behind one narrow
function returning a tagged result.  Only ``parse_generation_output``
turns the failure tags into an exception.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from app.core.errors import UnusableGenerationError
from app.models.enums import ExtractionFailure

logger = logging.getLogger(__name__)

# Greedy: first "[" through the last "]" in the text.
_ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")


@dataclass(frozen=True)
class Found:
    items: list[Any]


@dataclass(frozen=True)
class NotFound:
    pass


@dataclass(frozen=True)
class ParseError:
    message: str


ExtractionResult = Found | NotFound | ParseError


def extract_json_array(text: str) -> ExtractionResult:
    match = _ARRAY_PATTERN.search(text or "")
    if match is None:
        return NotFound()
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        return ParseError(message=f"{exc.msg} at position {exc.pos}")
    if not isinstance(parsed, list):
        return ParseError(message="extracted value is not a JSON array")
    return Found(items=parsed)


def parse_generation_output(text: str) -> list[Any]:
    """Return the raw items of the reply or raise ``UnusableGenerationError``.

    No partial salvage: a reply is either a parseable array or rejected.
    """
    result = extract_json_array(text)

    if isinstance(result, Found):
        return result.items

    if isinstance(result, NotFound):
        reason = ExtractionFailure.no_json_array
        message = "No JSON array found in AI response"
    else:
        reason = ExtractionFailure.invalid_json
        message = f"AI response contained an invalid JSON array: {result.message}"

    logger.error(
        "generation_output_unusable",
        extra={"reason": reason.value, "response_length": len(text or "")},
    )
    raise UnusableGenerationError(reason, message)
