"""Strict handling of model output: parse, then validate against the schema.

Parsing is two-stage: a strict ``json.loads`` and one fallback that pulls a
fenced ```json block out of the content. Nothing else is repaired.
"""

from __future__ import annotations

import json
import re
from typing import Any

import pydantic

from paperlens.application.schemas import Analysis, CardinalityBounds
from paperlens.domain.errors import (
    EmptyResponseError,
    InvalidResponseError,
    SchemaValidationError,
)

_FENCED_JSON = re.compile(r"```(?:json)?\s*(\{[\s\S]*\})\s*```")


def parse_model_json(content: str | None) -> Any:
    if content is None or not content.strip():
        raise EmptyResponseError("Empty response from LLM")
    try:
        return json.loads(content)
    except json.JSONDecodeError as ex:
        m = _FENCED_JSON.search(content)
        if m is None:
            raise InvalidResponseError(f"Invalid JSON response: {ex}") from ex
        try:
            return json.loads(m.group(1))
        except json.JSONDecodeError as inner:
            raise InvalidResponseError(f"Invalid JSON in fenced block: {inner}") from inner


def validate_analysis(data: Any, bounds: CardinalityBounds | None = None) -> Analysis:
    try:
        return Analysis.model_validate(data, context={"bounds": bounds or CardinalityBounds()})
    except pydantic.ValidationError as ex:
        raise SchemaValidationError(
            message=f"Analysis failed schema validation ({ex.error_count()} errors)",
            errors=tuple(ex.errors(include_url=False, include_context=False)),
        ) from ex


def parse_analysis_response(
    content: str | None, bounds: CardinalityBounds | None = None
) -> Analysis:
    """Content string -> validated Analysis, or a typed GenerationError."""
    return validate_analysis(parse_model_json(content), bounds)
