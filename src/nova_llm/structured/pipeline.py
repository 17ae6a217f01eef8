"""One pass of raw model text through extract → repair → parse → coerce → validate."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ..exceptions import CoercionError
from .coerce import coerce
from .extract import extract
from .repair import parse_candidate, repair
from .schema import Schema
from .types import Candidate, GenerationAttempt
from .validate import validate

logger = logging.getLogger("nova-llm")


@dataclass
class ProcessedResponse:
    value: Any
    candidate: Candidate
    coerced: Any
    transformations: list[str] = field(default_factory=list)


def process_response(
    raw: str,
    schema: Schema,
    *,
    repair_syntax: bool = True,
    attempt: GenerationAttempt | None = None,
) -> ProcessedResponse:
    """Turn raw model output into a validated value.

    Raises the stage-specific GenerationError subclass on failure. When an
    ``attempt`` is given, it is filled in as each stage completes so the
    caller keeps diagnostics for failed attempts too.
    """
    if attempt is not None:
        attempt.raw_output = raw

    candidate = extract(raw)
    if repair_syntax:
        candidate = repair(candidate)
    if attempt is not None:
        attempt.candidate = candidate

    parsed = parse_candidate(candidate)

    try:
        coerced = coerce(parsed, schema)
    except Exception as e:
        raise CoercionError(f"Coercion failed: {e}") from e
    if attempt is not None:
        attempt.coerced_value = coerced

    value = validate(coerced, schema)

    transformations = list(candidate.fixes)
    if coerced != parsed:
        transformations.append("coercion")
    logger.debug(
        "Processed %s response (%d chars, transformations: %s)",
        schema.name,
        len(raw),
        ", ".join(transformations) or "none",
    )
    return ProcessedResponse(value, candidate, coerced, transformations)
