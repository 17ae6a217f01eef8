"""Isolate the JSON payload in free-form LLM output.

Strategies, in priority order:
  1. Fenced code block (```json ... ```) whose body starts with ``{``
  2. Span from the first ``{`` to the last ``}`` (leading/trailing prose)
  3. Everything from the first ``{`` on (truncated object, no closing brace)

Text with no ``{`` at all is not JSON-like and is rejected outright; the
repairer never sees it.
"""

from __future__ import annotations

import logging
import re

from ..exceptions import ExtractionError
from .types import Candidate

logger = logging.getLogger("nova-llm")

# Closing fence is optional: models often stop mid-block.
_FENCE_RE = re.compile(r"```[\w+-]*[ \t]*\n?(.*?)(?:```|\Z)", re.DOTALL)


def extract(raw: str) -> Candidate:
    """Return the most likely JSON region of ``raw``.

    Raises ExtractionError when the text holds no ``{``.
    """
    text = (raw or "").strip()

    for match in _FENCE_RE.finditer(text):
        body = match.group(1).strip()
        if body.startswith("{"):
            logger.debug("Extracted JSON from fenced block (%d chars)", len(body))
            return Candidate(body)

    start = text.find("{")
    if start == -1:
        preview = text[:80].replace("\n", " ")
        raise ExtractionError(f"No JSON object found in model output: {preview!r}")

    end = text.rfind("}")
    if end > start:
        return Candidate(text[start : end + 1])

    return Candidate(text[start:])
