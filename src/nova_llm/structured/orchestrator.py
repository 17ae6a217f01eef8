"""Generation orchestrator — drives a provider until it yields a valid object.

Two strategies share one contract:

  RETRY        full repair pipeline; any failure is retried up to
               ``max_attempts`` with linear backoff (attempt * base_delay)
  SINGLE_SHOT  one call, extraction + direct parse; the first failure is final

Either way the caller gets the validated value, or a GenerationError naming
the provider and chaining the last underlying cause. Cancellation is never
retried.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from ..exceptions import (
    FailureCategory,
    GenerationError,
    ProviderUnavailableError,
)
from .pipeline import process_response
from .schema import Schema
from .types import (
    GenerateOptions,
    GenerationAttempt,
    GenerationRequest,
    GenerationStyle,
    RetryPolicy,
)

if TYPE_CHECKING:
    from ..providers.base import LLMProvider
    from ..stats import GenerationStats

logger = logging.getLogger("nova-llm")

JSON_SYSTEM_PROMPT = (
    "You are a helpful assistant that responds only with valid JSON. "
    "Do not include any explanations, formatting, or additional text."
)

# Lower temperature for more consistent JSON.
DEFAULT_TEMPERATURE = 0.1


def build_structured_prompt(prompt: str, schema: Schema) -> str:
    """Wrap a task prompt with JSON-only instructions and the expected shape."""
    return f"""{prompt}

Please respond with valid JSON that matches this exact structure:
{schema.describe()}

Important:
- Respond ONLY with valid JSON
- Do not include markdown code blocks
- Do not include any explanations
- Make sure all required fields are included
- Numbers must be plain numbers (75, not "75%")
- Booleans must be true or false (not strings)

JSON Response:"""


class StructuredGenerator:
    """Runs the structured-output state machine for one provider call at a time."""

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        style: GenerationStyle = GenerationStyle.RETRY,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        stats: GenerationStats | None = None,
    ):
        self.policy = policy or RetryPolicy()
        self.style = GenerationStyle(style)
        self.stats = stats
        self._sleep = sleep

    @property
    def max_attempts(self) -> int:
        if self.style is GenerationStyle.SINGLE_SHOT:
            return 1
        return self.policy.max_attempts

    async def generate_object(
        self, provider: LLMProvider, request: GenerationRequest
    ) -> Any:
        prompt = build_structured_prompt(request.prompt, request.schema)
        options = GenerateOptions(
            temperature=(
                request.temperature
                if request.temperature is not None
                else DEFAULT_TEMPERATURE
            ),
            max_tokens=request.max_tokens,
            system_prompt=request.system_prompt or JSON_SYSTEM_PROMPT,
        )
        repair_syntax = self.style is GenerationStyle.RETRY
        history: list[GenerationAttempt] = []
        started = time.monotonic()

        for number in range(1, self.max_attempts + 1):
            attempt = GenerationAttempt(attempt_number=number)
            history.append(attempt)
            try:
                raw = await provider.generate(prompt, options)
                result = process_response(
                    raw, request.schema, repair_syntax=repair_syntax, attempt=attempt
                )
            except ProviderUnavailableError:
                raise
            except Exception as e:  # recorded, retried, then chained below
                attempt.error = e
                logger.warning(
                    "%s attempt %d/%d failed (%s): %s",
                    provider.name,
                    number,
                    self.max_attempts,
                    _category_of(e).value,
                    e,
                )
            else:
                elapsed = time.monotonic() - started
                if self.stats is not None:
                    self.stats.record_success(provider.name, elapsed, number)
                logger.debug(
                    "%s produced %s on attempt %d (%.2fs)",
                    provider.name,
                    request.schema.name,
                    number,
                    elapsed,
                )
                return result.value

            if number < self.max_attempts:
                await self._sleep(self.policy.delay_for(number))

        last_error = history[-1].error
        category = _category_of(last_error)
        if self.stats is not None:
            self.stats.record_failure(
                provider.name, category.value, time.monotonic() - started, len(history)
            )
        logger.error(
            "Failed to generate structured object with %s after %d attempt(s): %s",
            provider.name,
            len(history),
            last_error,
        )
        raise GenerationError(
            f"Failed to generate structured object with {provider.name}: {last_error}",
            category=category,
            attempts=history,
        ) from last_error


def _category_of(error: BaseException | None) -> FailureCategory:
    category = getattr(error, "category", None)
    if isinstance(category, FailureCategory):
        return category
    # Anything a provider raises that we did not classify is transport trouble.
    return FailureCategory.NETWORK
