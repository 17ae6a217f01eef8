"""Value types that flow through one structured generation call."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .schema import Schema


class GenerationStyle(str, Enum):
    RETRY = "retry"  # full repair pipeline, bounded retries with backoff
    SINGLE_SHOT = "single-shot"  # one call, direct parse, first failure is final


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay: float = 1.0  # seconds

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0:
            raise ValueError("base_delay must not be negative")

    def delay_for(self, attempt: int) -> float:
        """Linear backoff slept after a failed attempt (1-based)."""
        return attempt * self.base_delay


@dataclass(frozen=True)
class GenerateOptions:
    temperature: float | None = None
    max_tokens: int | None = None
    system_prompt: str | None = None


@dataclass(frozen=True)
class GenerationRequest:
    prompt: str
    schema: Schema
    temperature: float | None = None
    system_prompt: str | None = None
    max_tokens: int | None = None


@dataclass
class Candidate:
    """Substring of model output believed to hold the JSON payload."""

    text: str
    fixes: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.text:
            raise ValueError("Candidate text must not be empty")


@dataclass
class GenerationAttempt:
    attempt_number: int
    raw_output: str = ""
    candidate: Candidate | None = None
    coerced_value: Any = None
    error: Exception | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None
