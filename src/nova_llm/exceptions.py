"""Custom exception hierarchy for nova-llm.

All nova-llm exceptions inherit from NovaError, allowing callers
to catch broad or specific errors:

    try:
        review = await provider.generate_object(request)
    except ValidationFailure as e:
        print(f"Model answered, but not in shape: {e}")
    except GenerationError as e:
        print(f"Could not obtain a structured result: {e}")
    except NovaError as e:
        print(f"nova-llm error: {e}")
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .structured.types import GenerationAttempt


class FailureCategory(str, Enum):
    NETWORK = "network"
    EXTRACTION = "extraction"
    REPAIR = "repair"
    COERCION = "coercion"
    VALIDATION = "validation"
    UNAVAILABLE = "unavailable"


class NovaError(Exception):
    """Base exception for all nova-llm errors."""


class ConfigError(NovaError):
    """Raised when configuration is invalid or missing."""


class ProviderError(NovaError):
    """Raised when an LLM provider call fails."""

    category = FailureCategory.NETWORK


class NetworkError(ProviderError):
    """Raised when the transport to a provider fails (connection, HTTP status)."""


class ProviderUnavailableError(ProviderError):
    """Raised when a provider is known to be unusable; no generation is attempted."""

    category = FailureCategory.UNAVAILABLE


class GenerationError(NovaError):
    """Raised when no valid structured object could be obtained.

    Carries the failure category of the last attempt and the full attempt
    history. The underlying cause is chained as ``__cause__``.
    """

    category: FailureCategory | None = None

    def __init__(
        self,
        message: str,
        *,
        category: FailureCategory | None = None,
        attempts: list[GenerationAttempt] | None = None,
    ):
        super().__init__(message)
        if category is not None:
            self.category = category
        self.attempts = list(attempts or [])


class ExtractionError(GenerationError):
    """Raised when model output holds no JSON-like region."""

    category = FailureCategory.EXTRACTION


class RepairError(GenerationError):
    """Raised when the repaired candidate still fails to parse."""

    category = FailureCategory.REPAIR


class CoercionError(GenerationError):
    """Raised when coercion hits a value it cannot walk."""

    category = FailureCategory.COERCION


@dataclass
class FieldIssue:
    """One mismatched field reported by validation."""

    path: str
    message: str
    expected: str = ""

    def __str__(self) -> str:
        where = self.path or "<root>"
        return f"{where}: {self.message}"


class ValidationFailure(GenerationError):
    """Raised when the coerced value does not satisfy the schema."""

    category = FailureCategory.VALIDATION

    def __init__(self, issues: list[FieldIssue]):
        self.issues = list(issues)
        summary = "; ".join(str(i) for i in self.issues[:5]) or "unknown mismatch"
        if len(self.issues) > 5:
            summary += f" (+{len(self.issues) - 5} more)"
        super().__init__(f"Validation failed: {summary}")
