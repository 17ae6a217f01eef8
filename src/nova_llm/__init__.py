"""nova-llm — Structured output from any LLM."""

__version__ = "0.4.0"

from .exceptions import (
    CoercionError,
    ConfigError,
    ExtractionError,
    FailureCategory,
    FieldIssue,
    GenerationError,
    NetworkError,
    NovaError,
    ProviderError,
    ProviderUnavailableError,
    RepairError,
    ValidationFailure,
)

__all__ = [
    "__version__",
    "NovaError",
    "ConfigError",
    "ProviderError",
    "NetworkError",
    "ProviderUnavailableError",
    "GenerationError",
    "ExtractionError",
    "RepairError",
    "CoercionError",
    "ValidationFailure",
    "FieldIssue",
    "FailureCategory",
]
