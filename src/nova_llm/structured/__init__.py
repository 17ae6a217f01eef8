"""Structured output — turn free-form model text into schema-validated values."""

from .coerce import coerce
from .extract import extract
from .orchestrator import StructuredGenerator, build_structured_prompt
from .pipeline import ProcessedResponse, process_response
from .repair import parse_candidate, repair
from .schema import (
    AnyField,
    ArrayField,
    BooleanField,
    EnumField,
    NumberField,
    ObjectField,
    Schema,
    StringField,
)
from .types import (
    Candidate,
    GenerateOptions,
    GenerationAttempt,
    GenerationRequest,
    GenerationStyle,
    RetryPolicy,
)
from .validate import validate

__all__ = [
    "AnyField",
    "ArrayField",
    "BooleanField",
    "Candidate",
    "EnumField",
    "GenerateOptions",
    "GenerationAttempt",
    "GenerationRequest",
    "GenerationStyle",
    "NumberField",
    "ObjectField",
    "ProcessedResponse",
    "RetryPolicy",
    "Schema",
    "StringField",
    "StructuredGenerator",
    "build_structured_prompt",
    "coerce",
    "extract",
    "parse_candidate",
    "process_response",
    "repair",
    "validate",
]
