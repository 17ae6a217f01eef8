"""Schema validation behind one failure type.

Pydantic-backed schemas delegate to ``model_validate``; descriptor-only
schemas get a structural check of the declared kinds. Either way a
mismatch surfaces as ValidationFailure with per-field issues.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from ..exceptions import FieldIssue, ValidationFailure
from .schema import (
    AnyField,
    ArrayField,
    BooleanField,
    EnumField,
    FieldKind,
    NumberField,
    ObjectField,
    Schema,
    StringField,
)


def validate(value: Any, schema: Schema) -> Any:
    """Return the validated value (a model instance for pydantic schemas)."""
    if schema.model is not None:
        try:
            return schema.model.model_validate(value)
        except ValidationError as e:
            raise ValidationFailure(_issues_from_pydantic(e)) from e

    issues: list[FieldIssue] = []
    _check(value, schema.root, "", issues)
    if issues:
        raise ValidationFailure(issues)
    return value


def _issues_from_pydantic(error: ValidationError) -> list[FieldIssue]:
    issues = []
    for err in error.errors():
        path = ".".join(str(p) for p in err.get("loc", ()))
        issues.append(FieldIssue(path, err.get("msg", "invalid"), err.get("type", "")))
    return issues


def _kind_name(kind: FieldKind) -> str:
    if isinstance(kind, EnumField):
        return "one of " + ", ".join(kind.members)
    if isinstance(kind, NumberField):
        return "integer" if kind.integer else "number"
    return {
        StringField: "string",
        BooleanField: "boolean",
        ArrayField: "array",
        ObjectField: "object",
    }.get(type(kind), "any")


def _check(value: Any, kind: FieldKind, path: str, issues: list[FieldIssue]) -> None:
    expected = _kind_name(kind)

    def fail(message: str) -> None:
        issues.append(FieldIssue(path, message, expected))

    if isinstance(kind, AnyField):
        return
    if isinstance(kind, ObjectField):
        if not isinstance(value, dict):
            fail(f"expected object, got {type(value).__name__}")
            return
        for key, field_kind in kind.fields.items():
            sub = f"{path}.{key}" if path else key
            if key not in value:
                if key in kind.required:
                    issues.append(FieldIssue(sub, "field required", _kind_name(field_kind)))
                continue
            _check(value[key], field_kind, sub, issues)
    elif isinstance(kind, ArrayField):
        if not isinstance(value, list):
            fail(f"expected array, got {type(value).__name__}")
            return
        for i, item in enumerate(value):
            _check(item, kind.of, f"{path}.{i}" if path else str(i), issues)
    elif isinstance(kind, StringField):
        if not isinstance(value, str):
            fail(f"expected string, got {type(value).__name__}")
    elif isinstance(kind, BooleanField):
        if not isinstance(value, bool):
            fail(f"expected boolean, got {type(value).__name__}")
    elif isinstance(kind, NumberField):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            fail(f"expected number, got {type(value).__name__}")
        elif kind.integer and not float(value).is_integer():
            fail(f"expected integer, got {value}")
        elif kind.minimum is not None and value < kind.minimum:
            fail(f"must be >= {kind.minimum:g}")
        elif kind.maximum is not None and value > kind.maximum:
            fail(f"must be <= {kind.maximum:g}")
    elif isinstance(kind, EnumField):
        if value not in kind.members:
            fail(f"{value!r} is not {expected}")
