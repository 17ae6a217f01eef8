"""Normalize parsed model output toward the declared field kinds.

Coercion is total: it never raises and never drops a field. Values it
cannot make sense of are left as they are for the validator to reject.
"""

from __future__ import annotations

import math
from typing import Any

from .schema import (
    ArrayField,
    BooleanField,
    EnumField,
    FieldKind,
    NumberField,
    ObjectField,
    Schema,
    StringField,
)

_TRUE_STRINGS = {"true", "1", "yes"}

PERCENT_MIN = 0
PERCENT_MAX = 100


def coerce(value: Any, schema: Schema | FieldKind) -> Any:
    """Return ``value`` normalized against ``schema``."""
    kind = schema.root if isinstance(schema, Schema) else schema
    return _coerce(value, kind)


def _coerce(value: Any, kind: FieldKind) -> Any:
    if isinstance(kind, ObjectField):
        return _coerce_object(value, kind)
    if isinstance(kind, ArrayField):
        if isinstance(value, list):
            return [_coerce(item, kind.of) for item in value]
        return value
    if isinstance(kind, NumberField):
        return coerce_number(value, kind)
    if isinstance(kind, BooleanField):
        return coerce_bool(value)
    if isinstance(kind, EnumField):
        return coerce_enum(value, kind.members)
    return value


def _coerce_object(value: Any, kind: ObjectField) -> Any:
    if not isinstance(value, dict):
        return value

    result = dict(value)  # unknown keys pass through
    for key, field_kind in kind.fields.items():
        if key in result:
            result[key] = _coerce(result[key], field_kind)
        elif isinstance(field_kind, ArrayField):
            result[key] = []
        elif isinstance(field_kind, StringField):
            result[key] = ""
    return result


def parse_percentage(text: str) -> int:
    """``" 75.5 % "`` -> 76; clamped to 0..100; non-numeric -> 0."""
    number = _to_float(text.replace("%", "").strip())
    if number is None:
        return PERCENT_MIN
    return max(PERCENT_MIN, min(PERCENT_MAX, _round_half_up(number)))


def coerce_number(value: Any, kind: NumberField | None = None) -> Any:
    if not isinstance(value, str):
        return value

    if "%" in value:
        return parse_percentage(value)

    number = _to_float(value.strip())
    if number is None:
        number = 0
    elif kind is not None and kind.integer:
        number = _round_half_up(number)
    elif number.is_integer():
        number = int(number)
    if kind is not None:
        number = _clamp(number, kind.minimum, kind.maximum)
    return number


def coerce_bool(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    if isinstance(value, (int, float)):
        return value != 0
    return value


def coerce_enum(value: Any, members: tuple[str, ...]) -> Any:
    if not isinstance(value, str):
        return value
    folded = value.strip().casefold()
    for member in members:
        if member.casefold() == folded:
            return member
    return value


def _to_float(text: str) -> float | None:
    try:
        number = float(text)
    except ValueError:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _round_half_up(number: float) -> int:
    return math.floor(number + 0.5)


def _clamp(number, minimum, maximum):
    if minimum is not None and number < minimum:
        return minimum
    if maximum is not None and number > maximum:
        return maximum
    return number
