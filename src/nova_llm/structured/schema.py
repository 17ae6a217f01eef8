"""Schema descriptors — the closed set of field kinds the coercer walks.

A ``Schema`` pairs a root ``ObjectField`` with an optional pydantic model.
The descriptor tree drives coercion and the prompt description; the model,
when present, is the validation engine. ``Schema.from_model`` derives the
descriptor tree from a pydantic model once, so nothing downstream inspects
pydantic internals.
"""

from __future__ import annotations

import json
import types
import typing
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel


@dataclass(frozen=True)
class AnyField:
    """Unconstrained value; passed through untouched."""


@dataclass(frozen=True)
class StringField:
    pass


@dataclass(frozen=True)
class NumberField:
    integer: bool = False
    minimum: float | None = None
    maximum: float | None = None


@dataclass(frozen=True)
class BooleanField:
    pass


@dataclass(frozen=True)
class EnumField:
    members: tuple[str, ...]


@dataclass(frozen=True)
class ArrayField:
    of: "FieldKind" = AnyField()


@dataclass(frozen=True)
class ObjectField:
    fields: dict[str, "FieldKind"] = field(default_factory=dict)
    required: frozenset[str] = frozenset()


FieldKind = Union[
    AnyField, StringField, NumberField, BooleanField, EnumField, ArrayField, ObjectField
]


@dataclass(frozen=True)
class Schema:
    root: ObjectField
    model: type[BaseModel] | None = None
    name: str = "object"

    @classmethod
    def of(cls, name: str = "object", /, **fields: FieldKind) -> Schema:
        """Descriptor-only schema; every listed field is required."""
        return cls(ObjectField(dict(fields), frozenset(fields)), name=name)

    @classmethod
    def from_model(cls, model: type[BaseModel]) -> Schema:
        return cls(_object_from_model(model), model=model, name=model.__name__)

    def describe(self) -> str:
        """Example JSON of the expected shape, for inclusion in prompts."""
        return json.dumps(_example(self.root), indent=2)


# ── pydantic → descriptors ───────────────────────────────


def _object_from_model(model: type[BaseModel]) -> ObjectField:
    fields: dict[str, FieldKind] = {}
    required: set[str] = set()
    for name, info in model.model_fields.items():
        key = info.alias or name
        fields[key] = _kind_of(info.annotation, list(info.metadata))
        if info.is_required():
            required.add(key)
    return ObjectField(fields, frozenset(required))


def _kind_of(tp: Any, metadata: list | None = None) -> FieldKind:
    metadata = metadata or []
    origin = typing.get_origin(tp)

    if origin is typing.Annotated:
        inner, *extra = typing.get_args(tp)
        return _kind_of(inner, metadata + list(extra))

    if origin in (Union, types.UnionType):
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return _kind_of(args[0], metadata)
        return AnyField()

    if origin is typing.Literal:
        values = typing.get_args(tp)
        if values and all(isinstance(v, str) for v in values):
            return EnumField(tuple(values))
        return AnyField()

    if origin in (list, tuple, set, frozenset):
        args = typing.get_args(tp)
        return ArrayField(_kind_of(args[0]) if args else AnyField())

    if isinstance(tp, type):
        if issubclass(tp, BaseModel):
            return _object_from_model(tp)
        if issubclass(tp, Enum):
            return EnumField(tuple(str(m.value) for m in tp))
        if issubclass(tp, bool):  # before int: bool is an int subclass
            return BooleanField()
        if issubclass(tp, (int, float)):
            lo, hi = _bounds(metadata)
            return NumberField(integer=issubclass(tp, int), minimum=lo, maximum=hi)
        if issubclass(tp, str):
            return StringField()
        if issubclass(tp, (list, tuple)):
            return ArrayField()
    return AnyField()


def _bounds(metadata: list) -> tuple[float | None, float | None]:
    lo = hi = None
    for m in metadata:
        for attr in ("ge", "gt"):
            if getattr(m, attr, None) is not None:
                lo = getattr(m, attr)
        for attr in ("le", "lt"):
            if getattr(m, attr, None) is not None:
                hi = getattr(m, attr)
    return lo, hi


# ── prompt description ───────────────────────────────────


def _example(kind: FieldKind, key: str = "") -> Any:
    if isinstance(kind, ObjectField):
        return {k: _example(v, k) for k, v in kind.fields.items()}
    if isinstance(kind, ArrayField):
        return [_example(kind.of, key)]
    if isinstance(kind, EnumField):
        return "|".join(kind.members)
    if isinstance(kind, BooleanField):
        return True
    if isinstance(kind, NumberField):
        if kind.minimum is not None and kind.maximum is not None:
            return f"number {kind.minimum:g}-{kind.maximum:g}"
        return 0
    if isinstance(kind, StringField):
        return f"example {key}" if key else "text"
    return "value"
