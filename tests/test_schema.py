"""Tests for schema descriptors and their derivation from pydantic models."""

import json
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field

from nova_llm.review import REVIEW_SCHEMA, ReviewAnalysis
from nova_llm.structured.schema import (
    AnyField,
    ArrayField,
    BooleanField,
    EnumField,
    NumberField,
    ObjectField,
    Schema,
    StringField,
)


class Color(Enum):
    RED = "red"
    BLUE = "blue"


class Item(BaseModel):
    label: str
    count: int = 0


class Sample(BaseModel):
    title: str
    score: float = Field(ge=1, le=10)
    flag: bool
    color: Color
    mode: Literal["fast", "slow"]
    tags: list[str] = Field(default_factory=list)
    items: list[Item] = Field(default_factory=list)
    nickname: Optional[str] = None
    anything: dict = Field(default_factory=dict)


class TestFromModel:
    def test_field_kinds(self):
        root = Schema.from_model(Sample).root
        assert root.fields["title"] == StringField()
        assert root.fields["score"] == NumberField(integer=False, minimum=1, maximum=10)
        assert root.fields["flag"] == BooleanField()
        assert root.fields["color"] == EnumField(("red", "blue"))
        assert root.fields["mode"] == EnumField(("fast", "slow"))
        assert root.fields["tags"] == ArrayField(StringField())
        assert root.fields["nickname"] == StringField()
        assert root.fields["anything"] == AnyField()

    def test_nested_models(self):
        items = Schema.from_model(Sample).root.fields["items"]
        assert isinstance(items, ArrayField)
        assert items.of.fields["count"] == NumberField(integer=True)
        assert items.of.required == frozenset({"label"})

    def test_required_fields(self):
        root = Schema.from_model(Sample).root
        assert root.required == frozenset({"title", "score", "flag", "color", "mode"})

    def test_name_and_model_recorded(self):
        schema = Schema.from_model(Sample)
        assert schema.name == "Sample"
        assert schema.model is Sample

    def test_aliases_used_as_keys(self):
        root = REVIEW_SCHEMA.root
        assert "testsPresent" in root.fields
        assert "tests_present" not in root.fields
        assert "testsPresent" in root.required
        assert REVIEW_SCHEMA.model is ReviewAnalysis


class TestSchemaOf:
    def test_all_fields_required(self):
        schema = Schema.of("answer", text=StringField(), n=NumberField())
        assert schema.name == "answer"
        assert schema.model is None
        assert schema.root == ObjectField(
            {"text": StringField(), "n": NumberField()}, frozenset({"text", "n"})
        )

    def test_field_called_name(self):
        schema = Schema.of("person", name=StringField())
        assert schema.name == "person"
        assert "name" in schema.root.fields


class TestDescribe:
    def test_example_shape(self):
        example = json.loads(REVIEW_SCHEMA.describe())
        assert example["grade"] == "A|B|C|D|F"
        assert example["coverage"] == "number 0-100"
        assert example["testsPresent"] is True
        assert example["issues"][0]["severity"] == "low|medium|high"
        assert example["suggestions"] == ["example suggestions"]
        assert example["summary"] == "example summary"
