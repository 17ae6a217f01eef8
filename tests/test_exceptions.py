"""Tests for the exception hierarchy."""

import pytest

from nova_llm import (
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


class TestHierarchy:
    @pytest.mark.parametrize(
        "exc_class",
        [
            ConfigError,
            ProviderError,
            NetworkError,
            ProviderUnavailableError,
            GenerationError,
            ExtractionError,
            RepairError,
            CoercionError,
        ],
    )
    def test_all_inherit_from_base(self, exc_class):
        assert issubclass(exc_class, NovaError)

    def test_provider_errors(self):
        assert issubclass(NetworkError, ProviderError)
        assert issubclass(ProviderUnavailableError, ProviderError)

    def test_stage_errors_are_generation_errors(self):
        for exc_class in (ExtractionError, RepairError, CoercionError, ValidationFailure):
            assert issubclass(exc_class, GenerationError)

    def test_catch_broad(self):
        with pytest.raises(NovaError):
            raise RepairError("bad json")


class TestCategories:
    @pytest.mark.parametrize(
        "error, category",
        [
            (NetworkError("x"), FailureCategory.NETWORK),
            (ProviderUnavailableError("x"), FailureCategory.UNAVAILABLE),
            (ExtractionError("x"), FailureCategory.EXTRACTION),
            (RepairError("x"), FailureCategory.REPAIR),
            (CoercionError("x"), FailureCategory.COERCION),
            (ValidationFailure([]), FailureCategory.VALIDATION),
        ],
    )
    def test_category(self, error, category):
        assert error.category is category

    def test_generation_error_carries_category_and_attempts(self):
        err = GenerationError("failed", category=FailureCategory.REPAIR, attempts=[1, 2])
        assert err.category is FailureCategory.REPAIR
        assert err.attempts == [1, 2]
        assert str(err) == "failed"

    def test_generation_error_defaults(self):
        err = GenerationError("failed")
        assert err.category is None
        assert err.attempts == []


class TestValidationFailure:
    def test_message_lists_issues(self):
        err = ValidationFailure(
            [FieldIssue("grade", "invalid"), FieldIssue("coverage", "too big")]
        )
        assert str(err) == "Validation failed: grade: invalid; coverage: too big"
        assert len(err.issues) == 2

    def test_message_truncates(self):
        issues = [FieldIssue(f"f{i}", "bad") for i in range(7)]
        assert str(ValidationFailure(issues)).endswith("(+2 more)")

    def test_root_issue(self):
        assert str(FieldIssue("", "expected object")) == "<root>: expected object"
