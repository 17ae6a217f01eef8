"""Tests for the nova-llm command line."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from click.testing import CliRunner

from nova_llm.__main__ import main
from nova_llm.exceptions import GenerationError
from nova_llm.review import ReviewAnalysis


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("NOVA_LLM_PROVIDER", "NOVA_LLM_CONFIG", "OPENAI_API_KEY", "ANTHROPIC_API_KEY"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_provider(monkeypatch):
    provider = MagicMock()
    provider.name = "ollama"
    provider.model_name = "llama3"
    provider.close = AsyncMock()
    provider.generate_object = AsyncMock(return_value={"answer": "42"})
    provider.is_available = AsyncMock(return_value=True)
    provider.list_models = AsyncMock(return_value=["llama3", "mistral"])
    provider.generate = AsyncMock(return_value="test successful")
    created = {}

    async def fake_create(config, name=None, model=None, stats=None):
        created.update(name=name, model=model)
        return provider

    monkeypatch.setattr("nova_llm.providers.factory.create_provider", fake_create)
    provider.created = created
    return provider


def _invoke(tmp_path: Path, *args: str, **kwargs):
    config_path = tmp_path / "config.yaml"
    return CliRunner().invoke(main, ["--config", str(config_path), *args], **kwargs)


class TestGenerate:
    def test_prints_json(self, tmp_path: Path, fake_provider):
        result = _invoke(tmp_path, "generate", "What is six times seven?")
        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {"answer": "42"}
        fake_provider.close.assert_awaited_once()

    def test_fields_build_schema(self, tmp_path: Path, fake_provider):
        result = _invoke(
            tmp_path,
            "generate",
            "Rate it",
            "-f",
            "score:percent",
            "-f",
            "level:enum=low|high",
            "-f",
            "name",
        )
        assert result.exit_code == 0, result.output
        request = fake_provider.generate_object.call_args.args[0]
        assert set(request.schema.root.fields) == {"score", "level", "name"}
        assert request.schema.root.fields["level"].members == ("low", "high")

    def test_provider_and_model_overrides(self, tmp_path: Path, fake_provider):
        result = CliRunner().invoke(
            main,
            [
                "--config",
                str(tmp_path / "config.yaml"),
                "--provider",
                "ollama",
                "--model",
                "mistral",
                "generate",
                "hi",
            ],
        )
        assert result.exit_code == 0, result.output
        assert fake_provider.created == {"name": "ollama", "model": "mistral"}

    def test_unknown_field_kind(self, tmp_path: Path, fake_provider):
        result = _invoke(tmp_path, "generate", "x", "-f", "a:date")
        assert result.exit_code == 2
        assert "unknown kind" in result.output

    def test_generation_error_reported(self, tmp_path: Path, fake_provider):
        fake_provider.generate_object.side_effect = GenerationError(
            "Failed to generate structured object with ollama: nope"
        )
        result = _invoke(tmp_path, "generate", "x")
        assert result.exit_code == 1
        assert "Failed to generate structured object with ollama" in result.output
        fake_provider.close.assert_awaited_once()


class TestReview:
    verdict = ReviewAnalysis(
        grade="B",
        coverage=70,
        testsPresent=True,
        value="high",
        state="warning",
        issues=[{"line": 3, "severity": "medium", "type": "bug", "message": "Off by one"}],
        suggestions=["Add a boundary test"],
        summary="Mostly correct.",
    )

    def test_review_file(self, tmp_path: Path, fake_provider):
        source = tmp_path / "calc.py"
        source.write_text("def add(a, b):\n    return a - b\n")
        fake_provider.generate_object.return_value = self.verdict

        result = _invoke(tmp_path, "review", str(source))

        assert result.exit_code == 0, result.output
        assert "Grade: B" in result.output
        assert "L3 [medium/bug] Off by one" in result.output
        request = fake_provider.generate_object.call_args.args[0]
        assert "return a - b" in request.prompt
        assert request.schema.model is ReviewAnalysis

    def test_review_stdin_json(self, tmp_path: Path, fake_provider):
        fake_provider.generate_object.return_value = self.verdict
        result = _invoke(tmp_path, "review", "--json", input="print('hi')\n")
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["testsPresent"] is True
        assert data["issues"][0]["line"] == 3

    def test_missing_file(self, tmp_path: Path, fake_provider):
        result = _invoke(tmp_path, "review", str(tmp_path / "nope.py"))
        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_empty_input(self, tmp_path: Path, fake_provider):
        result = _invoke(tmp_path, "review", input="   \n")
        assert result.exit_code == 1
        assert "Nothing to review" in result.output


class TestModels:
    def test_lists_models(self, tmp_path: Path, fake_provider):
        result = _invoke(tmp_path, "models")
        assert result.exit_code == 0, result.output
        assert "Provider: ollama" in result.output
        assert "mistral" in result.output


class TestCheck:
    def test_all_pass(self, tmp_path: Path, fake_provider):
        result = _invoke(tmp_path, "check")
        assert result.exit_code == 0, result.output
        assert "5 passed, 0 failed" in result.output
        assert "Recommended provider: ollama" in result.output

    def test_generation_failure(self, tmp_path: Path, fake_provider):
        fake_provider.generate.return_value = "I'd rather not"
        result = _invoke(tmp_path, "check")
        assert result.exit_code == 1
        assert "unexpected response" in result.output


class TestConfigCommands:
    def test_show_masks_keys(self, tmp_path: Path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("ai:\n  openai:\n    api_key: sk-abcdefghijkl\n")
        result = CliRunner().invoke(main, ["--config", str(config_path), "config", "show"])
        assert result.exit_code == 0, result.output
        assert "sk-a...ijkl" in result.output
        assert "sk-abcdefghijkl" not in result.output

    def test_init_keeps_keys_out_of_file(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-supersecret-123456")
        config_path = tmp_path / "config.yaml"
        result = CliRunner().invoke(main, ["--config", str(config_path), "config", "init"])
        assert result.exit_code == 0, result.output
        text = config_path.read_text()
        assert "sk-supersecret-123456" not in text
        assert "${OPENAI_API_KEY}" in text

    def test_init_writes_once(self, tmp_path: Path):
        config_path = tmp_path / "config.yaml"
        args = ["--config", str(config_path), "config", "init"]

        first = CliRunner().invoke(main, args)
        assert first.exit_code == 0, first.output
        assert config_path.exists()

        second = CliRunner().invoke(main, args)
        assert second.exit_code == 1
        assert "already exists" in second.output

        forced = CliRunner().invoke(main, [*args, "--force"])
        assert forced.exit_code == 0

    def test_invalid_config_reported(self, tmp_path: Path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("ai: [broken\n")
        result = CliRunner().invoke(main, ["--config", str(config_path), "models"])
        assert result.exit_code == 1
        assert "Invalid YAML" in result.output
