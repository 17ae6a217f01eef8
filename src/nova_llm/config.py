"""Configuration loading and validation."""

from __future__ import annotations

import os
import re
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from .exceptions import ConfigError
from .structured.types import RetryPolicy

DEFAULT_CONFIG_PATH = "~/.nova-llm/config.yaml"

_SECRET_ENV_VARS = {"openai": "OPENAI_API_KEY", "anthropic": "ANTHROPIC_API_KEY"}


class OllamaConfig(BaseModel):
    model: str = "llama3"
    api_url: str = "http://localhost:11434"
    style: str = ""  # "" = provider default (retry) | "retry" | "single-shot"


class OpenAIConfig(BaseModel):
    api_key: str = ""
    api_url: str = ""  # Empty = SDK default; set for Azure/compatible services
    default_model: str = "gpt-4"
    style: str = ""  # "" = provider default (single-shot)


class AnthropicConfig(BaseModel):
    api_key: str = ""
    default_model: str = "claude-3-5-haiku-latest"
    style: str = ""  # "" = provider default (single-shot)


class GenerationConfig(BaseModel):
    max_attempts: int = Field(default=3, ge=1)
    base_delay_seconds: float = Field(default=1.0, ge=0)
    temperature: float = 0.1
    max_tokens: int = 2000
    timeout_seconds: float = 120.0  # Whole generate_object call, retries included

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.max_attempts, base_delay=self.base_delay_seconds
        )


class AIConfig(BaseModel):
    default_provider: str = "auto"  # "auto" | "openai" | "azure" | "ollama" | "anthropic"
    ollama: OllamaConfig = Field(default_factory=OllamaConfig)
    openai: OpenAIConfig = Field(default_factory=OpenAIConfig)
    anthropic: AnthropicConfig = Field(default_factory=AnthropicConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)


class NovaConfig(BaseModel):
    ai: AIConfig = Field(default_factory=AIConfig)


def _interpolate_env_vars(text: str) -> str:
    """Replace ${VAR_NAME} with environment variable values."""

    def replacer(match: re.Match) -> str:
        var_name = match.group(1)
        return os.environ.get(var_name, "")

    return re.sub(r"\$\{(\w+)\}", replacer, text)


def _config_from_env() -> NovaConfig:
    """Build config from environment variables.

    Falls back to sane defaults when env vars are not set.
    """
    return NovaConfig(
        ai=AIConfig(
            default_provider=os.environ.get("NOVA_LLM_PROVIDER", "auto"),
            ollama=OllamaConfig(
                model=os.environ.get("OLLAMA_MODEL", "llama3"),
                api_url=os.environ.get("OLLAMA_HOST", "http://localhost:11434"),
            ),
            openai=OpenAIConfig(
                api_key=os.environ.get("OPENAI_API_KEY", ""),
                api_url=os.environ.get("OPENAI_BASE_URL", ""),
                default_model=os.environ.get("OPENAI_MODEL", "gpt-4"),
            ),
            anthropic=AnthropicConfig(
                api_key=os.environ.get("ANTHROPIC_API_KEY", ""),
            ),
        )
    )


def _resolve_path(path: str | Path | None) -> Path:
    if path is None:
        path = os.environ.get("NOVA_LLM_CONFIG", DEFAULT_CONFIG_PATH)
    return Path(path).expanduser()


def load_config(path: str | Path | None = None) -> NovaConfig:
    """Load config from YAML file, env vars, or defaults.

    Priority: config.yaml (with ${ENV} interpolation) > env vars > defaults.
    """
    path = _resolve_path(path)
    if not path.exists():
        return _config_from_env()

    raw_text = path.read_text()
    interpolated = _interpolate_env_vars(raw_text)
    try:
        data = yaml.safe_load(interpolated)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if data is None:
        return NovaConfig()
    try:
        return NovaConfig(**data)
    except (TypeError, ValidationError) as e:
        raise ConfigError(f"Invalid config in {path}: {e}") from e


def save_config(config: NovaConfig, path: str | Path | None = None) -> Path:
    """Save config to YAML file."""
    path = _resolve_path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump()
    # Don't persist resolved API keys, keep the env var reference
    for section, env_var in _SECRET_ENV_VARS.items():
        if data["ai"][section].get("api_key"):
            data["ai"][section]["api_key"] = f"${{{env_var}}}"
    path.write_text(yaml.dump(data, default_flow_style=False, sort_keys=False))
    return path
