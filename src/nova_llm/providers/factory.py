"""Provider factory — creates the configured provider, with auto-detection."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..config import NovaConfig
from ..exceptions import ConfigError
from ..stats import GenerationStats
from ..structured.orchestrator import StructuredGenerator
from ..structured.types import GenerateOptions, GenerationStyle
from .base import LLMProvider
from .fallback import FallbackProvider

logger = logging.getLogger("nova-llm")

VALID_PROVIDERS = ("openai", "azure", "ollama", "anthropic", "auto")
AUTO_ORDER = ("openai", "ollama")


def _style(value: str, default: GenerationStyle) -> GenerationStyle:
    if not value:
        return default
    try:
        return GenerationStyle(value)
    except ValueError:
        raise ConfigError(
            f"Invalid generation style: {value!r} (expected 'retry' or 'single-shot')"
        )


def build_provider(
    name: str, config: NovaConfig, stats: GenerationStats | None = None
) -> LLMProvider | None:
    """Instantiate one provider by name, or None if it is not configured."""
    ai = config.ai
    policy = ai.generation.retry_policy()

    if name in ("openai", "azure"):
        if not ai.openai.api_key:
            logger.debug("OpenAI provider requires API key")
            return None
        from .openai_compat import OpenAICompatProvider

        generator = StructuredGenerator(
            policy=policy,
            style=_style(ai.openai.style, GenerationStyle.SINGLE_SHOT),
            stats=stats,
        )
        return OpenAICompatProvider(
            api_key=ai.openai.api_key,
            model=ai.openai.default_model,
            base_url=ai.openai.api_url or None,
            generator=generator,
        )
    elif name == "ollama":
        from .ollama import OllamaProvider

        generator = StructuredGenerator(
            policy=policy,
            style=_style(ai.ollama.style, GenerationStyle.RETRY),
            stats=stats,
        )
        return OllamaProvider(
            model=ai.ollama.model,
            api_url=ai.ollama.api_url,
            generator=generator,
            timeout=ai.generation.timeout_seconds,
        )
    elif name == "anthropic":
        if not ai.anthropic.api_key:
            logger.debug("Anthropic provider requires API key")
            return None
        from .anthropic import AnthropicProvider

        generator = StructuredGenerator(
            policy=policy,
            style=_style(ai.anthropic.style, GenerationStyle.SINGLE_SHOT),
            stats=stats,
        )
        return AnthropicProvider(
            api_key=ai.anthropic.api_key,
            model=ai.anthropic.default_model,
            generator=generator,
        )
    else:
        logger.warning("Unknown provider: %s", name)
        return None


async def _try_provider(
    name: str, config: NovaConfig, stats: GenerationStats | None
) -> LLMProvider | None:
    try:
        provider = build_provider(name, config, stats)
    except ImportError as e:
        logger.debug("Provider %s unavailable: %s", name, e)
        return None
    if provider is None:
        return None
    if await provider.is_available():
        return provider
    await provider.close()
    return None


async def create_provider(
    config: NovaConfig,
    name: str | None = None,
    model: str | None = None,
    stats: GenerationStats | None = None,
) -> LLMProvider:
    """Create a ready provider.

    The requested provider (or ``config.ai.default_provider``) is tried first;
    if it is not usable, OpenAI then Ollama are probed. When nothing answers,
    a FallbackProvider is returned so callers always get an instance.
    """
    requested = name or config.ai.default_provider or "auto"
    logger.debug("Creating LLM provider: %s", requested)

    candidates: list[str] = []
    if requested != "auto":
        candidates.append(requested)
    candidates.extend(n for n in AUTO_ORDER if n not in candidates)

    for candidate in candidates:
        provider = await _try_provider(candidate, config, stats)
        if provider is None:
            if candidate == requested:
                logger.warning("Requested provider %s is not available", requested)
            continue
        if model:
            provider.set_model(model)
        logger.info("LLM provider %s is ready (%s)", provider.name, provider.model_name)
        return provider

    logger.warning("No LLM providers available, using fallback")
    return FallbackProvider()


@dataclass
class Recommendations:
    available: list[str] = field(default_factory=list)
    recommended: str = "ollama"
    missing: list[tuple[str, str]] = field(default_factory=list)


def provider_recommendations(config: NovaConfig) -> Recommendations:
    """Which providers could work with this config, and which one to prefer."""
    rec = Recommendations()
    ai = config.ai

    if ai.openai.api_key:
        rec.available.append("openai")
    else:
        rec.missing.append(("openai", "API key in ai.openai.api_key"))

    if ai.anthropic.api_key:
        rec.available.append("anthropic")
    else:
        rec.missing.append(("anthropic", "API key in ai.anthropic.api_key"))

    # Ollama depends only on a local install, so it is always a candidate.
    rec.available.append("ollama")

    if "openai" in rec.available:
        rec.recommended = "openai"
    return rec


@dataclass
class ConfigReport:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def validate_llm_config(config: NovaConfig) -> ConfigReport:
    report = ConfigReport()
    ai = config.ai

    if not ai.openai.api_key:
        report.warnings.append("OpenAI API key not configured")
    if ai.openai.api_url and not ai.openai.api_url.startswith("https://"):
        report.warnings.append("OpenAI API URL should use HTTPS")
    if ai.ollama.api_url and not ai.ollama.api_url.startswith("http"):
        report.errors.append("Invalid Ollama API URL format")
    if ai.default_provider not in VALID_PROVIDERS:
        report.errors.append(f"Invalid default provider: {ai.default_provider}")

    for provider_name, style in (
        ("ollama", ai.ollama.style),
        ("openai", ai.openai.style),
        ("anthropic", ai.anthropic.style),
    ):
        if style and style not in {s.value for s in GenerationStyle}:
            report.errors.append(f"Invalid {provider_name} style: {style}")

    if not ai.openai.api_key and not ai.anthropic.api_key:
        report.warnings.append(
            "No hosted provider configured - only Ollama or the fallback provider will be used"
        )
    return report


@dataclass
class CheckResult:
    availability: bool = False
    models: list[str] = field(default_factory=list)
    basic_generation: bool = False
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.availability and self.basic_generation and not self.errors


CHECK_PROMPT = 'Respond with exactly: "test successful"'


async def check_provider(provider: LLMProvider) -> CheckResult:
    """Smoke-test a provider: reachability, model listing, one tiny generation."""
    result = CheckResult()
    result.availability = await provider.is_available()
    if not result.availability:
        result.errors.append("Provider is not available")
        return result

    result.models = await provider.list_models()
    logger.debug("Found %d models", len(result.models))

    try:
        response = await provider.generate(
            CHECK_PROMPT, GenerateOptions(temperature=0, max_tokens=50)
        )
    except Exception as e:
        result.errors.append(f"Generation test failed: {e}")
    else:
        result.basic_generation = "test successful" in response.lower()
        if not result.basic_generation:
            result.errors.append("Basic generation test failed - unexpected response")

    logger.info(
        "Provider %s check %s", provider.name, "passed" if result.success else "failed"
    )
    return result
