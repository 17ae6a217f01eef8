"""Stand-in provider used when no real LLM backend is reachable.

Plain text calls answer with an explanation instead of failing, so the
CLI stays usable. Structured generation is refused outright.
"""

from __future__ import annotations

import logging
from typing import Any

from ..exceptions import ProviderUnavailableError
from ..structured.orchestrator import StructuredGenerator
from ..structured.types import GenerateOptions, GenerationRequest
from .base import ChatResponse, LLMProvider, ToolFunction

logger = logging.getLogger("nova-llm")

UNAVAILABLE_MESSAGE = (
    "LLM is not available - cannot generate structured objects. "
    "Please configure OpenAI or Ollama."
)


class FallbackProvider(LLMProvider):
    def __init__(self) -> None:
        self.generator = StructuredGenerator()

    async def is_available(self) -> bool:
        return True

    async def list_models(self) -> list[str]:
        return ["fallback"]

    def set_model(self, model: str) -> None:
        pass

    async def generate(self, prompt: str, options: GenerateOptions | None = None) -> str:
        logger.warning("Using fallback provider - no LLM processing available")
        return (
            f'[Fallback Response] Unable to process prompt: "{prompt[:100]}..."\n\n'
            "Please configure an LLM provider (OpenAI or Ollama) to enable AI features."
        )

    async def chat(
        self,
        messages: list[dict[str, str]],
        tools: list[ToolFunction] | None = None,
        options: GenerateOptions | None = None,
    ) -> ChatResponse:
        last = messages[-1].get("content", "") if messages else ""
        return ChatResponse(content=await self.generate(last))

    async def generate_object(self, request: GenerationRequest) -> Any:
        logger.warning("Using fallback provider - cannot generate structured objects")
        raise ProviderUnavailableError(UNAVAILABLE_MESSAGE)

    @property
    def name(self) -> str:
        return "fallback"

    @property
    def model_name(self) -> str:
        return "fallback"
