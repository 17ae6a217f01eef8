"""LLM provider abstraction — every backend implements this one interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from ..structured.orchestrator import StructuredGenerator
from ..structured.types import GenerateOptions, GenerationRequest


@dataclass
class ToolFunction:
    name: str
    description: str = ""
    parameters: dict = field(default_factory=lambda: {"type": "object", "properties": {}})


@dataclass
class ToolCall:
    id: str
    name: str
    arguments: str  # JSON-encoded


@dataclass
class ChatResponse:
    content: str
    tool_calls: list[ToolCall] = field(default_factory=list)


class LLMProvider(ABC):
    """Abstract interface for text-generation LLM providers.

    Structured generation is composed, not inherited: each provider holds a
    StructuredGenerator whose strategy (retrying or single-shot) decides how
    raw text becomes a validated object.
    """

    generator: StructuredGenerator

    @abstractmethod
    async def is_available(self) -> bool:
        """Cheap reachability/credential check. Never raises."""
        ...

    @abstractmethod
    async def list_models(self) -> list[str]:
        """Model names the backend offers; empty on failure."""
        ...

    @abstractmethod
    def set_model(self, model: str) -> None: ...

    @abstractmethod
    async def generate(self, prompt: str, options: GenerateOptions | None = None) -> str:
        """Send a prompt and get the raw text response."""
        ...

    @abstractmethod
    async def chat(
        self,
        messages: list[dict[str, str]],
        tools: list[ToolFunction] | None = None,
        options: GenerateOptions | None = None,
    ) -> ChatResponse:
        """Multi-turn chat, optionally offering tools the model may call."""
        ...

    async def generate_object(self, request: GenerationRequest) -> Any:
        """Generate a value that satisfies ``request.schema``."""
        return await self.generator.generate_object(self, request)

    async def close(self) -> None:
        """Release HTTP resources. Override in subclasses that hold sessions."""

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def model_name(self) -> str: ...
