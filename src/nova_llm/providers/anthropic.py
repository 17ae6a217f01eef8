"""Anthropic (Claude) provider."""

from __future__ import annotations

import json
import logging

from ..exceptions import ConfigError, NetworkError
from ..structured.orchestrator import StructuredGenerator
from ..structured.types import GenerateOptions, GenerationStyle
from .base import ChatResponse, LLMProvider, ToolCall, ToolFunction

logger = logging.getLogger("nova-llm")

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 2000


class AnthropicProvider(LLMProvider):
    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-5-haiku-latest",
        generator: StructuredGenerator | None = None,
    ):
        if not api_key:
            raise ConfigError("Anthropic API key is required")
        try:
            import anthropic
        except ImportError:
            raise ImportError(
                "Anthropic SDK not installed. Run: pip install nova-llm[anthropic]"
            )
        self._client = anthropic.AsyncAnthropic(api_key=api_key)
        self._model = model
        self.generator = generator or StructuredGenerator(
            style=GenerationStyle.SINGLE_SHOT
        )

    async def is_available(self) -> bool:
        import anthropic

        try:
            await self._client.models.list(limit=1)
            return True
        except anthropic.APIError as e:
            logger.debug("Anthropic not available: %s", e)
            return False

    async def list_models(self) -> list[str]:
        import anthropic

        try:
            return [m.id async for m in self._client.models.list()]
        except anthropic.APIError as e:
            logger.error("Failed to list Anthropic models: %s", e)
            return []

    def set_model(self, model: str) -> None:
        self._model = model

    async def close(self) -> None:
        await self._client.close()

    async def generate(self, prompt: str, options: GenerateOptions | None = None) -> str:
        response = await self.chat([{"role": "user", "content": prompt}], options=options)
        return response.content

    async def chat(
        self,
        messages: list[dict[str, str]],
        tools: list[ToolFunction] | None = None,
        options: GenerateOptions | None = None,
    ) -> ChatResponse:
        import anthropic

        options = options or GenerateOptions()
        # The Messages API takes the system prompt out of band.
        system_parts = [m["content"] for m in messages if m.get("role") == "system"]
        if options.system_prompt:
            system_parts.insert(0, options.system_prompt)
        kwargs: dict = {
            "model": self._model,
            "max_tokens": options.max_tokens or DEFAULT_MAX_TOKENS,
            "temperature": (
                options.temperature
                if options.temperature is not None
                else DEFAULT_TEMPERATURE
            ),
            "messages": [
                {"role": m["role"], "content": m["content"]}
                for m in messages
                if m.get("role") != "system"
            ],
        }
        if system_parts:
            kwargs["system"] = "\n\n".join(system_parts)
        if tools:
            kwargs["tools"] = [
                {
                    "name": t.name,
                    "description": t.description,
                    "input_schema": t.parameters,
                }
                for t in tools
            ]

        try:
            response = await self._client.messages.create(**kwargs)
        except anthropic.APIError as e:
            raise NetworkError(f"Failed to chat with Anthropic: {e}") from e

        text: list[str] = []
        tool_calls: list[ToolCall] = []
        for block in response.content:
            if block.type == "text":
                text.append(block.text)
            elif block.type == "tool_use":
                tool_calls.append(
                    ToolCall(id=block.id, name=block.name, arguments=json.dumps(block.input))
                )
        return ChatResponse(content="".join(text), tool_calls=tool_calls)

    @property
    def name(self) -> str:
        return "anthropic"

    @property
    def model_name(self) -> str:
        return self._model
