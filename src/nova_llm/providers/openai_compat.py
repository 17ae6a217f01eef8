"""OpenAI-compatible chat completion provider.

Covers: OpenAI, Azure OpenAI (via base_url), and any service that
implements the OpenAI chat completions API. Hosted models follow JSON
instructions reliably, so a malformed answer is treated as final: the
default structured strategy is single-shot.
"""

from __future__ import annotations

import logging

from ..exceptions import ConfigError, NetworkError
from ..structured.orchestrator import StructuredGenerator
from ..structured.types import GenerateOptions, GenerationStyle
from .base import ChatResponse, LLMProvider, ToolCall, ToolFunction

logger = logging.getLogger("nova-llm")

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 2000


class OpenAICompatProvider(LLMProvider):
    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4",
        base_url: str | None = None,
        generator: StructuredGenerator | None = None,
    ):
        if not api_key:
            raise ConfigError("OpenAI API key is required")
        try:
            from openai import AsyncOpenAI
        except ImportError:
            raise ImportError(
                "OpenAI SDK not installed. Run: pip install nova-llm[openai]"
            )
        kwargs: dict = {"api_key": api_key}
        if base_url:
            kwargs["base_url"] = base_url
        self._client = AsyncOpenAI(**kwargs)
        self._model = model
        self._base_url = base_url
        self.generator = generator or StructuredGenerator(
            style=GenerationStyle.SINGLE_SHOT
        )

    async def is_available(self) -> bool:
        from openai import APIError

        try:
            await self._client.models.list()
            return True
        except APIError as e:
            logger.debug("OpenAI not available: %s", e)
            return False

    async def list_models(self) -> list[str]:
        from openai import APIError

        try:
            return [m.id async for m in self._client.models.list()]
        except APIError as e:
            logger.error("Failed to list OpenAI models: %s", e)
            return []

    def set_model(self, model: str) -> None:
        self._model = model

    async def close(self) -> None:
        await self._client.close()

    async def generate(self, prompt: str, options: GenerateOptions | None = None) -> str:
        options = options or GenerateOptions()
        messages = []
        if options.system_prompt:
            messages.append({"role": "system", "content": options.system_prompt})
        messages.append({"role": "user", "content": prompt})
        response = await self.chat(messages, options=options)
        return response.content

    async def chat(
        self,
        messages: list[dict[str, str]],
        tools: list[ToolFunction] | None = None,
        options: GenerateOptions | None = None,
    ) -> ChatResponse:
        from openai import APIError

        options = options or GenerateOptions()
        kwargs: dict = {
            "model": self._model,
            "messages": messages,
            "temperature": (
                options.temperature
                if options.temperature is not None
                else DEFAULT_TEMPERATURE
            ),
            "max_tokens": options.max_tokens or DEFAULT_MAX_TOKENS,
        }
        if tools:
            kwargs["tools"] = [
                {
                    "type": "function",
                    "function": {
                        "name": t.name,
                        "description": t.description,
                        "parameters": t.parameters,
                    },
                }
                for t in tools
            ]

        try:
            response = await self._client.chat.completions.create(**kwargs)
        except APIError as e:
            raise NetworkError(f"Failed to chat with OpenAI: {e}") from e

        if not response.choices:
            raise NetworkError("No response from OpenAI")
        message = response.choices[0].message
        tool_calls = [
            ToolCall(id=tc.id, name=tc.function.name, arguments=tc.function.arguments)
            for tc in message.tool_calls or []
        ]
        # Content is None for refusals and pure tool-call turns.
        return ChatResponse(content=message.content or "", tool_calls=tool_calls)

    @property
    def name(self) -> str:
        return "openai"

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def base_url(self) -> str | None:
        return self._base_url
