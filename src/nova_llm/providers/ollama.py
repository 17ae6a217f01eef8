"""Ollama provider — local model server over its HTTP API.

Endpoints used: GET /api/tags, POST /api/generate, POST /api/chat.
Local models drift in format from sample to sample, so structured
generation defaults to the retrying strategy.
"""

from __future__ import annotations

import asyncio
import json
import logging

import aiohttp

from ..exceptions import NetworkError
from ..structured.orchestrator import StructuredGenerator
from ..structured.types import GenerateOptions, GenerationStyle
from .base import ChatResponse, LLMProvider, ToolCall, ToolFunction

logger = logging.getLogger("nova-llm")

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 2000


class OllamaProvider(LLMProvider):
    def __init__(
        self,
        model: str = "llama3",
        api_url: str = "http://localhost:11434",
        generator: StructuredGenerator | None = None,
        timeout: float = 120.0,
    ):
        self._model = model
        self._base_url = api_url.rstrip("/")
        self._timeout = timeout
        self._session: aiohttp.ClientSession | None = None
        self.generator = generator or StructuredGenerator(style=GenerationStyle.RETRY)

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=self._timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def is_available(self) -> bool:
        session = self._get_session()
        try:
            async with session.get(
                f"{self._base_url}/api/tags", timeout=aiohttp.ClientTimeout(total=5)
            ) as resp:
                return resp.status < 400
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.debug("Ollama not available: %s", e)
            return False

    async def list_models(self) -> list[str]:
        session = self._get_session()
        try:
            async with session.get(f"{self._base_url}/api/tags") as resp:
                if resp.status >= 400:
                    raise NetworkError(f"HTTP {resp.status}")
                data = await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError, NetworkError) as e:
            logger.error("Failed to list Ollama models: %s", e)
            return []
        return [m["name"] for m in data.get("models") or [] if "name" in m]

    def set_model(self, model: str) -> None:
        self._model = model

    async def _post(self, path: str, body: dict) -> dict:
        session = self._get_session()
        try:
            async with session.post(f"{self._base_url}{path}", json=body) as resp:
                if resp.status >= 400:
                    detail = await resp.text()
                    raise NetworkError(
                        f"Ollama API error: {resp.status} {detail[:200]}".rstrip()
                    )
                return await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NetworkError(f"Failed to reach Ollama at {self._base_url}: {e}") from e

    def _options(self, options: GenerateOptions) -> dict:
        return {
            "temperature": (
                options.temperature
                if options.temperature is not None
                else DEFAULT_TEMPERATURE
            ),
            "num_predict": options.max_tokens or DEFAULT_MAX_TOKENS,
        }

    async def generate(self, prompt: str, options: GenerateOptions | None = None) -> str:
        options = options or GenerateOptions()
        body: dict = {
            "model": self._model,
            "prompt": prompt,
            "stream": False,
            "options": self._options(options),
        }
        if options.system_prompt:
            body["system"] = options.system_prompt
        data = await self._post("/api/generate", body)
        return data.get("response") or ""

    async def chat(
        self,
        messages: list[dict[str, str]],
        tools: list[ToolFunction] | None = None,
        options: GenerateOptions | None = None,
    ) -> ChatResponse:
        options = options or GenerateOptions()
        if options.system_prompt:
            messages = [{"role": "system", "content": options.system_prompt}, *messages]
        body: dict = {
            "model": self._model,
            "messages": messages,
            "stream": False,
            "options": self._options(options),
        }
        if tools:
            body["tools"] = [
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

        data = await self._post("/api/chat", body)
        message = data.get("message") or {}
        tool_calls = []
        for i, call in enumerate(message.get("tool_calls") or []):
            fn = call.get("function") or {}
            args = fn.get("arguments", {})
            tool_calls.append(
                ToolCall(
                    id=call.get("id") or f"call_{i}",
                    name=fn.get("name", ""),
                    arguments=args if isinstance(args, str) else json.dumps(args),
                )
            )
        return ChatResponse(content=message.get("content") or "", tool_calls=tool_calls)

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self._session:
            await self._session.close()
            self._session = None

    @property
    def name(self) -> str:
        return "ollama"

    @property
    def model_name(self) -> str:
        return self._model
