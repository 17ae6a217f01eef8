"""LLM providers — Ollama, OpenAI-compatible, Anthropic, and a fallback stub."""

from .base import ChatResponse, LLMProvider, ToolCall, ToolFunction
from .factory import create_provider

__all__ = [
    "ChatResponse",
    "LLMProvider",
    "ToolCall",
    "ToolFunction",
    "create_provider",
]
