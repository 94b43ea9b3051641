"""Content providers.

Supported providers:
- Google: Gemini models with a structured response schema
- OpenAI-compatible: any chat-completions server (OpenAI, Ollama, vLLM, ...)
"""

from slidecards_core.model_adapters.base import (
    ContentProvider,
    build_prompt,
    parse_card_content,
    parse_json_object,
)
from slidecards_core.model_adapters.factory import create_provider
from slidecards_core.model_adapters.google import GoogleContentProvider
from slidecards_core.model_adapters.openai import OpenAICompatibleProvider

__all__ = [
    "ContentProvider",
    "GoogleContentProvider",
    "OpenAICompatibleProvider",
    "build_prompt",
    "create_provider",
    "parse_card_content",
    "parse_json_object",
]
