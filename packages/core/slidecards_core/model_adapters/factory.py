"""Provider selection from an AI configuration."""

from slidecards_core.graph.config import GenerationConfig
from slidecards_core.model_adapters.base import ContentProvider
from slidecards_core.model_adapters.google import GoogleContentProvider
from slidecards_core.model_adapters.openai import OpenAICompatibleProvider
from slidecards_core.schemas.ai import GoogleAIConfig, OpenAICompatibleAIConfig


def create_provider(
    config: GoogleAIConfig | OpenAICompatibleAIConfig,
    generation_config: GenerationConfig | None = None,
) -> ContentProvider:
    """Build the content provider described by ``config``.

    Args:
        config: Provider configuration (discriminated on ``provider``)
        generation_config: Retry budget and timeout settings

    Returns:
        Content provider instance
    """
    settings = generation_config or GenerationConfig()
    if isinstance(config, GoogleAIConfig):
        return GoogleContentProvider(
            config,
            timeout=settings.request_timeout,
            max_retries=settings.max_retries,
            base_delay=settings.retry_base_delay,
        )
    if isinstance(config, OpenAICompatibleAIConfig):
        return OpenAICompatibleProvider(config, timeout=settings.request_timeout)
    raise ValueError(f"Unknown provider configuration: {config!r}")
