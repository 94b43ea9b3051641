"""OpenAI-compatible chat-completions content provider."""

import base64
from typing import Any

import httpx
import openai

from slidecards_core.errors import (
    ProviderAuthError,
    ProviderError,
    ProviderTransientError,
)
from slidecards_core.model_adapters.base import (
    DEFAULT_TIMEOUT,
    ContentProvider,
    build_prompt,
    parse_card_content,
)
from slidecards_core.schemas.ai import OpenAICompatibleAIConfig
from slidecards_core.schemas.cards import CardContent
from slidecards_core.utils.logging import get_logger

logger = get_logger(__name__)

AUTH_MESSAGE = "Authentication failed: check the API key of your AI provider."


class OpenAICompatibleProvider(ContentProvider):
    """Provider for servers speaking the OpenAI chat-completions protocol.

    The first request carries the image. If it fails for any reason other
    than rejected credentials, the request is repeated once without the
    image, since some compatible backends refuse multimodal payloads.
    """

    def __init__(
        self,
        config: OpenAICompatibleAIConfig,
        timeout: float = DEFAULT_TIMEOUT,
        client: Any = None,
    ):
        """Initialize the provider.

        Args:
            config: Provider configuration
            timeout: Request timeout in seconds
            client: Optional pre-built AsyncOpenAI-like client
        """
        self.config = config
        self.timeout = timeout
        self._client = client
        logger.info(
            f"Initialized OpenAI-compatible provider "
            f"(model={config.model_name}, base_url={config.base_url})"
        )

    @property
    def client(self) -> Any:
        """Lazy-load the OpenAI client."""
        if self._client is None:
            self._client = openai.AsyncOpenAI(
                api_key=self.config.api_key or "not-needed",
                base_url=self.config.base_url or None,
                timeout=self.timeout,
                max_retries=0,
                http_client=httpx.AsyncClient(
                    trust_env=self.config.use_proxy, timeout=self.timeout
                ),
            )
        return self._client

    def _messages(
        self, prompt: str, image_data: bytes | None, mime_type: str
    ) -> list[dict[str, Any]]:
        if image_data is None:
            return [{"role": "user", "content": prompt}]
        image_b64 = base64.b64encode(image_data).decode("utf-8")
        return [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {
                        "type": "image_url",
                        "image_url": {"url": f"data:{mime_type};base64,{image_b64}"},
                    },
                ],
            }
        ]

    async def _complete(self, messages: list[dict[str, Any]]) -> str:
        response = await self.client.chat.completions.create(
            model=self.config.model_name,
            messages=messages,
            max_tokens=1024,
        )
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def generate(
        self,
        image_data: bytes,
        context_text: str,
        target_language: str,
        mime_type: str = "image/png",
    ) -> CardContent:
        """Generate card content, degrading to a text-only request on failure.

        Raises:
            ProviderAuthError: If the server rejects the credentials (no fallback)
            ProviderTransientError: If the text-only request is rate limited
            ProviderMalformedResponseError: If the text-only answer holds no JSON
            ProviderError: If the text-only request fails otherwise
        """
        prompt = build_prompt(context_text, target_language)
        try:
            content = await self._complete(self._messages(prompt, image_data, mime_type))
            return parse_card_content(content)
        except openai.AuthenticationError as e:
            raise ProviderAuthError(AUTH_MESSAGE) from e
        except Exception as e:
            logger.warning(f"Multimodal request failed ({e}), retrying text-only")

        text_prompt = build_prompt(context_text, target_language, text_only=True)
        try:
            content = await self._complete(self._messages(text_prompt, None, mime_type))
        except openai.AuthenticationError as e:
            raise ProviderAuthError(AUTH_MESSAGE) from e
        except openai.RateLimitError as e:
            raise ProviderTransientError(f"Rate limited: {e}") from e
        except openai.APIError as e:
            raise ProviderError(f"Text-only request failed: {e}") from e
        return parse_card_content(content)
