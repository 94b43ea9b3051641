"""Google Gemini content provider (structured output)."""

import asyncio
import base64
from typing import Any, TypedDict

from slidecards_core.errors import ProviderAuthError, ProviderTransientError
from slidecards_core.model_adapters.base import (
    DEFAULT_TIMEOUT,
    ContentProvider,
    build_prompt,
    parse_card_content,
)
from slidecards_core.schemas.ai import GoogleAIConfig
from slidecards_core.schemas.cards import CardContent
from slidecards_core.utils.logging import get_logger
from slidecards_core.utils.retry import (
    DEFAULT_BASE_DELAY,
    DEFAULT_MAX_RETRIES,
    SleepFunc,
    with_retry,
)

logger = get_logger(__name__)

QUOTA_MESSAGE = "Quota limit reached. Please retry later or use a paid API key."
UNIDENTIFIED_MESSAGE = "Could not identify the object."
AUTH_MESSAGE = "The Google API key was rejected. Check your credentials in the AI settings."


class FlashcardSchema(TypedDict):
    """Response schema enforced on the model."""

    name: str
    description: str
    isValid: bool


def _wrap_google_error(e: Exception) -> Exception:
    """Convert Google API errors to package exceptions for retry handling.

    Args:
        e: Original exception from the Google client

    Returns:
        ProviderAuthError for rejected credentials, ProviderTransientError for
        quota and availability problems, the original exception otherwise
    """
    error_str = str(e).lower()
    error_type = type(e).__name__

    if any(
        indicator in error_str
        for indicator in ["api key not valid", "api_key_invalid", "unauthenticated", "401"]
    ) or error_type in ("Unauthenticated", "PermissionDenied"):
        return ProviderAuthError(f"Google API authentication failed: {e}")

    if any(
        indicator in error_str
        for indicator in [
            "quota",
            "429",
            "exhausted",
            "503",
            "rate limit",
            "unavailable",
        ]
    ) or error_type in ("ResourceExhausted", "TooManyRequests", "ServiceUnavailable"):
        return ProviderTransientError(f"Google API rate limit: {e}")

    return e


class GoogleContentProvider(ContentProvider):
    """Provider backed by a Gemini model constrained to ``FlashcardSchema``.

    Transient failures are retried with exponential backoff (2s, 4s, 8s by
    default). Any failure that survives the retries is returned as a
    ``CardContent.failure`` sentinel instead of raised.
    """

    def __init__(
        self,
        config: GoogleAIConfig,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        base_delay: float = DEFAULT_BASE_DELAY,
        sleep: SleepFunc = asyncio.sleep,
    ):
        """Initialize the Gemini provider.

        Args:
            config: Google provider configuration
            timeout: Request timeout in seconds
            max_retries: Retries after the first attempt for transient failures
            base_delay: Wait before the first retry in seconds
            sleep: Awaitable sleep used between attempts
        """
        self.config = config
        self.timeout = timeout
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.sleep = sleep

        self._client: Any = None
        logger.info(f"Initialized Google provider (model={config.model_name})")

    @property
    def client(self) -> Any:
        """Lazy-load the Google Generative AI client."""
        if self._client is None:
            import google.generativeai as genai

            options: dict[str, Any] = {"api_key": self.config.api_key}
            if self.config.base_url:
                options["client_options"] = {"api_endpoint": self.config.base_url}
            if self.config.use_proxy:
                # The REST transport honours HTTP(S)_PROXY
                options["transport"] = "rest"
            genai.configure(**options)
            self._client = genai
        return self._client

    async def _call_model(self, contents: list[Any]) -> str:
        """Make a single request to the Gemini API."""
        try:
            model_instance = self.client.GenerativeModel(
                model_name=self.config.model_name,
                generation_config={
                    "response_mime_type": "application/json",
                    "response_schema": FlashcardSchema,
                },
            )
            response = await asyncio.wait_for(
                asyncio.to_thread(model_instance.generate_content, contents),
                timeout=self.timeout,
            )
        except Exception as e:
            raise _wrap_google_error(e) from e

        if not response.candidates:
            raise ValueError("No candidates in Gemini response")
        candidate = response.candidates[0]
        if not candidate.content or not candidate.content.parts:
            finish_reason = getattr(candidate, "finish_reason", None)
            raise ValueError(f"No content parts in response (finish_reason={finish_reason})")
        return "".join(part.text for part in candidate.content.parts if hasattr(part, "text"))

    async def generate(
        self,
        image_data: bytes,
        context_text: str,
        target_language: str,
        mime_type: str = "image/png",
    ) -> CardContent:
        image_part = {
            "mime_type": mime_type,
            "data": base64.b64encode(image_data).decode("utf-8"),
        }
        contents = [image_part, build_prompt(context_text, target_language)]

        try:
            content = await with_retry(
                self._call_model,
                contents,
                max_retries=self.max_retries,
                base_delay=self.base_delay,
                operation_name="generate_flashcard",
                sleep=self.sleep,
            )
            return parse_card_content(content)
        except ProviderTransientError:
            return CardContent.failure(QUOTA_MESSAGE)
        except ProviderAuthError:
            return CardContent.failure(AUTH_MESSAGE)
        except Exception as e:
            logger.error(f"Gemini could not generate a flashcard: {e}")
            return CardContent.failure(UNIDENTIFIED_MESSAGE)
