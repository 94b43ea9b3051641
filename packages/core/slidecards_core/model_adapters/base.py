"""Content provider interface and helpers shared by the concrete providers."""

import json
import re
from abc import ABC, abstractmethod
from typing import Any

from pydantic import ValidationError

from slidecards_core.errors import ProviderMalformedResponseError
from slidecards_core.schemas.cards import CardContent
from slidecards_core.utils.logging import get_logger

logger = get_logger(__name__)

# Default timeout for API calls (seconds)
DEFAULT_TIMEOUT = 120.0

FLASHCARD_PROMPT = """You are an expert medical and scientific tutor.

TASK: Create a flashcard for the instrument, object or diagram shown in the image.

CONTEXT PROVIDED:
{context}

TARGET LANGUAGE: "{language}"

INSTRUCTIONS:
1. Analyze context: the context contains text from the PREVIOUS, CURRENT and NEXT slides.
   Search it for names that match the visual appearance of the image.
2. Validate: is this a valid flashcard image?
   - VALID: instruments, scientific devices, anatomical or technical diagrams.
   - INVALID: text screenshots, logos, solid colors, decorative elements.
   If INVALID, set "isValid" to false.
3. Identify and translate: name the object precisely based on the context text.
   Output "name" and "description" in {language}.
4. Describe: give a brief educational description (1-2 sentences) in {language}.

Output format (JSON object):
{{"name": "...", "description": "...", "isValid": true}}
"""

TEXT_ONLY_NOTE = """
The image itself is not available. Identify the most likely object from the
context text alone and keep "isValid" true unless the context names nothing.
"""

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)


def build_prompt(context_text: str, target_language: str, text_only: bool = False) -> str:
    """Fill the flashcard prompt for one image.

    Args:
        context_text: Labelled text of the surrounding slides
        target_language: Language of the card's name and description
        text_only: Whether the image is omitted from the request

    Returns:
        Prompt string
    """
    prompt = FLASHCARD_PROMPT.format(
        context=context_text or "(no text on these slides)",
        language=target_language,
    )
    if text_only:
        prompt += TEXT_ONLY_NOTE
    return prompt


def parse_json_object(content: str) -> dict[str, Any]:
    """Find the JSON object in free-form model output.

    Tried in order, first success wins: the body of a fenced code block, the
    whole text, then the span from the first ``{`` to the last ``}``.

    Args:
        content: Raw response text

    Returns:
        Parsed JSON object

    Raises:
        ProviderMalformedResponseError: If no attempt yields a JSON object
    """
    text = (content or "").strip()
    attempts = []

    fenced = _FENCED_BLOCK.search(text)
    if fenced:
        attempts.append(fenced.group(1).strip())
    attempts.append(text)
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        attempts.append(text[start : end + 1])

    for attempt in attempts:
        try:
            data = json.loads(attempt)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data

    logger.error(f"Failed to parse JSON response. Content: {text[:200]}...")
    raise ProviderMalformedResponseError("Response did not contain a JSON object")


def parse_card_content(content: str) -> CardContent:
    """Parse model output into card content.

    Raises:
        ProviderMalformedResponseError: If the JSON is missing or has the wrong shape
    """
    data = parse_json_object(content)
    try:
        return CardContent.model_validate(data)
    except ValidationError as e:
        raise ProviderMalformedResponseError(f"Unexpected response shape: {e}") from e


class ContentProvider(ABC):
    """Turns an image and its slide context into flashcard content."""

    @abstractmethod
    async def generate(
        self,
        image_data: bytes,
        context_text: str,
        target_language: str,
        mime_type: str = "image/png",
    ) -> CardContent:
        """Name and describe the object in an image.

        Args:
            image_data: Encoded image bytes
            context_text: Labelled text of the surrounding slides
            target_language: Language of the card's name and description
            mime_type: MIME type of image_data

        Returns:
            Card content; ``CardContent.failure(...)`` marks a failed attempt
            the user can retry
        """
        pass
