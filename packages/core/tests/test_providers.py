"""Tests for the content providers."""

from types import SimpleNamespace
from typing import Any

import httpx
import openai
import pytest

from slidecards_core.errors import (
    ProviderAuthError,
    ProviderMalformedResponseError,
    ProviderTransientError,
)
from slidecards_core.graph.config import GenerationConfig
from slidecards_core.model_adapters import (
    GoogleContentProvider,
    OpenAICompatibleProvider,
    build_prompt,
    create_provider,
    parse_card_content,
    parse_json_object,
)
from slidecards_core.model_adapters.google import (
    AUTH_MESSAGE,
    QUOTA_MESSAGE,
    UNIDENTIFIED_MESSAGE,
    _wrap_google_error,
)
from slidecards_core.schemas.ai import GoogleAIConfig, OpenAICompatibleAIConfig

VALID_JSON = '{"name": "Scalpel", "description": "A small blade.", "isValid": true}'


class TestJsonExtraction:
    """Tests for pulling JSON out of free-form text."""

    def test_fenced_block(self) -> None:
        """A fenced code block is tried first."""
        text = f"Here you go:\n```json\n{VALID_JSON}\n```\nThanks"
        assert parse_json_object(text)["name"] == "Scalpel"

    def test_direct_json(self) -> None:
        assert parse_json_object(VALID_JSON)["isValid"] is True

    def test_embedded_braces(self) -> None:
        """Text around the object is ignored."""
        text = f"The answer is {VALID_JSON} as requested."
        assert parse_json_object(text)["description"] == "A small blade."

    def test_fenced_block_wins(self) -> None:
        """The fenced block takes precedence over the surrounding text."""
        text = '{"name": "Outer"} ```{"name": "Inner", "description": "", "isValid": true}```'
        assert parse_json_object(text)["name"] == "Inner"

    def test_no_json_raises(self) -> None:
        with pytest.raises(ProviderMalformedResponseError):
            parse_json_object("I cannot help with that.")

    def test_arrays_rejected(self) -> None:
        """Only objects count as a result."""
        with pytest.raises(ProviderMalformedResponseError):
            parse_json_object("[1, 2, 3]")

    def test_card_content(self) -> None:
        """isValid maps onto is_valid."""
        content = parse_card_content('{"name": "Logo", "description": "", "isValid": false}')
        assert content.name == "Logo"
        assert content.is_valid is False

    def test_wrong_shape(self) -> None:
        with pytest.raises(ProviderMalformedResponseError):
            parse_card_content('{"name": ["a"], "description": 3}')


class TestPrompt:
    """Tests for prompt construction."""

    def test_contains_context_and_language(self) -> None:
        prompt = build_prompt("[SLIDE 1]: Scalpel", "German")
        assert "[SLIDE 1]: Scalpel" in prompt
        assert '"German"' in prompt
        assert "isValid" in prompt

    def test_text_only_note(self) -> None:
        assert "not available" in build_prompt("ctx", "French", text_only=True)
        assert "not available" not in build_prompt("ctx", "French")


class TestGoogleErrorClassification:
    """Tests for Google error wrapping."""

    @pytest.mark.parametrize(
        "message",
        ["429 Resource has been exhausted", "Quota exceeded", "503 Service Unavailable"],
    )
    def test_transient(self, message: str) -> None:
        assert isinstance(_wrap_google_error(Exception(message)), ProviderTransientError)

    def test_auth(self) -> None:
        wrapped = _wrap_google_error(Exception("400 API key not valid. Please pass a valid API key."))
        assert isinstance(wrapped, ProviderAuthError)

    def test_other_errors_unchanged(self) -> None:
        error = ValueError("bad request")
        assert _wrap_google_error(error) is error


def _google(sleeps: list[float]) -> GoogleContentProvider:
    async def fake_sleep(seconds: float) -> None:
        sleeps.append(seconds)

    return GoogleContentProvider(GoogleAIConfig(api_key="test"), sleep=fake_sleep)


class TestGoogleContentProvider:
    """Tests for the structured-output provider."""

    @pytest.mark.asyncio
    async def test_backoff_then_success(self) -> None:
        """Two quota failures wait 2s then 4s before the third call succeeds."""
        sleeps: list[float] = []
        provider = _google(sleeps)
        calls = 0

        async def call_model(contents: list[Any]) -> str:
            nonlocal calls
            calls += 1
            if calls < 3:
                raise ProviderTransientError("429 quota")
            return VALID_JSON

        provider._call_model = call_model  # type: ignore[method-assign]
        content = await provider.generate(b"png", "context", "French")

        assert content.name == "Scalpel"
        assert calls == 3
        assert sleeps == [2, 4]

    @pytest.mark.asyncio
    async def test_exhausted_quota_sentinel(self) -> None:
        """After three retries (2s, 4s, 8s) the quota sentinel is returned."""
        sleeps: list[float] = []
        provider = _google(sleeps)

        async def call_model(contents: list[Any]) -> str:
            raise ProviderTransientError("quota exhausted")

        provider._call_model = call_model  # type: ignore[method-assign]
        content = await provider.generate(b"png", "context", "French")

        assert content.is_failure
        assert content.is_valid is True
        assert content.description == QUOTA_MESSAGE
        assert sleeps == [2, 4, 8]

    @pytest.mark.asyncio
    async def test_non_transient_sentinel(self) -> None:
        """Other failures are not retried."""
        sleeps: list[float] = []
        provider = _google(sleeps)
        calls = 0

        async def call_model(contents: list[Any]) -> str:
            nonlocal calls
            calls += 1
            raise ValueError("No candidates in Gemini response")

        provider._call_model = call_model  # type: ignore[method-assign]
        content = await provider.generate(b"png", "context", "French")

        assert content.description == UNIDENTIFIED_MESSAGE
        assert calls == 1
        assert sleeps == []

    @pytest.mark.asyncio
    async def test_auth_sentinel(self) -> None:
        """Rejected credentials give a credential message."""
        provider = _google([])

        async def call_model(contents: list[Any]) -> str:
            raise ProviderAuthError("bad key")

        provider._call_model = call_model  # type: ignore[method-assign]
        content = await provider.generate(b"png", "context", "French")
        assert content.description == AUTH_MESSAGE

    @pytest.mark.asyncio
    async def test_request_contents(self) -> None:
        """The image goes first, followed by the prompt."""
        provider = _google([])
        seen: list[Any] = []

        async def call_model(contents: list[Any]) -> str:
            seen.extend(contents)
            return VALID_JSON

        provider._call_model = call_model  # type: ignore[method-assign]
        await provider.generate(b"\x89PNG", "[SLIDE 1]: Scalpel", "Spanish", "image/jpeg")

        assert seen[0]["mime_type"] == "image/jpeg"
        assert "[SLIDE 1]: Scalpel" in seen[1]
        assert "Spanish" in seen[1]


class FakeCompletions:
    """Stands in for ``client.chat.completions``."""

    def __init__(self, *responses: Any):
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    async def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        message = SimpleNamespace(content=response)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _openai(*responses: Any) -> tuple[OpenAICompatibleProvider, FakeCompletions]:
    completions = FakeCompletions(*responses)
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    provider = OpenAICompatibleProvider(
        OpenAICompatibleAIConfig(api_key="sk-test", base_url="http://localhost:11434/v1"),
        client=client,
    )
    return provider, completions


def _auth_error() -> openai.AuthenticationError:
    request = httpx.Request("POST", "http://localhost:11434/v1/chat/completions")
    return openai.AuthenticationError(
        "Incorrect API key provided",
        response=httpx.Response(401, request=request),
        body=None,
    )


def _has_image(call: dict[str, Any]) -> bool:
    content = call["messages"][0]["content"]
    return isinstance(content, list) and any(part["type"] == "image_url" for part in content)


class TestOpenAICompatibleProvider:
    """Tests for the chat-completions provider."""

    @pytest.mark.asyncio
    async def test_multimodal_success(self) -> None:
        """A good first answer needs a single call carrying the image."""
        provider, completions = _openai(f"```json\n{VALID_JSON}\n```")
        content = await provider.generate(b"png", "ctx", "French")

        assert content.name == "Scalpel"
        assert len(completions.calls) == 1
        assert _has_image(completions.calls[0])

    @pytest.mark.asyncio
    async def test_text_only_fallback(self) -> None:
        """A rejected multimodal call is retried once without the image."""
        provider, completions = _openai(RuntimeError("image input not supported"), VALID_JSON)
        content = await provider.generate(b"png", "ctx", "French")

        assert content.name == "Scalpel"
        assert len(completions.calls) == 2
        assert not _has_image(completions.calls[1])

    @pytest.mark.asyncio
    async def test_malformed_answer_falls_back(self) -> None:
        """Unparsable output also triggers the text-only attempt."""
        provider, completions = _openai("no json here", f"Sure! {VALID_JSON}")
        content = await provider.generate(b"png", "ctx", "French")

        assert content.name == "Scalpel"
        assert len(completions.calls) == 2

    @pytest.mark.asyncio
    async def test_auth_failure_skips_fallback(self) -> None:
        """A 401 is raised immediately, with no text-only attempt."""
        provider, completions = _openai(_auth_error(), VALID_JSON)

        with pytest.raises(ProviderAuthError, match="API key"):
            await provider.generate(b"png", "ctx", "French")

        assert len(completions.calls) == 1

    @pytest.mark.asyncio
    async def test_fallback_malformed_raises(self) -> None:
        """If the degraded answer is unusable too, the error surfaces."""
        provider, _ = _openai(RuntimeError("boom"), "still nothing")
        with pytest.raises(ProviderMalformedResponseError):
            await provider.generate(b"png", "ctx", "French")


class TestCreateProvider:
    """Tests for provider selection."""

    def test_google(self) -> None:
        provider = create_provider(
            GoogleAIConfig(api_key="k"), GenerationConfig(max_retries=5, retry_base_delay=1.0)
        )
        assert isinstance(provider, GoogleContentProvider)
        assert provider.max_retries == 5
        assert provider.base_delay == 1.0

    def test_openai_compatible(self) -> None:
        provider = create_provider(OpenAICompatibleAIConfig(api_key="k"))
        assert isinstance(provider, OpenAICompatibleProvider)
