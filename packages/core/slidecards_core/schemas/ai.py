"""Content provider configuration."""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class GoogleAIConfig(BaseModel):
    """Structured-output Gemini model."""

    provider: Literal["google"] = "google"
    model_name: str = "gemini-2.5-flash"
    api_key: str = ""
    base_url: str = ""
    use_proxy: bool = False
    nickname: str | None = None

    model_config = ConfigDict(protected_namespaces=())


class OpenAICompatibleAIConfig(BaseModel):
    """Any server speaking the OpenAI chat-completions protocol."""

    provider: Literal["openai-compatible"] = "openai-compatible"
    model_name: str = "gpt-4o-mini"
    api_key: str = ""
    base_url: str = "https://api.openai.com/v1"
    use_proxy: bool = False
    nickname: str | None = None

    model_config = ConfigDict(protected_namespaces=())


AIConfig = Annotated[
    Union[GoogleAIConfig, OpenAICompatibleAIConfig],
    Field(discriminator="provider"),
]

ai_config_adapter: TypeAdapter[AIConfig] = TypeAdapter(AIConfig)


def parse_ai_config(data: dict) -> GoogleAIConfig | OpenAICompatibleAIConfig:
    """Validate a raw provider configuration dictionary.

    Args:
        data: Mapping with a ``provider`` key

    Returns:
        The matching typed configuration
    """
    return ai_config_adapter.validate_python(data)
