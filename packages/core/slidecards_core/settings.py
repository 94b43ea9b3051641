"""Application settings loaded from environment variables."""

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from slidecards_core.graph.config import ExtractionConfig, GenerationConfig
from slidecards_core.schemas.ai import GoogleAIConfig, OpenAICompatibleAIConfig
from slidecards_core.storage import JsonFileDeckStore
from slidecards_core.utils.logging import set_log_level


class Settings(BaseSettings):
    """Runtime configuration, read from ``SLIDECARDS_*`` variables or ``.env``."""

    # Content provider
    provider: Literal["google", "openai-compatible"] = "google"
    model_name: str = "gemini-2.5-flash"
    api_key: str = ""
    base_url: str = ""
    use_proxy: bool = False

    # Generation
    target_language: str = "French"
    batch_size: int = 1
    max_retries: int = 3
    retry_base_delay: float = 2.0
    request_timeout: float = 120.0

    # Extraction
    pdf_min_side: int = 20
    pptx_min_side: int = 16
    max_image_dimension: int = 1024
    render_pages_when_empty: bool = False

    # Persistence
    data_dir: Path = Path.home() / ".slidecards"

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="SLIDECARDS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        protected_namespaces=(),
    )

    def ai_config(self) -> GoogleAIConfig | OpenAICompatibleAIConfig:
        """Build the provider configuration."""
        if self.provider == "openai-compatible":
            return OpenAICompatibleAIConfig(
                model_name=self.model_name,
                api_key=self.api_key,
                base_url=self.base_url or "https://api.openai.com/v1",
                use_proxy=self.use_proxy,
            )
        return GoogleAIConfig(
            model_name=self.model_name,
            api_key=self.api_key,
            base_url=self.base_url,
            use_proxy=self.use_proxy,
        )

    def extraction_config(self) -> ExtractionConfig:
        """Build the extraction configuration."""
        return ExtractionConfig(
            pdf_min_side=self.pdf_min_side,
            pptx_min_side=self.pptx_min_side,
            max_image_dimension=self.max_image_dimension,
            render_pages_when_empty=self.render_pages_when_empty,
        )

    def generation_config(self) -> GenerationConfig:
        """Build the generation configuration."""
        return GenerationConfig(
            batch_size=self.batch_size,
            target_language=self.target_language,
            max_retries=self.max_retries,
            retry_base_delay=self.retry_base_delay,
            request_timeout=self.request_timeout,
        )

    def deck_store(self) -> JsonFileDeckStore:
        """Deck store rooted at ``data_dir``."""
        return JsonFileDeckStore(self.data_dir)

    def apply_logging(self) -> None:
        """Push ``log_level`` onto the package loggers."""
        set_log_level(self.log_level)


def load_settings(**overrides: object) -> Settings:
    """Load settings from the environment, applying explicit overrides."""
    settings = Settings(**overrides)
    settings.apply_logging()
    return settings
