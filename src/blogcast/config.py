import logging
from functools import lru_cache

from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

from blogcast.errors import StartupError


class Settings(BaseSettings):
    """Application settings loaded from environment variables or `.env` file."""

    log_level: str = Field(default="INFO", description="Logging level")

    # Credentials
    telegram_bot_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("TELEGRAM_BOT_TOKEN", "TELOXIDE_TOKEN"),
    )
    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("OPENAI_API_KEY", "OPENAI_BEARER_TOKEN"),
    )
    telegram_api_url: str = Field(default="https://api.telegram.org", alias="TELEGRAM_API_URL")

    # Browser driver
    browser_path: str | None = Field(
        default=None,
        description="Override for the browser executable, defaults to Playwright's Chromium",
        validation_alias=AliasChoices("BROWSER_PATH", "GECKODRIVER_PATH"),
    )
    browser_debug_port: int = Field(default=9222, alias="BROWSER_DEBUG_PORT")
    browser_start_timeout: float = Field(default=30.0, alias="BROWSER_START_TIMEOUT")

    # Remote models
    rewrite_model: str = Field(default="gpt-4o", alias="REWRITE_MODEL")
    tts_model: str = Field(default="tts-1", alias="TTS_MODEL")
    tts_voice: str = Field(default="nova", alias="TTS_VOICE")

    # Pipeline
    max_chunk_size: int = Field(default=4096, alias="MAX_CHUNK_SIZE")
    extraction_timeout: float = Field(default=60.0, alias="EXTRACTION_TIMEOUT")
    rewrite_timeout: float = Field(default=300.0, alias="REWRITE_TIMEOUT")
    synthesis_timeout: float = Field(default=120.0, alias="SYNTHESIS_TIMEOUT")
    delivery_timeout: float = Field(default=60.0, alias="DELIVERY_TIMEOUT")
    poll_timeout: int = Field(default=30, description="Telegram long-poll seconds", alias="POLL_TIMEOUT")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
        "extra": "ignore",
    }

    @field_validator("max_chunk_size", mode="after")
    @classmethod
    def validate_max_chunk_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("MAX_CHUNK_SIZE must be at least 1")
        return v

    def require_credentials(self) -> None:
        """Raise StartupError if a credential needed at runtime is missing."""
        missing = []
        if not self.telegram_bot_token:
            missing.append("TELEGRAM_BOT_TOKEN")
        if not self.openai_api_key:
            missing.append("OPENAI_API_KEY")
        if missing:
            raise StartupError(f"Missing required environment variables: {', '.join(missing)}")


@lru_cache
def get_settings() -> Settings:  # pragma: no cover
    """Return a cached instance of Settings."""
    s = Settings()
    logging.basicConfig(
        level=s.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger = logging.getLogger(__name__)

    logger.info("=" * 60)
    logger.info("Starting Blogcast")
    logger.info("=" * 60)
    logger.info(f"Browser: {s.browser_path or 'playwright chromium'} (debug port {s.browser_debug_port})")
    logger.info(f"Rewrite model: {s.rewrite_model}")
    logger.info(f"TTS: {s.tts_model} / {s.tts_voice}")
    logger.info(f"Max chunk size: {s.max_chunk_size}")
    logger.info("=" * 60)

    return s


def load_settings() -> Settings:
    """get_settings() for process start-up: invalid configuration becomes a StartupError."""
    try:
        return get_settings()
    except ValidationError as e:
        raise StartupError(f"Invalid configuration: {e}") from e
