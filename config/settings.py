"""Application configuration using Pydantic Settings."""

from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Literal
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Telegram
    TELEGRAM_BOT_TOKEN: str = ""

    # News summarization service
    NEWS_API_BASE_URL: str = "http://localhost:8787"
    REQUEST_TIMEOUT: float = Field(default=30.0, gt=0)
    CHAT_TRANSPORT: Literal["rest", "agent", "agent_stream"] = "rest"
    AGENT_ID: str = "newsSummarizer"
    NEWS_TOOL_NAME: str = "fetchNewsFromRss"

    # Connectivity polling (seconds)
    HEALTH_CHECK_INTERVAL: int = Field(default=60, gt=0)

    # App Settings
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    TIMEZONE: str = "Asia/Shanghai"

    # Re-render a streamed reply once it grew by this many characters
    STREAM_EDIT_MIN_CHARS: int = 80

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    @property
    def streaming(self) -> bool:
        return self.CHAT_TRANSPORT == "agent_stream"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
