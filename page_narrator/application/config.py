"""Application configuration using Pydantic Settings."""

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    app_name: str = "page-narrator"
    app_version: str = "0.1.0"
    debug: bool = False

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Logging
    log_level: str = "INFO"

    # AWS settings (credentials come from the default credential chain)
    aws_region: str = "us-west-2"

    # Documents
    default_language_code: str = "pt-BR"
    render_dpi: int = Field(default=108, gt=0)  # 1.5x of 72 dpi

    # Speech synthesis
    remote_synthesis_enabled: bool = True
    polly_engine: str = "neural"
    polly_voice_id: Optional[str] = None
    synthesis_chunk_size: int = Field(default=3000, gt=0)
    sample_rate_hz: int = 16000
    local_speech_rate: int = 180

    # Reading progress
    progress_backend: Literal["local", "dynamodb"] = "local"
    progress_table_name: str = "ReadingProgress"

    # Outbound messages buffered per session
    outbound_queue_size: int = Field(default=100, gt=0)


# Create a singleton instance
settings = Settings()
