"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

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

    environment: Literal["development", "test", "production"] = Field(default="development")

    # Inbound API (shared secret checked against X-Api-Key)
    api_key: str = Field(default="")
    cors_origins: list[str] = Field(default_factory=list)

    # Task store (Vikunja)
    vikunja_base_url: str = Field(default="http://localhost:3456")
    vikunja_api_token: str | None = Field(default=None)
    vikunja_timeout_seconds: float = Field(default=30.0)

    # Completion provider (Together.ai)
    together_api_key: str | None = Field(default=None)
    together_base_url: str = Field(default="https://api.together.xyz/v1")
    together_model: str = Field(default="meta-llama/Llama-3.3-70B-Instruct-Turbo")
    llm_temperature: float = Field(default=0.2)
    llm_max_tokens: int = Field(default=2048)
    llm_timeout_seconds: float = Field(default=60.0)

    # Prompt context
    context_task_page_size: int = Field(default=20, ge=1, le=50)
    context_task_sample_size: int = Field(default=10, ge=0)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    log_format: Literal["json", "text"] = Field(default="json")

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
