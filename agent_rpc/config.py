"""Process configuration, read from the environment and an optional ``.env`` file.

Provider credentials decide which completion backend the server uses:
``GROQ_API_KEY`` selects the primary (OpenAI-compatible) provider, otherwise
``GEMINI_API_KEY`` selects the fallback. With neither set the server refuses
to start.
"""

from typing import Annotated, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Provider credentials
    groq_api_key: Optional[str] = None
    gemini_api_key: Optional[str] = None

    # Primary provider (OpenAI-compatible chat completions)
    groq_base_url: str = "https://api.groq.com/openai/v1"
    groq_model: str = "llama-3.3-70b-versatile"
    temperature: Annotated[float, Field(ge=0.0, le=2.0)] = 0.7
    max_tokens: Annotated[int, Field(gt=0)] = 1024

    # Fallback provider
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"

    # Outbound call timeout in seconds; 0 disables it
    request_timeout: Annotated[float, Field(ge=0.0)] = 60.0

    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    @field_validator("groq_api_key", "gemini_api_key")
    @classmethod
    def _blank_is_unset(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()

    @property
    def outbound_timeout(self) -> Optional[float]:
        return self.request_timeout or None


settings = Settings()


def get_settings() -> Settings:
    return settings


def reload_settings() -> Settings:
    """Re-read the environment; used by tests after changing variables."""
    global settings
    settings = Settings()
    return settings
