"""Environment configuration."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Left optional so the analyzer can report a configuration error itself
    openai_api_key: Optional[str] = None
    openai_assistant_id: Optional[str] = None

    # Polling settings
    poll_interval_seconds: float = 1.0
    max_wait_seconds: float = 180.0

    # Wrap the policy text in the JSON schema instruction
    wrap_prompt: bool = True

    # Content fetching
    fetch_timeout_seconds: float = 15.0
    fetch_user_agent: str = "Mozilla/5.0 (compatible; PolicyScope/0.1)"

    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:8000",
    ]

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


@lru_cache
def get_settings() -> Settings:
    """Get application settings (created once per process)."""
    return Settings()
