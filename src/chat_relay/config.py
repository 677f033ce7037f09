"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from chat_relay.domain.sessions import UnansweredTurnPolicy

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful assistant. "
    "Use the provided context to answer questions accurately."
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    llm_api_key: str
    llm_base_url: str = "https://api.openai.com/v1"
    llm_model: str = "gpt-4o"
    llm_max_tokens: int = 2000
    llm_timeout_seconds: float | None = 60.0
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    image_marker: str = "[with image]"
    unanswered_turn_policy: UnansweredTurnPolicy = UnansweredTurnPolicy.KEEP
    cors_allowed_origins: str | None = None
    static_dir: str | None = None
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
        env_parse_none_str="none",
    )


def parse_allowed_origins(raw: str | None) -> list[str] | None:
    """Parse allowed CORS origins from env; None means reflect any origin."""
    if raw is None:
        return None
    cleaned = raw.strip()
    if cleaned in {"", "*"}:
        return None
    origins = [chunk.strip().rstrip("/") for chunk in cleaned.split(",")]
    return [origin for origin in origins if origin] or None
