from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "AI Ekin"
    openai_base_url: str = Field(default="https://api.openai.com/v1", min_length=1, pattern=r"^https?://")
    openai_model: str = Field(default="gpt-4o-mini", min_length=1)
    openai_temperature: float = Field(default=0.6, ge=0, le=2)
    openai_max_tokens: int = Field(default=450, gt=0)
    upstream_timeout_seconds: float = Field(default=30, gt=0)
    rate_limit_window_ms: int = Field(default=60_000, gt=0)
    rate_limit_max_requests: int = Field(default=20, ge=1)
    persona_name: str = "AI Ekin"
    owner_name: str = "Ekin Alcar"
    persona_profile_path: str | None = None


class Credentials(BaseSettings):
    """Secrets that must be looked up per request, never cached at startup."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    openai_api_key: str | None = None


def get_api_key() -> str | None:
    """Return the completion-provider API key, or None if unset or blank."""
    key = Credentials().openai_api_key
    if not key or not key.strip():
        return None
    return key.strip()


settings = Settings()
