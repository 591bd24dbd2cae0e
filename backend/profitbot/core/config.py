"""Application configuration managed via environment variables."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "ProfitBot Backend"
    debug: bool = False
    log_level: str = "INFO"
    database_url: str = "sqlite:///./profitbot.db"
    openai_api_key: str | None = None
    openai_model: str = "gpt-4.1-mini"
    openai_temperature: float = 0.4
    openai_timeout_seconds: float | None = None
    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "profitbot"


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
