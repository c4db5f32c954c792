from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Austen"
    app_version: str = "1.0.0"
    log_level: str = "INFO"

    host: str = "127.0.0.1"
    port: int = 5173

    gemini_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("AUSTEN_GEMINI_API_KEY", "GOOGLE_GEMINI_API_KEY"),
    )
    gemini_model: str = "gemini-1.5-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"

    openlibrary_base_url: str = "https://openlibrary.org"
    api_base_url: str = "http://127.0.0.1:5173"

    search_debounce_ms: int = 400
    search_min_length: int = 4
    request_timeout_seconds: Optional[float] = None

    model_config = SettingsConfigDict(env_prefix="AUSTEN_", extra="ignore", populate_by_name=True)


def load_settings() -> Settings:
    return Settings()
