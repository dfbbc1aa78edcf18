"""Configuration management using Pydantic Settings"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_REMINDER_MESSAGE = (
    "Olá! Gostaria de lembrar gentilmente sobre o seu saldo em aberto conosco. "
    "Podemos conversar sobre o acerto?"
)


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./fiado.db"

    # Service
    service_name: str = "fiado-ledger"
    log_level: str = "INFO"

    # Settlement week: 0 = Sunday ... 6 = Saturday
    week_starts_on: int = Field(default=0, ge=0, le=6)

    # Text generation (collection reminders)
    gemini_api_key: str = ""
    gemini_api_base: str = "https://generativelanguage.googleapis.com"
    gemini_model: str = "gemini-2.0-flash"
    reminder_timeout_seconds: float = 5.0
    reminder_fallback_message: str = DEFAULT_REMINDER_MESSAGE


settings = Settings()
