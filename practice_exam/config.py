"""Configuration management for the practice exam package."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    env: str = "development"
    log_level: str = "INFO"
    log_file: str = "./logs/practice_exam.log"

    # LLM API Keys
    google_api_key: Optional[str] = None

    # Question Generation Settings
    google_model: str = "gemini-2.5-flash"
    generation_temperature: float = 0.7
    generation_max_tokens: int = 32768
    generation_timeout_seconds: float = 180.0

    # History Storage
    history_path: str = "./data/history.json"
    history_key: str = "terraform_prep_history"


# Global settings instance
settings = Settings()
