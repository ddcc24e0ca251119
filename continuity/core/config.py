from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import AliasChoices, AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    """Application configuration loaded from environment variables.

    Values can also be supplied through a ``.env`` file at the project root.
    Optional values left blank in the environment are treated as unset.
    """

    app_name: str = Field(default="Continuity", validation_alias="APP_NAME")
    environment: str = Field(default="development", validation_alias="ENVIRONMENT")
    database_path: Path = Field(
        default=PROJECT_ROOT / "continuity.db",
        validation_alias="DATABASE_PATH",
    )
    seed_on_empty: bool = Field(default=True, validation_alias="SEED_ON_EMPTY")
    gemini_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "API_KEY"),
    )
    gemini_model: str = Field(default="gemini-2.5-flash", validation_alias="GEMINI_MODEL")
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        validation_alias="GEMINI_BASE_URL",
    )
    ai_request_timeout: float = Field(default=30.0, validation_alias="AI_REQUEST_TIMEOUT")
    organization_name: str = Field(default="Acme Corp", validation_alias="ORGANIZATION_NAME")
    assessment_standard: str = Field(
        default="ISO 22301:2019", validation_alias="ASSESSMENT_STANDARD"
    )
    reporting_currency: str = Field(default="USD", validation_alias="REPORTING_CURRENCY")
    review_cycle_months: int = Field(
        default=12, ge=1, le=60, validation_alias="REVIEW_CYCLE_MONTHS"
    )
    allowed_origins: List[AnyHttpUrl] = Field(
        default_factory=list,
        validation_alias="ALLOWED_ORIGINS",
    )
    log_file_path: Path | None = Field(default=None, validation_alias="LOG_FILE_PATH")

    @field_validator("gemini_api_key", "log_file_path", mode="before")
    @classmethod
    def _empty_string_to_none(cls, value):  # type: ignore[override]
        """Coerce blank environment variables to ``None`` so optional values stay optional."""

        if isinstance(value, str) and value.strip() == "":
            return None
        return value

    model_config = SettingsConfigDict(
        env_file=PROJECT_ROOT / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
