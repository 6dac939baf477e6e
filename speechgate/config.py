"""
Application configuration via pydantic-settings.

Values come from the environment or a ``.env`` file. Use ``get_settings()``
to obtain the cached instance and pass it to ``create_app()``.
"""

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MAX_UPLOAD_BYTES = 10 * 1024 * 1024


class Settings(BaseSettings):
    """Gateway settings loaded from environment / `.env` file.

    Attributes:
        recognition_mode: "simulated" fabricates results, "proxy" forwards
            the upload to ``{api_base_url}/predict-audio``.
        api_base_url: Base URL of the external prediction service.
        upstream_timeout: Seconds before the upstream call is abandoned.
            ``None`` leaves it unbounded.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Recognition ---
    recognition_mode: Literal["simulated", "proxy"] = "simulated"
    api_base_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("api_base_url", "next_public_api_base_url"),
    )
    upstream_timeout: float | None = None

    # --- Upload limits ---
    max_upload_bytes: int = MAX_UPLOAD_BYTES

    # --- Simulated latency (seconds) ---
    simulated_delay_min: float = 2.0
    simulated_delay_max: float = 5.0

    # --- Application ---
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance; the .env file is read only once."""
    return Settings()
