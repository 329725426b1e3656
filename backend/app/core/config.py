"""Application configuration using pydantic-settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict

from app.schemas.base import InteractionMode


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Drug Interaction Checker"
    debug: bool = False
    log_level: str = "INFO"

    # RxNav terminology / interaction service
    rxnav_base_url: str = "https://rxnav.nlm.nih.gov/REST"
    rxnav_timeout: float = 10.0
    interaction_mode: InteractionMode = InteractionMode.PER_DRUG

    # Official RxNorm names longer than this are replaced by the search term
    display_name_max_length: int = 50

    # Optional JSON fixture extending the built-in interaction catalog
    interaction_catalog_file: str | None = None

    # API
    api_prefix: str = "/api"
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:3001"]


settings = Settings()
