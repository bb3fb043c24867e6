"""Application settings via pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables with CODEARENA_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="CODEARENA_",
        env_file=".env",
        case_sensitive=False,
    )

    # --- Core ---
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    cors_origin_regex: str | None = None
    log_level: str = "INFO"
    log_format: str = "json"

    # --- Storage ---
    storage_backend: str = "auto"  # auto | memory | database
    database_url: str | None = None
    db_pool_size: int = 20
    db_max_overflow: int = 10
    create_schema: bool = True

    # --- Bootstrap ---
    seed_sample_data: bool = True
    admin_username: str = "admin"
    admin_password: str = "admin123"


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
