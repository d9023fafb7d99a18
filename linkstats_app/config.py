from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Loading priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values below
    """

    # Environment
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Application
    app_name: str = "Link Stats"
    app_version: str = "1.0.0"

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    base_url: str = "http://127.0.0.1:8000"
    api_prefix: str = ""  # e.g. "/api" puts /shorten and /analytics under /api

    # Entity store
    entity_store_backend: str = "sql"  # Options: "sql", "redis", "memory"
    database_url: str = "sqlite:///./linkstats.db"
    redis_url: str = "redis://localhost:6379/0"
    redis_namespace: str = "linkstats"
    mapping_table: str = "urls"
    mapping_partition: str = "urls"  # All short links share one partition
    event_table: str = "analytics"

    # Slugs
    slug_length: int = 6
    slug_max_retries: int = 5
    custom_slug_max_length: int = 32

    # Click analytics
    click_recording: str = "background"  # Options: "background", "inline"
    top_referrers_limit: int = 5
    direct_referrer_label: str = "Direct"

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Create settings instance
settings = Settings()
