from pydantic_settings import BaseSettings, SettingsConfigDict

from kvshortener.constants import (
    DEFAULT_CODE_LENGTH,
    LENGTH_GROWTH_TRIALS,
    MAX_TRIALS,
)


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
    debug: bool = False

    # Application
    app_name: str = "KV URL Shortener"
    app_version: str = "1.0.0"

    # Server
    host: str = "127.0.0.1"
    port: int = 8077
    base_url: str = "http://localhost:8077"

    # Key-value store
    store_backend: str = "sqlite"  # Options: "sqlite", "memory"
    store_path: str = "./kvshortener.db"
    store_busy_timeout: float = 30.0  # Seconds a writer waits for the write lock

    # Short code generation
    default_code_length: int = DEFAULT_CODE_LENGTH  # Used until settings:last_length exists
    max_trials: int = MAX_TRIALS
    length_growth_trials: int = LENGTH_GROWTH_TRIALS

    # Hit queue settings
    queue_max_size: int = 10000
    queue_batch_size: int = 100  # Number of hits applied per worker round
    queue_block_time: int = 1000  # Worker poll wait in milliseconds

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Create settings instance
settings = Settings()
