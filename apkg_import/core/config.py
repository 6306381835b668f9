"""
Importer configuration.

Every value can be overridden through environment variables or a .env file;
each group has its own prefix.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class ImporterConfig(BaseSettings):
    """Configuration of package decoding."""

    model_config = SettingsConfigDict(env_prefix="APKG_", env_file=".env", extra="ignore")

    # Where the extracted collection is staged (None = system temp dir)
    temp_dir: str | None = None
    temp_prefix: str = "apkg-import-"
    # Compare entry CRC-32 values against the extracted payload
    verify_checksums: bool = False


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_", env_file=".env", extra="ignore")

    level: str = "INFO"
    # "console" for colored human-readable output, "json" for JSON lines
    format: str = "console"


class AppConfig(BaseSettings):
    """General application configuration."""

    model_config = SettingsConfigDict(env_prefix="APP_", env_file=".env", extra="ignore")

    name: str = "apkg-import"
    debug: bool = False


class Settings:
    """Aggregates all configuration groups."""

    def __init__(self) -> None:
        self.importer = ImporterConfig()
        self.logging = LoggingConfig()
        self.app = AppConfig()


@lru_cache
def get_settings() -> Settings:
    """Get the settings singleton (cached)."""
    return Settings()


settings = get_settings()
