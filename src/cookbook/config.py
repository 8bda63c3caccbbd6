"""
Cookbook - Configuration and settings.

All tunables for fetching, document gating, import batching and backups
live here and can be overridden from the environment or a .env file.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class CookbookSettings(BaseSettings):
    """Settings for the ingestion and transfer pipeline."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    cookbook_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Web fetching
    fetch_timeout_seconds: float = 10.0
    user_agent: str = "Mozilla/5.0 (compatible; PersonalCookbook/1.0)"
    max_redirects: int = 5
    max_retries: int = 2
    retry_delay_seconds: float = 1.0

    # Batch URL ingestion
    batch_max_concurrent: int = 3
    max_batch_urls: int = 50

    # Documents
    max_document_bytes: int = 10 * 1024 * 1024
    allowed_document_types: list[str] = ["pdf", "docx", "doc", "txt", "md"]

    # Import / export
    import_batch_size: int = 10
    backup_version: str = "1.0.0"

    # Local JSON store used by the CLI
    store_path: str = "cookbook.json"
    dev_user_id: str = "local"


@lru_cache
def get_settings() -> CookbookSettings:
    """Get cached settings instance."""
    return CookbookSettings()


class _SettingsProxy:
    """Lazy proxy so importing this module never reads the environment."""

    _instance: CookbookSettings | None = None

    def __getattr__(self, name: str):
        if self._instance is None:
            self._instance = get_settings()
        return getattr(self._instance, name)


settings = _SettingsProxy()
