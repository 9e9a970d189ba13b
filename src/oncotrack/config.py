"""
Oncotrack Configuration Module

Centralized configuration management using Pydantic Settings.
Supports environment variables and .env files.
"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Questionnaire engine settings."""
    
    model_config = SettingsConfigDict(
        env_prefix="ONCOTRACK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
    
    # Logging; debug forces DEBUG level
    debug: bool = False
    log_level: str = "INFO"
    log_json: bool = False
    
    # Catalog source; the bundled catalog is used when unset
    catalog_path: Path | None = None
    
    # Generation policy
    reject_unresolved: bool = False
    reject_empty: bool = False


class StoreSettings(BaseSettings):
    """Questionnaire store settings."""
    
    model_config = SettingsConfigDict(
        env_prefix="ONCOTRACK_STORE_",
        env_file=".env",
        extra="ignore",
    )
    
    active_queue_limit: int = 50


class Settings:
    """
    Aggregated settings container.
    
    Usage:
        from oncotrack.config import get_settings
        settings = get_settings()
        print(settings.engine.reject_unresolved)
    """
    
    def __init__(self):
        self.engine = EngineSettings()
        self.store = StoreSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    
    Returns:
        Settings: The application settings
    """
    return Settings()
