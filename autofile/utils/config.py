"""
Configuration management for AutoFile.

Uses pydantic-settings to load configuration from environment variables
and .env files.
"""

from functools import lru_cache
from pathlib import Path
from typing import Dict, Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from autofile.models.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Watch Configuration
    watch_dir: Optional[Path] = None
    debounce_seconds: float = 2.0
    settle_delay_ms: int = 500

    # Queue Configuration (0 = unbounded)
    queue_max_size: int = 0
    queue_overflow_policy: Literal["block", "drop_oldest"] = "block"

    # Matcher Configuration
    excluded_folders: str = ""
    similarity_threshold: float = 0.7

    # Destination overrides, e.g. {"image": "Media/Photos"}
    category_destinations: Dict[str, Path] = {}

    # Preprocessing (applied in this order)
    enabled_preprocessors: str = "image_renamer,heic_converter"

    # Ollama Configuration
    ollama_url: str = "http://localhost:11434"
    ollama_embedding_model: str = "nomic-embed-text"
    ollama_timeout: float = 30.0
    # Folder-name embeddings kept in memory (0 disables caching)
    embedding_cache_size: int = 1024

    # Logging Configuration
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("similarity_threshold")
    @classmethod
    def _check_threshold(cls, value: float) -> float:
        if not -1.0 <= value <= 1.0:
            raise ValueError("similarity_threshold must be within [-1, 1]")
        return value

    def get_excluded_folders(self) -> set[str]:
        """Parse excluded folder names into a set."""
        return {
            name.strip()
            for name in self.excluded_folders.split(',')
            if name.strip()
        }

    def get_enabled_preprocessors(self) -> list[str]:
        """Parse enabled preprocessor names, keeping their order."""
        return [
            name.strip().lower()
            for name in self.enabled_preprocessors.split(',')
            if name.strip()
        ]


def get_home_dir() -> Path:
    """Return the user's home directory or raise ConfigurationError."""
    try:
        home = Path.home()
    except (KeyError, RuntimeError) as e:
        raise ConfigurationError(f"Could not determine home directory: {e}") from e

    if not home.is_dir():
        raise ConfigurationError(f"Home directory does not exist: {home}")
    return home


def get_default_watch_dir() -> Path:
    """Return the default directory to monitor (the user's Downloads)."""
    return get_home_dir() / "Downloads"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
